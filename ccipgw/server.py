"""HTTP server of the gateway and the command that starts it."""

from __future__ import annotations

import argparse
import json
import logging
import os
from dataclasses import asdict
from typing import Sequence

import uvicorn
from dotenv import find_dotenv, load_dotenv
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from .database import NodeNotFoundError, bootstrap
from .gateway import CCIPEndpointError, GlobalState, ResolveCCIPPostPayload, handle
from .secp256k1 import Wallet
from .selfservice import AuthError, UpdateNamePayload, update_name, view_name

logger = logging.getLogger(__name__)

BANNER = "CCIP Gateway v0.0.1!"


def _bad_body(exc: Exception) -> PlainTextResponse:
    return PlainTextResponse(f"Failed to parse the request body as JSON: {exc}", status_code=400)


def _update_payload(raw: bytes) -> UpdateNamePayload:
    body = json.loads(raw)
    if not isinstance(body, dict):
        raise ValueError("request body must be a JSON object")
    fields = {key: body.get(key) for key in ("payload", "auth")}
    for key, value in fields.items():
        if not isinstance(value, str):
            raise ValueError(f"missing or non-string field `{key}`")
    return UpdateNamePayload(**fields)


def create_app(state: GlobalState, selfservice: bool = False) -> Starlette:
    """Build the web application; ``selfservice`` adds the ``/update`` route."""

    async def root(request: Request) -> Response:
        return PlainTextResponse(BANNER)

    async def gateway(request: Request) -> Response:
        # The body is parsed whatever its content type: some clients send it wrongly.
        try:
            payload = ResolveCCIPPostPayload.from_json(await request.body())
        except ValueError as exc:
            return _bad_body(exc)
        try:
            result = await run_in_threadpool(handle, payload, state)
        except CCIPEndpointError as exc:
            result = exc.to_response()
        return Response(
            result.to_json(), status_code=result.status_code, media_type="application/json"
        )

    async def update(request: Request) -> Response:
        try:
            payload = _update_payload(await request.body())
        except ValueError as exc:
            return _bad_body(exc)
        try:
            await run_in_threadpool(update_name, state, payload, True)
        except AuthError as exc:
            return PlainTextResponse(str(exc), status_code=403)
        except NodeNotFoundError as exc:
            return PlainTextResponse(str(exc), status_code=404)
        except ValueError as exc:
            return PlainTextResponse(str(exc), status_code=400)
        return PlainTextResponse("ok")

    async def view(request: Request) -> Response:
        name = request.path_params["name"]
        try:
            result = await run_in_threadpool(view_name, state, name)
        except NodeNotFoundError as exc:
            return PlainTextResponse(str(exc), status_code=404)
        return JSONResponse(asdict(result))

    routes = [
        Route("/", root, methods=["GET"]),
        Route("/gateway", gateway, methods=["POST"]),
    ]
    if selfservice:
        routes.append(Route("/update", update, methods=["POST"]))
    routes.append(Route("/view/{name}", view, methods=["GET"]))

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origin_regex=".*",
            allow_methods=["*"],
            allow_headers=["*"],
            allow_credentials=True,
            expose_headers=["*"],
        )
    ]
    return Starlette(routes=routes, middleware=middleware)


def _port() -> int:
    text = os.environ.get("PORT", "3000")
    try:
        port = int(text)
    except ValueError:
        raise SystemExit("port should fit in u16") from None
    if not 0 <= port <= 0xFFFF:
        raise SystemExit("port should fit in u16")
    return port


def main(argv: Sequence[str] | None = None) -> None:
    """Start the gateway: read settings from the environment and serve HTTP."""
    parser = argparse.ArgumentParser(prog="ccipgw", description="ENS CCIP-read gateway")
    parser.add_argument(
        "--selfservice", action="store_true", help="enable the /update endpoint"
    )
    args = parser.parse_args(argv)

    load_dotenv(find_dotenv(usecwd=True))
    logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    db = bootstrap()
    try:
        key_hex = os.environ.get("PRIVATE_KEY")
        if key_hex is None:
            raise SystemExit("Could not find PRIVATE_KEY")
        wallet = Wallet.from_hex(key_hex)
        logger.info("Signing with address: %s", wallet.address)

        state = GlobalState(db=db, wallet=wallet)
        port = _port()
        logger.info("Starting webserver")
        logger.debug("Listening on 0.0.0.0:%d", port)
        uvicorn.run(create_app(state, args.selfservice), host="0.0.0.0", port=port)
        logger.info("Shutting down")
    finally:
        db.close()