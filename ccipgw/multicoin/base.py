"""Common interface and errors of the multicoin address encoders."""

from __future__ import annotations

from abc import ABC, abstractmethod


class MulticoinEncoderError(ValueError):
    """An address does not have the structure its coin requires."""

    def __init__(self, reason: str = "") -> None:
        super().__init__(f"Invalid structure: {reason}")
        self.reason = reason


class NotSupportedError(MulticoinEncoderError):
    """No encoder exists for the requested coin type."""

    def __init__(self) -> None:
        ValueError.__init__(self, "Not supported")
        self.reason = "not supported"


class MulticoinEncoder(ABC):
    """Turns a coin's textual address into the binary form stored on chain."""

    @abstractmethod
    def encode(self, data: str) -> bytes:
        """Return the binary form of the address, or raise MulticoinEncoderError."""