[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ccipgw"
version = "0.0.1"
description = "Offchain CCIP-Read gateway for ENS names, with multicoin address encoding and signed responses"
requires-python = ">=3.10"
keywords = ["ens", "ccip-read", "eip-3668", "gateway", "resolver", "multicoin", "ethereum"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Name Service (DNS)",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "pycryptodome>=3.18",
    "cbor2>=5.4",
    "starlette>=0.27",
    "uvicorn>=0.23",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "httpx>=0.24",
]

[project.scripts]
ccipgw = "ccipgw.server:main"

[tool.hatch.build.targets.wheel]
packages = ["ccipgw"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
