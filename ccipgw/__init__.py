"""Offchain CCIP-Read gateway for ENS names, with multicoin address encoding and signed responses."""

__version__ = "0.0.1"