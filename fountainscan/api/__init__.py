"""HTTP API for FountainScan."""

from .server import ApiServer

__all__ = ["ApiServer"]
