"""Storage modules for FountainScan."""

from .database import Database

__all__ = ["Database"]
