"""FountainScan - heuristic scam detection for visited pages."""

__version__ = "0.1.0"
