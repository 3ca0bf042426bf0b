"""Shared helpers for FountainScan."""
