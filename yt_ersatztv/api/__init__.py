"""API endpoints."""

from yt_ersatztv.api import convert, health, metrics

__all__ = [
    "convert",
    "health",
    "metrics",
]
