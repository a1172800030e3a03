"""Core infrastructure for the memory match server."""

from core.settings import Settings

__all__ = [
    "Settings",
]
