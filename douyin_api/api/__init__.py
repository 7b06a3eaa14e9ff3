"""API endpoints."""

from douyin_api.api import admin, health, metrics, parse

__all__ = [
    "admin",
    "health",
    "metrics",
    "parse",
]
