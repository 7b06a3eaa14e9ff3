"""Middleware package for the API."""

from douyin_api.middleware.auth import APIKeyAuth, configure_auth, get_api_key, require_api_key

__all__ = [
    "APIKeyAuth",
    "configure_auth",
    "get_api_key",
    "require_api_key",
]
