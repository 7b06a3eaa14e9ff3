"""API key authentication dependencies.

Clients pass their key as the ``key`` query parameter (the form the public
endpoint has always accepted) or in the ``X-API-Key`` header.
"""

import hashlib
from typing import List, Optional, Set

import structlog
from fastapi import Depends, Request
from fastapi.security import APIKeyHeader, APIKeyQuery

from douyin_api.core.errors import APIError, ErrorMessage
from douyin_api.models.video import ResultCode

logger = structlog.get_logger(__name__)

API_KEY_HEADER_NAME = "X-API-Key"
API_KEY_QUERY_NAME = "key"

api_key_header = APIKeyHeader(name=API_KEY_HEADER_NAME, auto_error=False)
api_key_query = APIKeyQuery(name=API_KEY_QUERY_NAME, auto_error=False)


def hash_api_key(api_key: Optional[str]) -> str:
    """
    Create a safe hash of an API key for logging.

    Args:
        api_key: The API key to hash

    Returns:
        "sha256:" followed by the first 8 hex characters of the digest
    """
    if not api_key:
        return "empty"
    return f"sha256:{hashlib.sha256(api_key.encode()).hexdigest()[:8]}"


class APIKeyAuth:
    """Validates API keys against the configured list.

    An empty key list disables authentication entirely.
    """

    def __init__(self, api_keys: Optional[List[str]] = None):
        self._api_keys: Set[str] = set(api_keys) if api_keys else set()
        self._allow_all = len(self._api_keys) == 0

        if self._allow_all:
            logger.warning("No API keys configured, authentication is disabled", component="auth")
        else:
            logger.info("API key authentication initialized", num_keys=len(self._api_keys))

    @property
    def allow_all(self) -> bool:
        return self._allow_all

    def validate_api_key(self, api_key: Optional[str]) -> bool:
        if self._allow_all:
            return True
        return bool(api_key) and api_key in self._api_keys

    def authenticate(self, request: Request, api_key: Optional[str]) -> Optional[str]:
        """
        Authenticate a request.

        Returns:
            The accepted API key (None when authentication is disabled)

        Raises:
            APIError: 400 when the key is missing, 403 when it is unknown
        """
        if self._allow_all:
            return api_key

        path = request.url.path

        if not api_key:
            logger.warning("API key missing", path=path)
            raise APIError(ResultCode.BAD_REQUEST, ErrorMessage.MISSING_KEY)

        if not self.validate_api_key(api_key):
            logger.warning(
                "API key authentication failed",
                path=path,
                key_hash=hash_api_key(api_key),
                client_ip=request.client.host if request.client else "unknown",
            )
            raise APIError(ResultCode.FORBIDDEN, ErrorMessage.INVALID_KEY)

        logger.debug("API key authentication successful", path=path, key_hash=hash_api_key(api_key))
        return api_key


# Global auth instance (configured at startup)
_auth_instance: Optional[APIKeyAuth] = None


def configure_auth(api_keys: Optional[List[str]] = None) -> APIKeyAuth:
    """Configure the global auth instance."""
    global _auth_instance
    _auth_instance = APIKeyAuth(api_keys=api_keys)
    return _auth_instance


def get_auth() -> APIKeyAuth:
    """Get the global auth instance, defaulting to an open one."""
    if _auth_instance is None:
        return APIKeyAuth()
    return _auth_instance


async def get_api_key(
    request: Request,
    header_key: Optional[str] = Depends(api_key_header),  # noqa: B008
    query_key: Optional[str] = Depends(api_key_query),  # noqa: B008
) -> Optional[str]:
    """Extract and validate the API key from the query string or header."""
    return get_auth().authenticate(request, query_key or header_key)


def require_api_key(
    api_key: Optional[str] = Depends(get_api_key),  # noqa: B008
) -> Optional[str]:
    """Route dependency enforcing a valid API key."""
    return api_key


__all__ = [
    "API_KEY_HEADER_NAME",
    "API_KEY_QUERY_NAME",
    "APIKeyAuth",
    "configure_auth",
    "get_api_key",
    "get_auth",
    "hash_api_key",
    "require_api_key",
]
