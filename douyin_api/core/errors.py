"""Centralized error handling for the API.

Every error leaves the service as the same envelope clients already parse
for successful resolutions::

    {"code": 403, "message": "...", "data": {}, "request_id": "req_..."}
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from douyin_api.core.logging import get_request_id
from douyin_api.core.metrics import MetricsCollector
from douyin_api.models.video import ResultCode

logger = structlog.get_logger(__name__)


class ErrorMessage:
    """Client-facing messages for boundary errors."""

    MISSING_KEY = "缺少必要的key参数"
    INVALID_KEY = "无效的key参数，访问被拒绝"
    MISSING_URL = "缺少url参数，请在URL中添加 url=抖音分享链接"
    INVALID_URL = "url参数无效"
    NOT_FOUND = "资源不存在"
    INTERNAL_ERROR = "服务内部错误"


# Envelope code to HTTP status
CODE_TO_STATUS: Dict[int, int] = {
    ResultCode.SUCCESS: 200,
    ResultCode.RESOLUTION_FAILED: 200,
    ResultCode.BAD_REQUEST: HTTP_400_BAD_REQUEST,
    ResultCode.FORBIDDEN: HTTP_403_FORBIDDEN,
    ResultCode.NOT_FOUND: HTTP_404_NOT_FOUND,
    ResultCode.INTERNAL_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
}


class APIError(Exception):
    """Structured API error rendered as an envelope by the global handler."""

    def __init__(self, code: int, message: str, status_code: Optional[int] = None):
        """Initialize an API error.

        Args:
            code: Envelope code (see ResultCode).
            message: Human-readable error message.
            status_code: HTTP status; derived from ``code`` when omitted.
        """
        self.code = int(code)
        self.message = message
        self.status_code = status_code or CODE_TO_STATUS.get(
            self.code, HTTP_500_INTERNAL_SERVER_ERROR
        )
        super().__init__(message)


def build_envelope(
    code: int, message: str, data: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Build the response envelope, tagging errors with the request id."""
    envelope: Dict[str, Any] = {
        "code": int(code),
        "message": message,
        "data": data or {},
    }
    request_id = get_request_id()
    if request_id and code != ResultCode.SUCCESS:
        envelope["request_id"] = request_id
    return envelope


def _validation_message(exc: RequestValidationError) -> str:
    for error in exc.errors():
        location = error.get("loc", ())
        if "url" in location:
            return ErrorMessage.MISSING_URL
    return ErrorMessage.INVALID_URL


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Convert any exception into an envelope with a matching HTTP status."""
    path = request.url.path

    if isinstance(exc, APIError):
        code, message, status_code = exc.code, exc.message, exc.status_code
        logger.warning("api_error", code=code, message=message, path=path)

    elif isinstance(exc, RequestValidationError):
        code, status_code = ResultCode.BAD_REQUEST, HTTP_400_BAD_REQUEST
        message = _validation_message(exc)
        logger.warning("request_validation_failed", path=path, errors=len(exc.errors()))

    elif isinstance(exc, (HTTPException, StarletteHTTPException)):
        status_code = exc.status_code
        code = status_code
        if status_code == ResultCode.NOT_FOUND:
            message = ErrorMessage.NOT_FOUND
        else:
            message = str(exc.detail) if exc.detail else ErrorMessage.INTERNAL_ERROR
        logger.warning("http_exception", status_code=status_code, path=path)

    else:
        code, status_code = ResultCode.INTERNAL_ERROR, HTTP_500_INTERNAL_SERVER_ERROR
        message = ErrorMessage.INTERNAL_ERROR
        logger.error(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error=str(exc),
            path=path,
            exc_info=True,
        )

    MetricsCollector.record_error(str(int(code)), path)
    return JSONResponse(status_code=status_code, content=build_envelope(code, message))
