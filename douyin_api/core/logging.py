"""Structured logging for the resolver.

Every line carries the request id of the HTTP request that produced it, and
credentials never reach the output: the client ``key`` parameter and the
TikHub bearer token are masked before rendering.
"""

import contextvars
import logging
import re
import sys
from typing import Any, Dict, Optional
from uuid import uuid4

import structlog

request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id", default=None
)

# Accepted shape for client supplied X-Request-ID values
REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

REDACTED = "***"
SECRET_FIELDS = frozenset({"api_key", "key", "authorization", "token"})
KEY_QUERY_PATTERN = re.compile(r"([?&](?:key|api_key|token)=)[^&#\s]*", re.IGNORECASE)
BEARER_PATTERN = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)

# Third-party loggers that are chatty at INFO
NOISY_LOGGERS = ("aiohttp.access", "aiohttp.client", "uvicorn.access")


def add_request_id(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Structlog processor copying the current request_id into the event."""
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def _mask(value: str) -> str:
    value = KEY_QUERY_PATTERN.sub(rf"\1{REDACTED}", value)
    return BEARER_PATTERN.sub(rf"\1{REDACTED}", value)


def redact_secrets(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Mask credential fields and ``key=`` query values in URLs and messages."""
    for name, value in event_dict.items():
        if name in SECRET_FIELDS and value:
            event_dict[name] = REDACTED
        elif isinstance(value, str):
            event_dict[name] = _mask(value)
    return event_dict


def configure_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """
    Configure stdlib logging and structlog.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" for production, "console" for local runs
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_request_id,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        redact_secrets,
    ]

    if log_format == "json":
        # Chinese client messages stay readable in the output
        renderer: Any = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Bind the request id for the current request.

    A missing or malformed client id is replaced by a generated ``req_<12 hex>``.

    Returns:
        The request id now in effect
    """
    if not request_id or not REQUEST_ID_PATTERN.match(request_id):
        request_id = f"req_{uuid4().hex[:12]}"
    request_id_var.set(request_id)
    return request_id


def get_request_id() -> Optional[str]:
    return request_id_var.get()


def clear_request_id() -> None:
    request_id_var.set(None)
