"""Share-link resolution endpoint."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from douyin_api.api.schemas import EnvelopeResponse
from douyin_api.core.errors import CODE_TO_STATUS, APIError, ErrorMessage, build_envelope
from douyin_api.core.validation import share_url_validator
from douyin_api.middleware.auth import require_api_key
from douyin_api.models.video import ResultCode
from douyin_api.providers.exceptions import InvalidURLError
from douyin_api.services.resolver import Resolver

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["parse"])


# Dependency to get the resolver (overridden in main app)
async def get_resolver() -> Resolver:
    """Get resolver instance."""
    raise NotImplementedError("Resolver dependency not configured")


async def _parse(url: Optional[str], resolver: Resolver) -> JSONResponse:
    if not url or not url.strip():
        raise APIError(ResultCode.BAD_REQUEST, ErrorMessage.MISSING_URL)

    try:
        share_url = share_url_validator.require(url)
    except InvalidURLError as e:
        logger.info("share_url_rejected", reason=str(e))
        raise APIError(ResultCode.BAD_REQUEST, ErrorMessage.INVALID_URL) from e

    result = await resolver.resolve(share_url)

    return JSONResponse(
        status_code=CODE_TO_STATUS.get(result.code, 500),
        content=build_envelope(result.code, result.message, result.data),
    )


@router.get(
    "/api/v1/parse",
    response_model=EnvelopeResponse,
    responses={
        200: {"description": "Resolved (code 200) or resolution failed (code 201)"},
        400: {"description": "Missing key or url"},
        403: {"description": "Invalid key"},
    },
)
async def parse_share_link(
    url: Optional[str] = Query(  # noqa: B008
        None, description="Douyin share link or the full share text copied from the app"
    ),
    _api_key: Optional[str] = Depends(require_api_key),  # noqa: B008
    resolver: Resolver = Depends(get_resolver),  # noqa: B008
) -> JSONResponse:
    """
    Resolve a share link into watermark-free quality sources.

    Returns the envelope ``{code, message, data}`` where ``data`` carries
    the video ID, fps/width/height, statistics and the ordered quality list.
    """
    return await _parse(url, resolver)


@router.get("/", response_model=EnvelopeResponse, include_in_schema=False)
async def parse_share_link_root(
    url: Optional[str] = Query(None),  # noqa: B008
    _api_key: Optional[str] = Depends(require_api_key),  # noqa: B008
    resolver: Resolver = Depends(get_resolver),  # noqa: B008
) -> JSONResponse:
    """Same as ``/api/v1/parse``, for clients of the single-script deployment."""
    return await _parse(url, resolver)
