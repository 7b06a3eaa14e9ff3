"""Admin API endpoints for cache maintenance."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends

from douyin_api.api.schemas import CacheDeleteResponse, CacheRecordResponse, CacheSweepResponse
from douyin_api.core.errors import APIError, ErrorMessage
from douyin_api.core.validation import is_valid_video_id
from douyin_api.middleware.auth import require_api_key
from douyin_api.models.video import ResultCode
from douyin_api.services.cache import CacheStore

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["admin"],
    dependencies=[Depends(require_api_key)],
)


# Dependency to get the cache store (overridden in main app)
async def get_cache_store() -> CacheStore:
    """Get cache store instance."""
    raise NotImplementedError("Cache store dependency not configured")


def _require_video_id(video_id: str) -> str:
    if not is_valid_video_id(video_id):
        raise APIError(ResultCode.BAD_REQUEST, "视频ID无效")
    return video_id


@router.post("/cache/sweep", response_model=CacheSweepResponse)
async def sweep_cache(
    cache: CacheStore = Depends(get_cache_store),  # noqa: B008
) -> Any:
    """Delete every cache file older than the TTL now."""
    result = cache.sweep()
    logger.info(
        "manual_cache_sweep",
        files_deleted=result.files_deleted,
        files_kept=result.files_kept,
    )
    return CacheSweepResponse(files_deleted=result.files_deleted, files_kept=result.files_kept)


@router.get("/cache/{video_id}", response_model=CacheRecordResponse)
async def inspect_cache_record(
    video_id: str,
    cache: CacheStore = Depends(get_cache_store),  # noqa: B008
) -> Any:
    """
    Inspect the live cache record for a video.

    Raises:
        APIError: 404 when there is no live record
    """
    _require_video_id(video_id)

    record = cache.lookup(video_id)
    if record is None:
        raise APIError(ResultCode.NOT_FOUND, ErrorMessage.NOT_FOUND)

    age = cache.age(record)
    return CacheRecordResponse(
        aweme_id=record.video_id,
        age_seconds=round(age, 2),
        expires_in_seconds=round(max(cache.ttl - age, 0.0), 2),
        fps=record.metadata.fps,
        width=record.metadata.width,
        height=record.metadata.height,
        has_original=bool(record.document.original_url),
        ladder_size=len(record.document.ladder),
    )


@router.delete("/cache/{video_id}", response_model=CacheDeleteResponse)
async def delete_cache_record(
    video_id: str,
    cache: CacheStore = Depends(get_cache_store),  # noqa: B008
) -> Any:
    """Drop the cache record for a video so the next request refetches it."""
    _require_video_id(video_id)

    deleted = cache.delete(video_id)
    logger.info("manual_cache_delete", video_id=video_id, deleted=deleted)
    return CacheDeleteResponse(aweme_id=video_id, deleted=deleted)


__all__ = ["get_cache_store", "router"]
