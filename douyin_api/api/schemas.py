"""Response schemas for API endpoints.

This module provides Pydantic models for response serialization
with OpenAPI examples.
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class QualityEntrySchema(BaseModel):
    """One entry of the quality list."""

    url: str = Field(..., examples=["https://v26-web.douyinvod.com/xxx/1080.mp4"])
    level: str = Field(..., examples=["[1080P]-[30FPS]-[30 MB]"])


class ResolutionData(BaseModel):
    """Payload of a successful resolution."""

    aweme_id: str = Field(..., examples=["7123456789012345678"])
    fps: Union[int, str] = Field(..., examples=[30])
    width: Union[int, str] = Field(..., examples=[1920])
    height: Union[int, str] = Field(..., examples=[1080])
    play_count: str = Field(..., description="Formatted play count", examples=["123.46万"])
    digg_count: int = Field(..., examples=[45678])
    comment_count: int = Field(..., examples=[1234])
    share_count: int = Field(..., examples=[567])
    download_count: int = Field(..., examples=[89])
    video_list: List[QualityEntrySchema]


class EnvelopeResponse(BaseModel):
    """Envelope returned by every endpoint of the public API."""

    code: int = Field(..., examples=[200])
    message: str = Field(..., examples=["解析成功"])
    data: Dict[str, Any] = Field(default_factory=dict)
    request_id: Optional[str] = Field(default=None, examples=["req_1a2b3c4d5e6f"])


class ComponentHealth(BaseModel):
    """Health status of a single component."""

    status: Literal["healthy", "unhealthy"] = Field(..., examples=["healthy"])
    details: Optional[Dict[str, Any]] = Field(default=None, examples=[{"ttl": 3600}])


class HealthResponse(BaseModel):
    """Detailed health check response."""

    status: Literal["healthy", "unhealthy"] = Field(..., examples=["healthy"])
    timestamp: str = Field(..., examples=["2026-10-17T10:30:00+00:00"])
    version: str = Field(..., examples=["2.3.1"])
    uptime_seconds: float = Field(..., examples=[3600.5])
    test_mode: bool = Field(default=False, description="Whether the service runs on canned upstreams")
    components: Dict[str, ComponentHealth]


class LivenessResponse(BaseModel):
    """Liveness probe response."""

    status: Literal["alive"] = Field(..., examples=["alive"])


class ReadinessResponse(BaseModel):
    """Readiness probe response."""

    status: Literal["ready", "not_ready"] = Field(..., examples=["ready"])
    ready: bool = Field(..., examples=[True])
    message: Optional[str] = Field(default=None, examples=["Cache directory not writable"])


class CacheSweepResponse(BaseModel):
    """Result of a manual cache sweep."""

    files_deleted: int = Field(..., examples=[3])
    files_kept: int = Field(..., examples=[12])


class CacheRecordResponse(BaseModel):
    """Inspection view of one cache record."""

    aweme_id: str = Field(..., examples=["7123456789012345678"])
    age_seconds: float = Field(..., examples=[120.5])
    expires_in_seconds: float = Field(..., examples=[3479.5])
    fps: Union[int, str] = Field(..., examples=[30])
    width: Union[int, str] = Field(..., examples=[1920])
    height: Union[int, str] = Field(..., examples=[1080])
    has_original: bool = Field(..., examples=[True])
    ladder_size: int = Field(..., description="Rungs on the cached bit-rate ladder", examples=[2])


class CacheDeleteResponse(BaseModel):
    """Result of dropping one cache record."""

    aweme_id: str = Field(..., examples=["7123456789012345678"])
    deleted: bool = Field(..., examples=[True])
