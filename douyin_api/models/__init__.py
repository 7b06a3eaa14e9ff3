"""Data models for the application."""

from douyin_api.models.payload import BitRateRung, PageItem, QualitySourceDocument, dig
from douyin_api.models.video import (
    CacheRecord,
    QualityEntry,
    QualityList,
    ResolutionResult,
    ResultCode,
    Statistics,
    VideoMetadata,
)

__all__ = [
    "BitRateRung",
    "CacheRecord",
    "PageItem",
    "QualityEntry",
    "QualityList",
    "QualitySourceDocument",
    "ResolutionResult",
    "ResultCode",
    "Statistics",
    "VideoMetadata",
    "dig",
]
