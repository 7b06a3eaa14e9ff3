"""Upstream providers: Douyin web, TikHub API and page state parsing."""

from douyin_api.providers.exceptions import (
    InvalidURLError,
    PageFetchError,
    PageParseError,
    ProviderError,
    UpstreamError,
    VideoIdNotFoundError,
)

__all__ = [
    "ProviderError",
    "UpstreamError",
    "InvalidURLError",
    "VideoIdNotFoundError",
    "PageFetchError",
    "PageParseError",
]
