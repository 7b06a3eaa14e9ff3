"""Testing module for test mode support."""

from douyin_api.testing.fake_upstream import FakeUpstream
from douyin_api.testing.fixtures import (
    DEMO_QUALITY_DOCUMENT,
    DEMO_SHARE_URL,
    DEMO_VIDEO_ID,
    build_share_page,
)

__all__ = [
    "DEMO_QUALITY_DOCUMENT",
    "DEMO_SHARE_URL",
    "DEMO_VIDEO_ID",
    "FakeUpstream",
    "build_share_page",
]
