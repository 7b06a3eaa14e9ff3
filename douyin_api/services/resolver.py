"""Resolution orchestrator: share URL in, response envelope out.

Pipeline (linear, each step may end the resolution with a 201 result):

    extract ID -> quality document (cache or TikHub) -> share page fetch
    -> page state parse -> fps/width/height -> quality list + statistics
    -> cache write-back -> envelope

Nothing raised below this module escapes :meth:`Resolver.resolve`.
"""

import time
from typing import Any, Dict, Optional

import structlog

from douyin_api.core.formatting import format_play_count
from douyin_api.core.metrics import MetricsCollector
from douyin_api.models.payload import QualitySourceDocument
from douyin_api.models.video import (
    CacheRecord,
    QualityList,
    ResolutionResult,
    ResultCode,
    VideoMetadata,
)
from douyin_api.providers.douyin import DouyinWebClient
from douyin_api.providers.exceptions import (
    PageFetchError,
    PageParseError,
    VideoIdNotFoundError,
)
from douyin_api.providers.page_parser import parse_page_state
from douyin_api.providers.tikhub import TikHubClient
from douyin_api.services.aggregator import QualityAggregator
from douyin_api.services.cache import CacheStore

logger = structlog.get_logger(__name__)

MSG_SUCCESS = "解析成功"
MSG_VIDEO_ID_NOT_FOUND = "未能提取到视频ID"
MSG_PAGE_FETCH_FAILED = "请求抖音页面失败，备用清晰度不可用"
MSG_PAGE_PARSE_FAILED = "未能解析视频页面数据，备用清晰度不可用"
MSG_INTERNAL_ERROR = "解析失败，服务内部错误"

FAILURE_MESSAGES = {
    VideoIdNotFoundError: MSG_VIDEO_ID_NOT_FOUND,
    PageFetchError: MSG_PAGE_FETCH_FAILED,
    PageParseError: MSG_PAGE_PARSE_FAILED,
}


def failure_message(error: Exception) -> str:
    """Client message for a known failure exit, subclasses included."""
    return next(
        message for cls, message in FAILURE_MESSAGES.items() if isinstance(error, cls)
    )


class Resolver:
    """Composes extractor, cache, aggregator and statistics into one response."""

    def __init__(
        self,
        douyin: DouyinWebClient,
        tikhub: TikHubClient,
        cache: CacheStore,
        aggregator: QualityAggregator,
        sweep_on_request: bool = True,
    ) -> None:
        self.douyin = douyin
        self.tikhub = tikhub
        self.cache = cache
        self.aggregator = aggregator
        self.sweep_on_request = sweep_on_request

    async def resolve(self, share_url: str) -> ResolutionResult:
        """Resolve a share URL into the response envelope.

        Args:
            share_url: Share link (already extracted from share text)

        Returns:
            ResolutionResult with code 200 on success, 201 for the three
            known failure exits, 500 for anything unexpected
        """
        start_time = time.monotonic()

        try:
            result = await self._resolve(share_url)
        except tuple(FAILURE_MESSAGES) as e:
            logger.info("resolution_failed", share_url=share_url, reason=type(e).__name__)
            result = ResolutionResult(ResultCode.RESOLUTION_FAILED, failure_message(e))
        except Exception as e:
            logger.error(
                "resolution_crashed",
                share_url=share_url,
                error_type=type(e).__name__,
                error=str(e),
                exc_info=True,
            )
            result = ResolutionResult(ResultCode.INTERNAL_ERROR, MSG_INTERNAL_ERROR)

        MetricsCollector.record_resolution(int(result.code), time.monotonic() - start_time)
        return result

    async def _resolve(self, share_url: str) -> ResolutionResult:
        if self.sweep_on_request:
            self.cache.sweep()

        video_id = await self.douyin.extract_video_id(share_url)
        if not video_id:
            raise VideoIdNotFoundError(f"No video ID in {share_url}")

        cached = self.cache.lookup(video_id)
        document = await self._quality_document(video_id, cached)

        html = await self.douyin.fetch_share_page(video_id)
        if not html:
            raise PageFetchError(f"Empty share page for {video_id}")

        page_item = parse_page_state(html)
        if page_item is None:
            raise PageParseError(f"No embedded state in share page for {video_id}")

        metadata = cached.metadata if cached else VideoMetadata.from_document(document)

        quality = await self.aggregator.build(document, page_item, video_id, metadata)

        self.cache.store(video_id, document, metadata)

        logger.info(
            "resolution_succeeded",
            video_id=video_id,
            cache_hit=cached is not None,
            document_empty=document.is_empty,
            entries=len(quality.entries),
        )

        return ResolutionResult(
            ResultCode.SUCCESS,
            MSG_SUCCESS,
            build_result_data(video_id, metadata, quality),
        )

    async def _quality_document(
        self, video_id: str, cached: Optional[CacheRecord]
    ) -> QualitySourceDocument:
        if cached is not None:
            logger.debug("quality_document_from_cache", video_id=video_id)
            return cached.document
        return await self.tikhub.fetch_high_quality_play_url(video_id)


def build_result_data(
    video_id: str, metadata: VideoMetadata, quality: QualityList
) -> Dict[str, Any]:
    """Assemble the ``data`` member of a successful response."""
    statistics = quality.statistics
    return {
        "aweme_id": video_id,
        "fps": metadata.fps,
        "width": metadata.width,
        "height": metadata.height,
        "play_count": format_play_count(statistics.play_count),
        "digg_count": statistics.digg_count,
        "comment_count": statistics.comment_count,
        "share_count": statistics.share_count,
        "download_count": statistics.download_count,
        "video_list": [entry.to_dict() for entry in quality.entries],
    }

