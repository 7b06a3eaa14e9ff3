"""Statistics fetcher: always returns a Statistics record, never raises."""

import structlog

from douyin_api.models.video import Statistics
from douyin_api.providers.exceptions import UpstreamError
from douyin_api.providers.tikhub import TikHubClient

logger = structlog.get_logger(__name__)


class StatisticsFetcher:
    """Retrieves volatile counters for one video, bypassing the cache."""

    def __init__(self, tikhub: TikHubClient) -> None:
        self.tikhub = tikhub

    async def fetch(self, video_id: str) -> Statistics:
        """Fetch statistics for ``video_id``.

        Returns:
            The matching record, or a zero-valued record on any failure
        """
        try:
            items = await self.tikhub.fetch_statistics([video_id])
        except UpstreamError as e:
            logger.warning("statistics_fetch_failed", video_id=video_id, error=str(e))
            return Statistics.empty(video_id)

        for item in items:
            if str(item.get("aweme_id", "")) == str(video_id):
                return Statistics.from_payload(item)

        logger.warning("statistics_not_in_batch", video_id=video_id, batch_size=len(items))
        return Statistics.empty(video_id)
