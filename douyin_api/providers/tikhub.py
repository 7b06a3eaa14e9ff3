"""TikHub API client for high-quality play URLs and engagement statistics."""

from typing import Any, Dict, List, Sequence

import structlog

from douyin_api.core.config import TikHubConfig
from douyin_api.core.http import HttpClient
from douyin_api.models.payload import QualitySourceDocument, dig
from douyin_api.providers.exceptions import UpstreamError

logger = structlog.get_logger(__name__)

HIGH_QUALITY_PATH = "/api/v1/douyin/web/fetch_video_high_quality_play_url"
STATISTICS_PATH = "/api/v1/douyin/app/v3/fetch_video_statistics"


class TikHubClient:
    """Authenticated client for the two TikHub endpoints the resolver uses."""

    def __init__(self, http: HttpClient, config: TikHubConfig) -> None:
        self.http = http
        self.base_url = config.base_url.rstrip("/")
        self._api_key = config.api_key

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def _get_json(self, path: str, query: str) -> Any:
        """GET ``path?query`` and decode the JSON body.

        Raises:
            UpstreamError: On transport failure, non-200 status or invalid JSON
        """
        url = f"{self.base_url}{path}?{query}"
        response = await self.http.get(url, headers=self.headers, upstream="tikhub")

        if response.status != 200:
            raise UpstreamError(f"TikHub returned HTTP {response.status}", status=response.status)

        return response.json()

    async def fetch_high_quality_play_url(self, video_id: str) -> QualitySourceDocument:
        """Fetch the quality-URL document for ``video_id``.

        Returns:
            The document, or an empty document when the call failed or the
            response carries no ``data`` member
        """
        try:
            payload = await self._get_json(HIGH_QUALITY_PATH, f"aweme_id={video_id}")
        except UpstreamError as e:
            logger.warning("quality_document_fetch_failed", video_id=video_id, error=str(e))
            return QualitySourceDocument()

        if not isinstance(payload, dict) or "data" not in payload:
            logger.warning("quality_document_without_data", video_id=video_id)
            return QualitySourceDocument()

        logger.debug("quality_document_fetched", video_id=video_id)
        return QualitySourceDocument(payload)

    async def fetch_statistics(self, video_ids: Sequence[str]) -> List[Dict[str, Any]]:
        """Fetch the statistics batch for ``video_ids``.

        Raises:
            UpstreamError: When the call fails or returns no statistics list
        """
        payload = await self._get_json(STATISTICS_PATH, f"aweme_ids={','.join(video_ids)}")

        items = dig(payload, "data", "statistics_list")
        if not isinstance(items, list) or not items:
            raise UpstreamError("TikHub statistics response has no statistics_list")

        return [item for item in items if isinstance(item, dict)]
