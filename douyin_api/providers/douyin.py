"""Douyin web client: share-link redirect resolution, ID extraction and page fetch."""

import re
from typing import Dict, Optional

import structlog

from douyin_api.core.config import DouyinConfig
from douyin_api.core.http import HttpClient
from douyin_api.providers.exceptions import UpstreamError

logger = structlog.get_logger(__name__)

# Digits right after "video/", otherwise any standalone run of 10+ digits
VIDEO_ID_PATTERN = re.compile(r"(?<=video/)[0-9]+|[0-9]{10,}")

SHARE_PAGE_URL = "https://www.iesdouyin.com/share/video/{video_id}"


class DouyinWebClient:
    """Talks to the public Douyin web endpoints with a mobile browser identity."""

    def __init__(self, http: HttpClient, config: DouyinConfig) -> None:
        """
        Initialize the Douyin web client.

        Args:
            http: Shared HTTP transport
            config: User agent and header configuration
        """
        self.http = http
        self.config = config

    @property
    def page_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.config.user_agent,
            "Referer": self.config.referer,
            "Accept-Language": self.config.accept_language,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
        }

    async def resolve_final_url(self, url: str) -> str:
        """Follow the share link's redirects with a HEAD request.

        Returns:
            The final URL, or ``url`` itself when the request fails
        """
        try:
            response = await self.http.head(
                url, headers={"User-Agent": self.config.user_agent}, upstream="douyin_redirect"
            )
        except UpstreamError as e:
            logger.warning("redirect_resolution_failed", url=url, error=str(e))
            return url

        return response.url or url

    async def extract_video_id(self, share_url: str) -> Optional[str]:
        """Resolve ``share_url`` and pull the numeric video ID out of the final URL.

        Args:
            share_url: Short share link or direct video link

        Returns:
            Video ID, or None when the final URL carries none
        """
        final_url = await self.resolve_final_url(share_url)
        video_id = extract_video_id_from_url(final_url)

        if video_id:
            logger.debug("video_id_extracted", share_url=share_url, video_id=video_id)
        else:
            logger.warning("video_id_not_found", share_url=share_url, final_url=final_url)

        return video_id

    async def fetch_share_page(self, video_id: str) -> str:
        """Fetch the share page markup for ``video_id``.

        Returns:
            Page markup, or an empty string when the fetch failed
        """
        url = SHARE_PAGE_URL.format(video_id=video_id)

        try:
            response = await self.http.get(url, headers=self.page_headers, upstream="douyin_page")
        except UpstreamError as e:
            logger.warning("share_page_fetch_failed", video_id=video_id, error=str(e))
            return ""

        if not response.ok:
            logger.warning("share_page_bad_status", video_id=video_id, status=response.status)

        return response.body


def extract_video_id_from_url(url: str) -> Optional[str]:
    """Apply the video ID pattern to an already resolved URL."""
    if not url:
        return None
    match = VIDEO_ID_PATTERN.search(url)
    return match.group(0) if match else None
