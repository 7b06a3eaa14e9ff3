"""Tests for the Douyin web client."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from douyin_api.core.config import DouyinConfig
from douyin_api.core.http import HttpClient, HttpResponse
from douyin_api.providers.douyin import DouyinWebClient, extract_video_id_from_url
from douyin_api.providers.exceptions import UpstreamError


@pytest.fixture
def mock_http() -> MagicMock:
    http = MagicMock(spec=HttpClient)
    http.head = AsyncMock()
    http.get = AsyncMock()
    return http


@pytest.fixture
def client(mock_http: MagicMock, douyin_config: DouyinConfig) -> DouyinWebClient:
    return DouyinWebClient(mock_http, douyin_config)


class TestExtractVideoIdFromUrl:
    """Tests for the ID pattern."""

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://www.iesdouyin.com/share/video/7123456789012345678/?region=CN", "7123456789012345678"),
            ("https://www.douyin.com/video/123", "123"),
            ("https://www.douyin.com/note/x?modal_id=7123456789012345678", "7123456789012345678"),
            ("https://www.douyin.com/", None),
            ("https://www.douyin.com/user/12345", None),
            ("", None),
        ],
    )
    def test_pattern(self, url: str, expected: str) -> None:
        assert extract_video_id_from_url(url) == expected


class TestResolveFinalUrl:
    """Tests for redirect resolution."""

    @pytest.mark.asyncio
    async def test_follows_redirect_with_user_agent(
        self, client: DouyinWebClient, mock_http: MagicMock, douyin_config: DouyinConfig
    ) -> None:
        mock_http.head.return_value = HttpResponse(status=200, url="https://www.douyin.com/video/42")

        final_url = await client.resolve_final_url("https://v.douyin.com/abc/")

        assert final_url == "https://www.douyin.com/video/42"
        headers = mock_http.head.call_args.kwargs["headers"]
        assert headers["User-Agent"] == douyin_config.user_agent

    @pytest.mark.asyncio
    async def test_failure_falls_back_to_input(
        self, client: DouyinWebClient, mock_http: MagicMock
    ) -> None:
        mock_http.head.side_effect = UpstreamError("timeout")

        assert await client.resolve_final_url("https://v.douyin.com/abc/") == (
            "https://v.douyin.com/abc/"
        )


class TestExtractVideoId:
    """Tests for DouyinWebClient.extract_video_id."""

    @pytest.mark.asyncio
    async def test_extracts_from_final_url(
        self, client: DouyinWebClient, mock_http: MagicMock
    ) -> None:
        mock_http.head.return_value = HttpResponse(
            status=200, url="https://www.iesdouyin.com/share/video/7123456789012345678/"
        )

        assert await client.extract_video_id("https://v.douyin.com/abc/") == "7123456789012345678"

    @pytest.mark.asyncio
    async def test_no_id_returns_none(self, client: DouyinWebClient, mock_http: MagicMock) -> None:
        mock_http.head.return_value = HttpResponse(status=200, url="https://www.douyin.com/")

        assert await client.extract_video_id("https://v.douyin.com/abc/") is None

    @pytest.mark.asyncio
    async def test_direct_link_when_redirect_fails(
        self, client: DouyinWebClient, mock_http: MagicMock
    ) -> None:
        mock_http.head.side_effect = UpstreamError("refused")

        assert await client.extract_video_id("https://www.douyin.com/video/42") == "42"


class TestFetchSharePage:
    """Tests for DouyinWebClient.fetch_share_page."""

    @pytest.mark.asyncio
    async def test_returns_body(self, client: DouyinWebClient, mock_http: MagicMock) -> None:
        mock_http.get.return_value = HttpResponse(status=200, url="u", body="<html></html>")

        assert await client.fetch_share_page("42") == "<html></html>"
        assert mock_http.get.call_args.args[0] == "https://www.iesdouyin.com/share/video/42"
        assert "Referer" in mock_http.get.call_args.kwargs["headers"]

    @pytest.mark.asyncio
    async def test_failure_returns_empty(self, client: DouyinWebClient, mock_http: MagicMock) -> None:
        mock_http.get.side_effect = UpstreamError("timeout")

        assert await client.fetch_share_page("42") == ""

    @pytest.mark.asyncio
    async def test_error_status_body_returned(
        self, client: DouyinWebClient, mock_http: MagicMock
    ) -> None:
        mock_http.get.return_value = HttpResponse(status=403, url="u", body="blocked")

        assert await client.fetch_share_page("42") == "blocked"
