"""Tests for the TikHub client and the statistics fetcher."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from douyin_api.core.config import TikHubConfig
from douyin_api.core.http import HttpClient, HttpResponse
from douyin_api.models.video import Statistics
from douyin_api.providers.exceptions import UpstreamError
from douyin_api.providers.tikhub import HIGH_QUALITY_PATH, STATISTICS_PATH, TikHubClient
from douyin_api.services.statistics import StatisticsFetcher
from douyin_api.testing.fixtures import (
    DEMO_QUALITY_DOCUMENT,
    DEMO_STATISTICS_RESPONSE,
    DEMO_VIDEO_ID,
)


def json_response(payload: object, status: int = 200) -> HttpResponse:
    return HttpResponse(status=status, url="https://api.tikhub.test", body=json.dumps(payload))


@pytest.fixture
def mock_http() -> MagicMock:
    http = MagicMock(spec=HttpClient)
    http.get = AsyncMock()
    return http


@pytest.fixture
def tikhub(mock_http: MagicMock, tikhub_config: TikHubConfig) -> TikHubClient:
    return TikHubClient(mock_http, tikhub_config)


class TestFetchHighQualityPlayUrl:
    """Tests for TikHubClient.fetch_high_quality_play_url."""

    @pytest.mark.asyncio
    async def test_success(self, tikhub: TikHubClient, mock_http: MagicMock) -> None:
        mock_http.get.return_value = json_response(DEMO_QUALITY_DOCUMENT)

        document = await tikhub.fetch_high_quality_play_url(DEMO_VIDEO_ID)

        assert document.raw == DEMO_QUALITY_DOCUMENT
        url = mock_http.get.call_args.args[0]
        assert url == f"https://api.tikhub.test{HIGH_QUALITY_PATH}?aweme_id={DEMO_VIDEO_ID}"
        headers = mock_http.get.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer tikhub-test-key"

    @pytest.mark.asyncio
    async def test_http_error_returns_empty(self, tikhub: TikHubClient, mock_http: MagicMock) -> None:
        mock_http.get.return_value = json_response({"detail": "unauthorized"}, status=401)

        assert (await tikhub.fetch_high_quality_play_url(DEMO_VIDEO_ID)).is_empty

    @pytest.mark.asyncio
    async def test_transport_error_returns_empty(
        self, tikhub: TikHubClient, mock_http: MagicMock
    ) -> None:
        mock_http.get.side_effect = UpstreamError("timeout")

        assert (await tikhub.fetch_high_quality_play_url(DEMO_VIDEO_ID)).is_empty

    @pytest.mark.asyncio
    async def test_missing_data_returns_empty(
        self, tikhub: TikHubClient, mock_http: MagicMock
    ) -> None:
        mock_http.get.return_value = json_response({"code": 400, "message": "bad id"})

        assert (await tikhub.fetch_high_quality_play_url(DEMO_VIDEO_ID)).is_empty

    @pytest.mark.asyncio
    async def test_invalid_json_returns_empty(
        self, tikhub: TikHubClient, mock_http: MagicMock
    ) -> None:
        mock_http.get.return_value = HttpResponse(status=200, url="u", body="<html>")

        assert (await tikhub.fetch_high_quality_play_url(DEMO_VIDEO_ID)).is_empty


class TestFetchStatistics:
    """Tests for TikHubClient.fetch_statistics."""

    @pytest.mark.asyncio
    async def test_success(self, tikhub: TikHubClient, mock_http: MagicMock) -> None:
        mock_http.get.return_value = json_response(DEMO_STATISTICS_RESPONSE)

        items = await tikhub.fetch_statistics([DEMO_VIDEO_ID])

        assert items[0]["play_count"] == 1234567
        assert STATISTICS_PATH in mock_http.get.call_args.args[0]
        assert mock_http.get.call_args.args[0].endswith(f"aweme_ids={DEMO_VIDEO_ID}")

    @pytest.mark.asyncio
    async def test_empty_list_raises(self, tikhub: TikHubClient, mock_http: MagicMock) -> None:
        mock_http.get.return_value = json_response({"data": {"statistics_list": []}})

        with pytest.raises(UpstreamError):
            await tikhub.fetch_statistics([DEMO_VIDEO_ID])


class TestStatisticsFetcher:
    """Tests for StatisticsFetcher."""

    @pytest.mark.asyncio
    async def test_matching_record(self, tikhub: TikHubClient, mock_http: MagicMock) -> None:
        mock_http.get.return_value = json_response(DEMO_STATISTICS_RESPONSE)

        statistics = await StatisticsFetcher(tikhub).fetch(DEMO_VIDEO_ID)

        assert statistics == Statistics(
            aweme_id=DEMO_VIDEO_ID,
            play_count=1234567,
            digg_count=45678,
            comment_count=1234,
            share_count=567,
            download_count=89,
        )

    @pytest.mark.asyncio
    async def test_no_matching_record(self, tikhub: TikHubClient, mock_http: MagicMock) -> None:
        mock_http.get.return_value = json_response(
            {"data": {"statistics_list": [{"aweme_id": "999", "play_count": 5}]}}
        )

        statistics = await StatisticsFetcher(tikhub).fetch(DEMO_VIDEO_ID)

        assert statistics == Statistics.empty(DEMO_VIDEO_ID)

    @pytest.mark.asyncio
    async def test_failure_yields_zeros(self, tikhub: TikHubClient, mock_http: MagicMock) -> None:
        mock_http.get.side_effect = UpstreamError("timeout")

        statistics = await StatisticsFetcher(tikhub).fetch(DEMO_VIDEO_ID)

        assert statistics.play_count == 0
        assert statistics.aweme_id == DEMO_VIDEO_ID
