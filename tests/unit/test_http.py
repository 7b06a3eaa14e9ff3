"""Tests for the aiohttp-based HTTP transport."""

import asyncio
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from douyin_api.core.http import HttpClient, HttpResponse
from douyin_api.providers.exceptions import UpstreamError


def make_session(
    status: int = 200,
    url: str = "https://example.com/final",
    body: str = "",
    headers: Optional[Dict[str, str]] = None,
    content_length: Optional[int] = None,
) -> MagicMock:
    """Create a mock aiohttp session returning one canned response."""
    resp = MagicMock()
    resp.status = status
    resp.url = url
    resp.headers = headers or {}
    resp.content_length = content_length
    resp.text = AsyncMock(return_value=body)

    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=resp)
    ctx.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.closed = False
    session.request = MagicMock(return_value=ctx)
    session.close = AsyncMock()
    return session


class TestHttpResponse:
    """Tests for HttpResponse."""

    def test_ok(self) -> None:
        assert HttpResponse(status=204, url="u").ok
        assert not HttpResponse(status=302, url="u").ok

    def test_json(self) -> None:
        assert HttpResponse(status=200, url="u", body='{"a": 1}').json() == {"a": 1}

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(UpstreamError, match="Invalid JSON"):
            HttpResponse(status=200, url="u", body="<html>").json()


class TestHttpClientRequest:
    """Tests for HttpClient.request."""

    @pytest.mark.asyncio
    async def test_get_returns_final_url_and_body(self) -> None:
        session = make_session(body="hello", url="https://www.iesdouyin.com/share/video/1/")
        client = HttpClient(timeout=5.0, session=session)

        response = await client.get("https://v.douyin.com/x/", headers={"User-Agent": "ua"})

        assert response.status == 200
        assert response.body == "hello"
        assert response.url == "https://www.iesdouyin.com/share/video/1/"

        args: Any = session.request.call_args
        assert args.args == ("GET", "https://v.douyin.com/x/")
        assert args.kwargs["allow_redirects"] is True
        assert args.kwargs["headers"] == {"User-Agent": "ua"}
        assert args.kwargs["timeout"].total == 5.0

    @pytest.mark.asyncio
    async def test_head_skips_body(self) -> None:
        session = make_session(body="ignored")
        client = HttpClient(session=session)

        response = await client.head("https://example.com/")

        assert response.body == ""
        session.request.return_value.__aenter__.return_value.text.assert_not_called()

    @pytest.mark.asyncio
    async def test_ssl_verification_flag_passed(self) -> None:
        session = make_session()
        client = HttpClient(verify_ssl=False, session=session)

        await client.get("https://example.com/")

        assert session.request.call_args.kwargs["ssl"] is False

    @pytest.mark.asyncio
    async def test_client_error_raises_upstream_error(self) -> None:
        session = make_session()
        session.request.side_effect = aiohttp.ClientConnectionError("refused")
        client = HttpClient(session=session)

        with pytest.raises(UpstreamError, match="failed"):
            await client.get("https://example.com/")

    @pytest.mark.asyncio
    async def test_timeout_raises_upstream_error(self) -> None:
        session = make_session()
        session.request.side_effect = asyncio.TimeoutError()
        client = HttpClient(timeout=1.0, session=session)

        with pytest.raises(UpstreamError, match="Timeout"):
            await client.get("https://example.com/")

    @pytest.mark.asyncio
    async def test_non_2xx_is_returned(self) -> None:
        """Test error statuses are data, not exceptions"""
        session = make_session(status=404, body="missing")
        client = HttpClient(session=session)

        response = await client.get("https://example.com/")

        assert response.status == 404
        assert not response.ok


class TestProbeSize:
    """Tests for HttpClient.probe_size."""

    @pytest.mark.asyncio
    async def test_content_length_from_transport(self) -> None:
        client = HttpClient(session=make_session(content_length=1536))

        assert await client.probe_size("https://cdn/x.mp4") == 1536

    @pytest.mark.asyncio
    async def test_content_length_header_fallback(self) -> None:
        session = make_session(headers={"content-length": " 2048 "})
        client = HttpClient(session=session)

        assert await client.probe_size("https://cdn/x.mp4") == 2048

    @pytest.mark.asyncio
    async def test_unknown_size(self) -> None:
        client = HttpClient(session=make_session(headers={"Content-Length": "abc"}))

        assert await client.probe_size("https://cdn/x.mp4") is None

    @pytest.mark.asyncio
    async def test_failure_is_unknown(self) -> None:
        session = make_session()
        session.request.side_effect = aiohttp.ClientError("boom")
        client = HttpClient(session=session)

        assert await client.probe_size("https://cdn/x.mp4") is None

    @pytest.mark.asyncio
    async def test_empty_url(self) -> None:
        session = make_session()
        client = HttpClient(session=session)

        assert await client.probe_size("") is None
        session.request.assert_not_called()


class TestClose:
    """Tests for HttpClient.close."""

    @pytest.mark.asyncio
    async def test_injected_session_not_closed(self) -> None:
        session = make_session()
        client = HttpClient(session=session)

        await client.close()

        session.close.assert_not_called()
