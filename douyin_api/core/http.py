"""Async HTTP transport shared by all upstream clients.

Every call is bounded by a single total timeout. Network failures, timeouts
and unreadable bodies are raised as :class:`UpstreamError` so callers can
degrade locally instead of aborting a resolution.
"""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import aiohttp
import structlog

from douyin_api.core.metrics import MetricsCollector
from douyin_api.providers.exceptions import UpstreamError

logger = structlog.get_logger(__name__)


@dataclass
class HttpResponse:
    """A fully read upstream response."""

    status: int
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    content_length: Optional[int] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decode the body as JSON.

        Raises:
            UpstreamError: If the body is not valid JSON
        """
        try:
            return json.loads(self.body)
        except ValueError as e:
            raise UpstreamError(f"Invalid JSON from {self.url}: {e}", status=self.status) from e


class HttpClient:
    """Thin wrapper around a lazily created aiohttp session."""

    def __init__(
        self,
        timeout: float = 10.0,
        verify_ssl: bool = True,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
            self._owns_session = True
        return self._session

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        upstream: str = "generic",
        read_body: bool = True,
    ) -> HttpResponse:
        """Perform a request following redirects.

        Args:
            method: HTTP method (GET, HEAD)
            url: Target URL
            headers: Extra request headers
            upstream: Label used for metrics and logs
            read_body: Whether to read the response body

        Returns:
            HttpResponse with the final URL after redirects

        Raises:
            UpstreamError: On connection errors or timeouts
        """
        session = await self._get_session()

        try:
            async with session.request(
                method,
                url,
                headers=headers or {},
                allow_redirects=True,
                ssl=self.verify_ssl,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                body = await resp.text(errors="replace") if read_body else ""
                response = HttpResponse(
                    status=resp.status,
                    url=str(resp.url),
                    headers={k: v for k, v in resp.headers.items()},
                    body=body,
                    content_length=resp.content_length,
                )
        except asyncio.TimeoutError as e:
            MetricsCollector.record_upstream(upstream, "timeout")
            logger.warning("upstream_timeout", upstream=upstream, method=method, timeout=self.timeout)
            raise UpstreamError(f"Timeout after {self.timeout}s: {method} {url}") from e
        except aiohttp.ClientError as e:
            MetricsCollector.record_upstream(upstream, "error")
            logger.warning("upstream_request_failed", upstream=upstream, method=method, error=str(e))
            raise UpstreamError(f"{method} {url} failed: {e}") from e

        MetricsCollector.record_upstream(upstream, str(response.status))
        logger.debug(
            "upstream_response",
            upstream=upstream,
            method=method,
            status=response.status,
            final_url=response.url,
        )
        return response

    async def get(
        self, url: str, headers: Optional[Dict[str, str]] = None, upstream: str = "generic"
    ) -> HttpResponse:
        return await self.request("GET", url, headers=headers, upstream=upstream)

    async def head(
        self, url: str, headers: Optional[Dict[str, str]] = None, upstream: str = "generic"
    ) -> HttpResponse:
        return await self.request("HEAD", url, headers=headers, upstream=upstream, read_body=False)

    async def probe_size(self, url: str) -> Optional[int]:
        """Best-effort remote size probe.

        Returns:
            Byte length reported by the server, or None when unavailable
        """
        if not url:
            return None

        try:
            response = await self.head(url, upstream="size_probe")
        except UpstreamError:
            return None

        if response.content_length and response.content_length > 0:
            return response.content_length

        for name, value in response.headers.items():
            if name.lower() == "content-length":
                try:
                    length = int(value.strip())
                except ValueError:
                    return None
                return length if length > 0 else None

        return None

    async def close(self) -> None:
        """Close the underlying session if this client created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None
