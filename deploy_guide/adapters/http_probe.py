"""Probe that inspects a live URL with plain HTTP requests."""

import asyncio
import re
import time
from contextlib import AsyncExitStack, asynccontextmanager
from contextvars import ContextVar
from typing import AsyncIterator

import httpx

from deploy_guide.adapters.base import Probe
from deploy_guide.adapters.checks import (
    connectivity_check,
    functionality_check,
    seo_check,
    ssl_check,
)
from deploy_guide.models.validation import ValidationCheck
from deploy_guide.utils.logging import get_logger

logger = get_logger(__name__)

TITLE_PATTERN = re.compile(r"<title[^>]*>\s*[^<\s][^<]*</title>", re.IGNORECASE)
META_DESCRIPTION_PATTERN = re.compile(
    r"<meta[^>]+name=[\"']description[\"'][^>]*>", re.IGNORECASE
)

# Responses faster than this keep a perfect performance score
FAST_RESPONSE_MS = 200

Fetch = tuple[httpx.Response, float]


def latency_score(elapsed_ms: float) -> int:
    """Map response latency to 0-100: one point lost per 20ms over budget."""
    over_budget = max(0.0, elapsed_ms - FAST_RESPONSE_MS)
    return max(0, min(100, 100 - int(over_budget // 20)))


class _FetchSession:
    """One client, and at most one GET per URL, for a single validation."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client
        self.fetches: dict[str, asyncio.Task] = {}


_current_session: ContextVar[_FetchSession | None] = ContextVar(
    "http_probe_session", default=None
)


class HttpProbe(Probe):
    """GET-based probe. Does not execute JavaScript or audit rendering."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 10.0,
    ):
        self._client = client
        self.timeout_seconds = timeout_seconds

    @asynccontextmanager
    async def session(self) -> AsyncIterator[None]:
        async with AsyncExitStack() as stack:
            client = self._client
            if client is None:
                client = await stack.enter_async_context(
                    httpx.AsyncClient(timeout=self.timeout_seconds)
                )
            session = _FetchSession(client)
            token = _current_session.set(session)
            try:
                yield
            finally:
                _current_session.reset(token)
                for task in session.fetches.values():
                    task.cancel()

    async def _timed_get(self, client: httpx.AsyncClient, url: str) -> Fetch:
        start = time.perf_counter()
        response = await client.get(url, follow_redirects=True)
        return response, (time.perf_counter() - start) * 1000

    async def _fetch(self, url: str) -> Fetch:
        session = _current_session.get()
        if session is not None:
            task = session.fetches.get(url)
            if task is None:
                task = asyncio.ensure_future(self._timed_get(session.client, url))
                session.fetches[url] = task
            return await asyncio.shield(task)

        if self._client is not None:
            return await self._timed_get(self._client, url)
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            return await self._timed_get(client, url)

    async def test_connectivity(self, url: str) -> ValidationCheck:
        try:
            response, _ = await self._fetch(url)
        except httpx.HTTPError as e:
            logger.warning("http_probe.unreachable", url=url, error=str(e))
            return connectivity_check(False, details=str(e))
        return connectivity_check(
            response.status_code < 400,
            details=f"HTTP {response.status_code}",
        )

    async def test_ssl(self, url: str) -> ValidationCheck:
        if not url.startswith("https://"):
            return ssl_check(url)
        try:
            await self._fetch(url)
        except httpx.HTTPError as e:
            logger.warning("http_probe.ssl_unverified", url=url, error=str(e))
            return ssl_check(url, certificate_ok=False)
        return ssl_check(url)

    async def test_performance(self, url: str) -> int:
        try:
            _, elapsed_ms = await self._fetch(url)
        except httpx.HTTPError as e:
            logger.warning("http_probe.performance_failed", url=url, error=str(e))
            return 0
        return latency_score(elapsed_ms)

    async def test_seo(self, url: str) -> ValidationCheck:
        issues: list[str] = []
        try:
            response, _ = await self._fetch(url)
        except httpx.HTTPError:
            issues.append("Page could not be fetched")
            return seo_check(url, issues)

        html = response.text
        if not TITLE_PATTERN.search(html):
            issues.append("Missing <title> tag")
        if not META_DESCRIPTION_PATTERN.search(html):
            issues.append("Missing meta description")
        return seo_check(url, issues)

    async def test_functionality(self, url: str, kind: str) -> ValidationCheck:
        try:
            response, _ = await self._fetch(url)
        except httpx.HTTPError:
            return functionality_check(kind, working=False)
        working = response.status_code == 200 and bool(response.text.strip())
        return functionality_check(kind, working=working)
