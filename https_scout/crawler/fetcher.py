# https_scout/crawler/fetcher.py
"""
Fetcher module: page GETs through the per-host throttle, with retry/backoff and timeout.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence
from urllib.parse import urljoin

from aiohttp import ClientError, ClientSession

from https_scout.crawler.models import FetchError, PageData
from https_scout.crawler.throttle import HostThrottle
from https_scout.utils import extract_host

logger = logging.getLogger(__name__)

HTML_TYPES: Sequence[str] = ("text/html", "application/xhtml+xml")
RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)
REDIRECT_STATUS: Sequence[int] = (301, 302, 303, 307, 308)


class _RetryableStatus(Exception):
    def __init__(self, status: int) -> None:
        super().__init__(f"HTTP {status}")
        self.status = status


class Fetcher:
    """Fetches pages for the crawl engine."""

    def __init__(
        self,
        session: ClientSession,
        throttle: HostThrottle,
        retry_times: int = 0,
        retry_backoff: float = 1.0,
    ) -> None:
        self.session = session
        self.throttle = throttle
        self.retry_times = retry_times
        self.retry_backoff = retry_backoff

    async def fetch(self, url: str) -> Optional[PageData]:
        """
        GET *url*.

        Returns PageData for HTML responses and None for any other 2xx content.
        A redirect is not followed: the returned PageData has no body and its
        ``location`` holds the absolute target.
        Raises FetchError on transport errors, timeouts and non-2xx statuses
        once the retries are used up.
        """
        attempts = 0
        while True:
            try:
                return await self._get(url)
            except (ClientError, asyncio.TimeoutError, _RetryableStatus) as exc:
                attempts += 1
                cause = exc if str(exc) else type(exc).__name__
                if attempts > self.retry_times:
                    raise FetchError(url, cause) from exc
                backoff = min(60.0, self.retry_backoff * 2 ** (attempts - 1))
                logger.debug("Retry %d/%d for %s after %.2f s", attempts, self.retry_times, url, backoff)
                await asyncio.sleep(backoff)

    async def _get(self, url: str) -> Optional[PageData]:
        # redirects are not followed: every hop is a separate throttled fetch
        async with self.throttle.slot(extract_host(url)):
            async with self.session.get(url, allow_redirects=False, raise_for_status=False) as resp:
                if resp.status in RETRY_STATUS:
                    raise _RetryableStatus(resp.status)
                location = resp.headers.get("Location")
                if resp.status in REDIRECT_STATUS and location:
                    try:
                        target = urljoin(url, location.strip())
                    except ValueError as exc:
                        raise FetchError(url, f"bad redirect {location!r}") from exc
                    return PageData(url, "", "", location=target)
                if not 200 <= resp.status < 300:
                    raise FetchError(url, f"HTTP {resp.status}")
                mime = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                if mime not in HTML_TYPES:
                    return None
                text = await resp.text(errors="replace")
                return PageData(str(resp.url), text, mime)
