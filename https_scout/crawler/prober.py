# https_scout/crawler/prober.py
"""
HTTPS upgrade probe.

An ``http://`` link is upgradable when the same URL with the ``https`` scheme
answers with a 2xx or 3xx status. Connection failures, TLS errors and timeouts
are the ordinary negative outcome, not errors.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

from aiohttp import ClientError, ClientSession, ClientTimeout

from https_scout.crawler.throttle import HostThrottle
from https_scout.utils import extract_host, is_http_url, to_https

logger = logging.getLogger(__name__)

__all__ = ("HttpsProber",)

# Statuses meaning "this method is not supported here": retry with GET.
_HEAD_REJECTED = (405, 501)


class HttpsProber:
    """Checks whether ``http://`` links have a working ``https://`` twin.

    Results are cached per HTTPS URL for the lifetime of the prober; concurrent
    probes of the same URL share one request.
    """

    def __init__(
        self,
        session: ClientSession,
        throttle: HostThrottle,
        timeout: Optional[float] = None,
    ) -> None:
        self.session = session
        self.throttle = throttle
        self._timeout = ClientTimeout(total=timeout) if timeout else None
        self._cache: Dict[str, asyncio.Future[bool]] = {}

    async def probe_upgrade(self, http_url: str) -> bool:
        if not is_http_url(http_url):
            return False
        target = to_https(http_url)
        future = self._cache.get(target)
        if future is None:
            future = asyncio.ensure_future(self._probe(target))
            self._cache[target] = future
        return await asyncio.shield(future)

    def cancel_pending(self) -> None:
        for future in self._cache.values():
            if not future.done():
                future.cancel()

    async def _probe(self, url: str) -> bool:
        status = await self._request("HEAD", url)
        if status in _HEAD_REJECTED:
            logger.debug("HEAD rejected by %s (%s), retrying with GET", url, status)
            status = await self._request("GET", url)
        upgradable = status is not None and 200 <= status < 400
        logger.debug("Probe %s -> %s (%s)", url, upgradable, status)
        return upgradable

    async def _request(self, method: str, url: str) -> Optional[int]:
        kwargs = {"allow_redirects": False}
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout
        try:
            async with self.throttle.slot(extract_host(url)):
                async with self.session.request(method, url, **kwargs) as resp:
                    return resp.status
        except (ClientError, asyncio.TimeoutError, OSError) as exc:
            logger.debug("%s %s failed: %r", method, url, exc)
            return None
