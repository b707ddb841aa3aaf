# === FILE: https_scout/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import logging
import time
from typing import List, Optional, Protocol, Set, Tuple
from urllib.parse import urlsplit

from aiohttp import ClientSession, ClientTimeout, TCPConnector

from https_scout.crawler.fetcher import Fetcher
from https_scout.crawler.frontier import Frontier
from https_scout.crawler.link_extractor import extract_links
from https_scout.crawler.models import CrawlStats, FetchError, OutgoingLink, PageTask, TaskState
from https_scout.crawler.prober import HttpsProber
from https_scout.crawler.throttle import HostThrottle
from https_scout.logger import LOGGER_NAME
from https_scout.report.sink import LineWriter
from https_scout.utils import LinkKind, classify, extract_host, is_http_url, strip_fragment

__all__ = ("AsyncCrawler", "Prober")


class Prober(Protocol):
    async def probe_upgrade(self, http_url: str) -> bool: ...


class AsyncCrawler:
    """Асинхронный краулер: обход сайтов в ширину и проверка http:// ссылок на HTTPS.

    Results are written to *out* as ``<page> <link>`` lines the moment a probe
    succeeds; fetch failures go to *log* at ERROR level.
    """

    def __init__(
        self,
        config,
        out: LineWriter,
        log: Optional[logging.Logger] = None,
        prober: Optional[Prober] = None,
    ) -> None:
        self.config = config
        self._validate_config()
        self.out = out
        self.log = log or logging.getLogger(LOGGER_NAME)
        self.frontier = Frontier(config.depth)
        self.throttle = HostThrottle(config.parallel, config.delay)
        self.stats = CrawlStats()
        self.session: Optional[ClientSession] = None
        self.fetcher: Optional[Fetcher] = None
        self._prober: Optional[Prober] = prober
        self._own_prober: Optional[HttpsProber] = None
        self._reported: Set[Tuple[str, str]] = set()
        self._probes: Set[asyncio.Task[None]] = set()

    async def __aenter__(self) -> AsyncCrawler:
        # no pool limit: concurrency is bounded per host by the throttle, and
        # waiting for a pooled connection must not eat into a request's timeout
        self.session = ClientSession(
            connector=TCPConnector(limit=0),
            timeout=ClientTimeout(total=self.config.timeout),
            headers={"User-Agent": self.config.user_agent},
            raise_for_status=False,
        )
        self.fetcher = Fetcher(
            self.session,
            self.throttle,
            retry_times=getattr(self.config, "retry_times", 0),
            retry_backoff=getattr(self.config, "retry_backoff", 1.0),
        )
        if self._prober is None:
            self._own_prober = HttpsProber(self.session, self.throttle, self.config.timeout)
            self._prober = self._own_prober
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._own_prober is not None:
            self._own_prober.cancel_pending()
        if self.session and not self.session.closed:
            await self.session.close()

    @property
    def sites(self) -> List[str]:
        return list(dict.fromkeys(extract_host(s) for s in self.config.sites))

    async def crawl(self) -> CrawlStats:
        if self.fetcher is None:
            raise RuntimeError("Session not initialized")
        start = time.monotonic()
        for seed in self.config.sites:
            await self.frontier.try_enqueue(PageTask(seed, 0, extract_host(seed)))

        worker_count = self.config.parallel * len(self.sites)
        self._notice("Crawling %d site(s) with %d worker(s)", len(self.sites), worker_count)
        workers = [asyncio.create_task(self._worker()) for _ in range(worker_count)]
        try:
            await asyncio.gather(*workers)
            while self._probes:
                await asyncio.gather(*tuple(self._probes))
        finally:
            pending = [t for t in (*workers, *self._probes) if not t.done()]
            for t in pending:
                t.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        self.stats.duration = time.monotonic() - start
        self._notice(
            "Done: %d page(s) fetched, %d failed, %d link(s) upgradable in %.2f s",
            self.stats.pages_fetched,
            self.stats.pages_failed,
            self.stats.upgradable,
            self.stats.duration,
        )
        return self.stats

    # alias for compatibility
    run = crawl

    async def _worker(self) -> None:
        while True:
            task = await self.frontier.dequeue()
            if task is None:
                return
            try:
                await self._process(task)
            finally:
                await self.frontier.task_done()

    async def _process(self, task: PageTask) -> None:
        assert self.fetcher is not None
        task.state = TaskState.FETCHING
        self._notice("Fetching %s (depth %d)", task.url, task.depth)
        try:
            page = await self.fetcher.fetch(task.url)
        except FetchError as exc:
            task.state = TaskState.FAILED
            self.stats.pages_failed += 1
            self.stats.failed_urls.append(task.url)
            self.log.error("%s", exc)
            return

        task.state = TaskState.PARSED
        self.stats.pages_fetched += 1
        if page is None:
            self._notice("Skipping non-HTML %s", task.url)
            return
        if page.location is not None:
            self._notice("Redirect %s -> %s", task.url, page.location)
            target = strip_fragment(page.location)
            if urlsplit(target).scheme.lower() in ("http", "https"):
                self.stats.links_seen += 1
                # same page under another URL: keeps the depth of the task
                await self._handle_link(task, OutgoingLink(task.url, target), task.depth)
            return

        found = 0
        for target in extract_links(page.url, page.content):
            found += 1
            await self._handle_link(task, OutgoingLink(task.url, target), task.depth + 1)
        self.stats.links_seen += found
        self._notice("Found %d link(s) on %s", found, task.url)

    async def _handle_link(self, task: PageTask, link: OutgoingLink, next_depth: int) -> None:
        if classify(task.site, link.target) is LinkKind.SAME_SITE and self.frontier.admits_depth(next_depth):
            await self.frontier.try_enqueue(PageTask(link.target, next_depth, task.site))

        if not is_http_url(link.target):
            return
        key = (link.source, link.target)
        if key in self._reported:
            return
        self._reported.add(key)
        self.stats.probes += 1
        probe = asyncio.create_task(self._probe_and_report(link))
        self._probes.add(probe)
        probe.add_done_callback(self._probes.discard)

    async def _probe_and_report(self, link: OutgoingLink) -> None:
        assert self._prober is not None
        try:
            upgradable = await self._prober.probe_upgrade(link.target)
        except Exception as exc:
            self.log.error("failed to probe %s: %s", link.target, exc)
            return
        if upgradable:
            self.stats.upgradable += 1
            self.out.write_line(link.line)

    def _notice(self, msg: str, *args: object) -> None:
        if self.config.verbose:
            self.log.info(msg, *args)

    def _validate_config(self) -> None:
        required = ("sites", "depth", "parallel", "delay", "timeout", "user_agent", "verbose")
        for f in required:
            if not hasattr(self.config, f):
                raise AttributeError(f"config missing '{f}'")
        if not self.config.sites:
            raise ValueError("at least one site is required")
        if self.config.parallel < 1:
            raise ValueError("parallel must be >= 1")
        if self.config.delay < 0:
            raise ValueError("delay must be >= 0")
        if self.config.depth < 0:
            raise ValueError("depth must be >= 0")
