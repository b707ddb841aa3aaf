# https_scout/crawler/__init__.py
"""Crawl engine: frontier, per-host throttle, fetcher, link extractor and HTTPS prober."""

from .crawler import AsyncCrawler
from .frontier import Frontier
from .link_extractor import extract_links
from .models import CrawlStats, FetchError, OutgoingLink, PageData, PageTask, TaskState
from .prober import HttpsProber
from .throttle import HostBudget, HostSlot, HostThrottle

__all__ = [
    "AsyncCrawler",
    "CrawlStats",
    "FetchError",
    "Frontier",
    "HostBudget",
    "HostSlot",
    "HostThrottle",
    "HttpsProber",
    "OutgoingLink",
    "PageData",
    "PageTask",
    "TaskState",
    "extract_links",
]
