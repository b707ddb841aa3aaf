# https_scout/crawler/models.py
"""
Data models for the HttpsScout crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class TaskState(str, Enum):
    QUEUED = "queued"
    FETCHING = "fetching"
    PARSED = "parsed"
    FAILED = "failed"


@dataclass(slots=True)
class PageTask:
    """A same-site page waiting for (or going through) a fetch."""

    url: str
    depth: int
    site: str
    state: TaskState = TaskState.QUEUED


@dataclass(slots=True)
class PageData:
    """Holds the URL, body and content type of a fetched page.

    A redirect response carries no body; its absolute target is in *location*.
    """

    url: str
    content: Union[str, bytes]
    content_type: str = ""
    location: Optional[str] = None


@dataclass(slots=True, frozen=True)
class OutgoingLink:
    """A link found on *source* pointing at *target*."""

    source: str
    target: str

    @property
    def line(self) -> str:
        return f"{self.source} {self.target}"


class FetchError(Exception):
    """A page could not be fetched; reported, never fatal for the crawl."""

    def __init__(self, url: str, cause: object) -> None:
        super().__init__(url, cause)
        self.url = url
        self.cause = cause

    def __str__(self) -> str:
        return f"failed to fetch {self.url}: {self.cause}"


@dataclass(slots=True)
class CrawlStats:
    pages_fetched: int = 0
    pages_failed: int = 0
    links_seen: int = 0
    probes: int = 0
    upgradable: int = 0
    duration: float = 0.0
    failed_urls: list[str] = field(default_factory=list)
