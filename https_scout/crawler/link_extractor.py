# https_scout/crawler/link_extractor.py
"""
Link extraction for HttpsScout.
"""
from __future__ import annotations

import logging
from typing import Iterator, Union
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

from https_scout.utils import strip_fragment

logger = logging.getLogger(__name__)

_SCHEMES = ("http", "https")


def _decode(body: Union[str, bytes]) -> str | None:
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if "\x00" in body:
        return None
    return body


def extract_links(base_url: str, body: Union[str, bytes]) -> Iterator[str]:
    """
    Yield absolute http(s) targets of every ``<a href>`` in *body*.

    Targets are resolved against *base_url* and returned without fragment.
    Fragment-only hrefs and other schemes (mailto:, javascript:, ...) are skipped.
    Binary bodies yield nothing.
    """
    html = _decode(body)
    if html is None:
        logger.debug("Skipping binary body of %s", base_url)
        return
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw or raw.startswith("#"):
            continue
        try:
            absolute = urljoin(base_url, raw)
            parts = urlsplit(absolute)
        except ValueError:
            logger.debug("Unparseable href %r on %s", raw, base_url)
            continue
        if parts.scheme.lower() not in _SCHEMES or not parts.hostname:
            continue
        yield strip_fragment(absolute)
