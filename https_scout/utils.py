# File: https_scout/utils.py
"""https_scout.utils: URL helpers shared by the frontier, the extractor and the prober."""

from __future__ import annotations

import logging
import posixpath
from enum import Enum
from typing import Sequence
from urllib.parse import parse_qsl, quote, unquote, urlencode, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

__all__: Sequence[str] = (
    "LinkKind",
    "classify",
    "extract_host",
    "is_http_url",
    "normalize_url",
    "strip_fragment",
    "to_https",
)

_PATH_SAFE = "/:@!$&'()*+,;=-._~"


class LinkKind(str, Enum):
    SAME_SITE = "same-site"
    OFF_SITE = "off-site"


def normalize_url(url: str) -> str:
    """Canonical form used as the visited-set key.

    Lower-cases scheme and host, collapses dot segments, sorts the query and
    drops the fragment. An empty path becomes ``/``.
    """
    parsed = urlsplit(url)
    scheme = parsed.scheme.lower()
    netloc = parsed.netloc.lower()
    path = unquote(parsed.path or "/")
    norm = posixpath.normpath(path)
    if path.endswith("/") and not norm.endswith("/"):
        norm += "/"
    if not norm.startswith("/"):
        norm = "/" + norm
    # posixpath keeps a leading "//"
    if norm.startswith("//"):
        norm = "/" + norm.lstrip("/")
    norm = quote(norm, safe=_PATH_SAFE)
    qs = parse_qsl(parsed.query, keep_blank_values=True)
    qs.sort()
    query = urlencode(qs, doseq=True)
    normalized = urlunsplit((scheme, netloc, norm, query, ""))
    logger.debug("Normalized URL: %s -> %s", url, normalized)
    return normalized


def strip_fragment(url: str) -> str:
    """Return *url* without its ``#fragment``."""
    parsed = urlsplit(url)
    if not parsed.fragment and not url.endswith("#"):
        return url
    return urlunsplit((parsed.scheme, parsed.netloc, parsed.path, parsed.query, ""))


def extract_host(url: str) -> str:
    """Host key of *url*: lower-cased ``host[:port]`` without credentials."""
    netloc = urlsplit(url).netloc.lower()
    return netloc.rpartition("@")[2]


def is_http_url(url: str) -> bool:
    return urlsplit(url).scheme.lower() == "http"


def to_https(url: str) -> str:
    """Same URL with the scheme replaced by ``https``.

    An explicit ``:80`` is the http default and is dropped; any other port is kept.
    """
    parsed = urlsplit(url)
    netloc = parsed.netloc
    try:
        port = parsed.port
    except ValueError:
        port = None
    if port == 80 and netloc.endswith(":80"):
        netloc = netloc[: -len(":80")]
    return urlunsplit(("https", netloc, parsed.path, parsed.query, parsed.fragment))


def classify(site: str, url: str) -> LinkKind:
    """Same-site when the host of *url* equals *site*, off-site otherwise."""
    if extract_host(url) == site.lower():
        return LinkKind.SAME_SITE
    return LinkKind.OFF_SITE
