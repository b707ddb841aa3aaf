# === FILE: https_scout/logger.py ===
"""Project-wide logging configuration for **HttpsScout**.

Highlights
----------
* The project logger doubles as the crawl *error stream*: fetch failures and
  (with ``--verbose``) progress notices are written through it.
* Console output goes to **stderr**, stdout is reserved for results.
* Optional file output with rotation.
* Single, importable instance :data:`logger` – simply::

      from https_scout.logger import logger
      logger.error("failed to fetch %s", url)
* Re‑configurable at runtime via :func:`configure`.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Optional, TextIO, Union

# --------------------------------------------------------------------------- #
# Constants & basic types                                                     #
# --------------------------------------------------------------------------- #

_DEFAULT_FORMAT: Final[str] = "%(message)s"
_FILE_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "HttpsScout"

_LevelT = Union[int, str]


# --------------------------------------------------------------------------- #
# Helper builders                                                             #
# --------------------------------------------------------------------------- #


def _stream_handler(fmt: str, stream: Optional[TextIO] = None) -> logging.StreamHandler:
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _file_handler(file: Path | str) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=str(file),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    return handler


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """(Re)configure the global project logger.

    Parameters
    ----------
    level
        Numeric or textual logging level (e.g. ``"DEBUG"``).
    log_file
        Path to a logfile. *None* → console‑only output.
    log_format
        Format string for the console :class:`logging.Formatter`.
    replace_handlers
        *True* – remove existing handlers; *False* – just append new one(s).
    stream
        Console stream, ``sys.stderr`` when omitted.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)

    if replace_handlers:
        lg.handlers.clear()

    lg.addHandler(_stream_handler(log_format, stream))

    if log_file is not None:
        lg.addHandler(_file_handler(log_file))

    lg.propagate = False
    return lg


def capture(lg: logging.Logger, buffer: TextIO, log_format: str = _DEFAULT_FORMAT) -> logging.Handler:
    """Tee every record of *lg* into *buffer* as well; returns the added handler."""
    handler = _stream_handler(log_format, buffer)
    lg.addHandler(handler)
    return handler


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """Backward‑compatible alias used by the CLI."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


# --------------------------------------------------------------------------- #
# Ready‑to‑use instance                                                       #
# --------------------------------------------------------------------------- #

logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "capture", "init_logging", "LOGGER_NAME"]
