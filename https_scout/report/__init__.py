# File: https_scout/report/__init__.py
"""https_scout.report: потоки результатов и уведомления, используемые CLI и тестами."""

from __future__ import annotations

from .sink import LineWriter
from .slack import format_message
from .webhook import WebhookError, post_message

__all__ = ["LineWriter", "format_message", "post_message", "WebhookError"]
