# File: https_scout/report/webhook.py
"""https_scout.report.webhook: отправка сообщения во входящий webhook (Slack)."""

from __future__ import annotations

import asyncio
import logging

import aiohttp

logger = logging.getLogger(__name__)


class WebhookError(Exception):
    """Сообщение не доставлено: сетевая ошибка или статус не 2xx."""


async def post_message(url: str, text: str, *, timeout: float = 10.0) -> None:
    """POST ``{"text": text}`` на *url*; при неудаче бросает WebhookError.

    Пример:
    ```python
    from https_scout.report.webhook import post_message
    await post_message("https://hooks.slack.com/services/...", "hello")
    ```
    """
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    try:
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.post(url, json={"text": text}) as resp:
                body = await resp.text(errors="replace")
                if not 200 <= resp.status < 300:
                    raise WebhookError(f"webhook answered HTTP {resp.status}: {body.strip()[:200]}")
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise WebhookError(f"webhook request failed: {exc!r}") from exc
    logger.debug("Posted %d characters to webhook", len(text))
