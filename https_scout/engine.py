# File: https_scout/engine.py
"""https_scout.engine: слой оркестрации для запуска обхода из CLI и тестов."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from https_scout.config import CrawlerConfig, load_config
from https_scout.crawler.crawler import AsyncCrawler
from https_scout.crawler.models import CrawlStats
from https_scout.logger import logger
from https_scout.report.sink import LineWriter

__all__ = ["Engine", "start_crawl"]


async def start_crawl(
    cfg: CrawlerConfig,
    out: LineWriter,
    log: Optional[logging.Logger] = None,
) -> CrawlStats:
    """
    Запускает AsyncCrawler в контексте и возвращает статистику обхода.

    Parameters
    ----------
    cfg : CrawlerConfig
        Конфигурация обхода.
    out : LineWriter
        Поток результатов, строки ``<страница> <ссылка>``.
    log : logging.Logger, optional
        Поток ошибок; по умолчанию логгер проекта.
    """
    async with AsyncCrawler(cfg, out, log or logger) as crawler:
        return await crawler.crawl()


class Engine:
    """Фасад для CLI и тестов: загрузка конфига и синхронный запуск обхода."""

    @staticmethod
    def load_config(path: Optional[str], **overrides) -> CrawlerConfig:
        """Загружает конфиг из YAML/JSON и накладывает overrides."""
        return load_config(path, **overrides)

    def __init__(self, config: CrawlerConfig) -> None:
        self.config = config

    def run(self, out: LineWriter, log: Optional[logging.Logger] = None) -> CrawlStats:
        """Запускает обход до исчерпания всех страниц и проверок.

        ValueError (отклонённая конфигурация) не перехватывается: о ней
        сообщает вызывающий код, например CLI.
        """
        return asyncio.run(start_crawl(self.config, out, log or logger))
