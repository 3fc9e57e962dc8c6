# File: site_harvest/engine.py
"""site_harvest.engine: единая точка входа «запустить обход - получить результат»."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional, Union

from site_harvest.config import CrawlOptions, load_config
from site_harvest.crawler.crawler import DomainCrawler
from site_harvest.logger import LOGGER_NAME
from site_harvest.models import CrawlResult, SinglePageResult

__all__ = ["Engine", "HarvestResult", "start_crawl"]

logger = logging.getLogger(LOGGER_NAME)

HarvestResult = Union[CrawlResult, SinglePageResult]


def _coerce_options(options: Union[CrawlOptions, Mapping[str, Any], None]) -> CrawlOptions:
    if options is None:
        return CrawlOptions()
    if isinstance(options, CrawlOptions):
        return options
    return CrawlOptions(**dict(options))


async def start_crawl(
    url: str, options: Union[CrawlOptions, Mapping[str, Any], None] = None
) -> HarvestResult:
    """
    Запускает обход *url* и возвращает результат.

    Parameters
    ----------
    url : str
        Начальный URL.
    options : CrawlOptions | Mapping | None
        Параметры обхода; словарь проверяется через CrawlOptions
        (допускаются ключи в camelCase).

    Returns
    -------
    CrawlResult
        При ``recursive=True``.
    SinglePageResult
        При ``recursive=False``.

    Raises
    ------
    InvalidSeedURL
        Если у URL нет хоста.
    PageFetchError
        Если в режиме одной страницы её не удалось загрузить.
    """
    opts = _coerce_options(options)
    async with DomainCrawler(url, opts) as crawler:
        if opts.recursive:
            return await crawler.crawl()
        return await crawler.scrape_page()


class Engine:
    """Фасад для CLI и тестов: загрузка конфига и синхронный запуск обхода."""

    @staticmethod
    def load_config(path: Optional[str]) -> CrawlOptions:
        """Загружает конфиг из YAML/JSON или использует значения по умолчанию."""
        return load_config(path)

    def __init__(self, options: Optional[CrawlOptions] = None) -> None:
        self.options = options or CrawlOptions()

    def run(self, url: str, timeout: Optional[float] = None) -> HarvestResult:
        """Запускает обход в новом event loop; *timeout* ограничивает весь обход (секунд)."""
        logger.info("Starting crawl…")
        coro = start_crawl(url, self.options)
        try:
            if timeout:
                return asyncio.run(asyncio.wait_for(coro, timeout=timeout))
            return asyncio.run(coro)
        except asyncio.TimeoutError:
            logger.error("Crawl did not finish within %s seconds", timeout)
            raise
        except Exception as exc:
            logger.error("Crawl failed: %s", exc)
            raise
