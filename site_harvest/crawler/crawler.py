from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from typing import Deque, List, Optional, Set
from urllib.parse import urlparse

from aiohttp import ClientSession, ClientTimeout

from site_harvest.config import CrawlOptions
from site_harvest.crawler.classifier import IMAGES, is_downloadable, is_image
from site_harvest.crawler.downloader import Downloader
from site_harvest.crawler.fetcher import Fetcher
from site_harvest.crawler.link_extractor import ExtractedLinks, extract_all
from site_harvest.domain import extract_domain, is_same_domain
from site_harvest.errors import InvalidSeedURL, PageFetchError
from site_harvest.logger import LOGGER_NAME
from site_harvest.models import (
    FILE,
    IMAGE,
    PAGE,
    AssetRef,
    CrawlResult,
    Downloads,
    FrontierEntry,
    PageMetadata,
    PageRecord,
    SinglePageResult,
)
from site_harvest.parser.html_parser import parse_page_info, to_markdown, to_plain_text

__all__ = ("DomainCrawler",)

METADATA_IMAGES = 10


class DomainCrawler:
    """
    Breadth-first crawler for one domain.

    Owns the frontier, the visited set and the downloaded-asset sets for a
    single run; instances must not be shared between concurrent crawls.
    Requests are issued one at a time, with ``options.delay`` ms between them.
    """

    def __init__(self, start_url: str, options: Optional[CrawlOptions] = None) -> None:
        self.start_url = start_url.strip()
        self.options = options or CrawlOptions()
        self.domain = extract_domain(self.start_url)
        if not self.domain:
            raise InvalidSeedURL(start_url)
        parsed = urlparse(self.start_url)
        if not parsed.path:
            # "https://a.test" and the "/" links pointing back to it are one page
            self.start_url = parsed._replace(path="/").geturl()
        self.frontier: Deque[FrontierEntry] = deque()
        self.visited: Set[str] = set()
        self.visited_order: List[str] = []
        self.downloaded_images: Set[str] = set()
        self.downloaded_files: Set[str] = set()
        self.downloads = Downloads()
        self.session: Optional[ClientSession] = None
        self.fetcher: Optional[Fetcher] = None
        self.downloader: Optional[Downloader] = None
        self.logger = logging.getLogger(LOGGER_NAME)

    async def __aenter__(self) -> DomainCrawler:
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.options.timeout),
            headers={"User-Agent": self.options.user_agent},
            raise_for_status=False,
        )
        self.fetcher = Fetcher(self.session, self.options)
        self.downloader = Downloader(self.fetcher, self.options.download_dir, self.options.max_file_size)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    # ------------------------------------------------------------------ #
    # Public entry points                                                #
    # ------------------------------------------------------------------ #

    async def crawl(self) -> CrawlResult:
        """Run the BFS loop until the frontier empties or ``max_pages`` is reached."""
        self._require_session()
        opts = self.options
        self.logger.info(
            "Старт обхода: %s (max_depth=%d, max_pages=%d)", self.start_url, opts.max_depth, opts.max_pages
        )
        start = time.monotonic()
        result = CrawlResult(domain=self.domain, downloads=self.downloads, export_format=opts.export_format)
        self.frontier.append(FrontierEntry(self.start_url, 0))

        while self.frontier and len(result.pages) < opts.max_pages:
            entry = self.frontier.popleft()
            if entry.url in self.visited:
                self.logger.debug("Skip visited %s", entry.url)
                continue
            try:
                await self._process(entry, result)
            except Exception:
                self.logger.exception("Error crawling %s", entry.url)
            if self.frontier and len(result.pages) < opts.max_pages:
                await self._throttle()

        result.visited_urls = list(self.visited_order)
        duration = time.monotonic() - start
        self.logger.info(
            "Завершено: %d страниц, %d URL посещено, %d изображений, %d файлов за %.2f с",
            result.pages_count, len(self.visited), len(self.downloads.images), len(self.downloads.files), duration,
        )
        return result

    async def scrape_page(self) -> SinglePageResult:
        """Fetch and extract the seed page alone, with its downloads and metadata."""
        self._require_session()
        self.logger.info("Загрузка страницы: %s", self.start_url)
        self._mark_visited(self.start_url)
        fetched = await self.fetcher.fetch_page(self.start_url)
        if not fetched.ok:
            raise PageFetchError(self.start_url, fetched.error or "empty body")
        html = str(fetched.content)
        page, extracted = await self._build_page(self.start_url, html)
        info = parse_page_info(html)
        metadata = PageMetadata(
            title=info.title,
            description=info.description,
            keywords=info.keywords,
            url=self.start_url,
            images=extracted.images[:METADATA_IMAGES],
        )
        return SinglePageResult(
            page=page, metadata=metadata, downloads=self.downloads, export_format=self.options.export_format
        )

    # ------------------------------------------------------------------ #
    # Loop body                                                          #
    # ------------------------------------------------------------------ #

    async def _process(self, entry: FrontierEntry, result: CrawlResult) -> None:
        url, depth, kind = entry.url, entry.depth, entry.kind
        self._mark_visited(url)

        if kind == PAGE and is_downloadable(url):
            # <a href="report.pdf"> is a file, not a page
            kind = IMAGE if is_image(url) else FILE
        if kind != PAGE:
            await self._download(url, kind)
            return

        self.logger.info("Crawling %s (depth: %d)", url, depth)
        fetched = await self.fetcher.fetch_page(url)
        if not fetched.ok:
            self.logger.warning("Failed to fetch %s: %s", url, fetched.error)
            return

        page, extracted = await self._build_page(url, str(fetched.content))
        result.pages.append(page)

        if depth < self.options.max_depth:
            self._enqueue(extracted.links, depth + 1)
            if self.options.download_images:
                self._enqueue(extracted.images, depth + 1, IMAGE)
            if self.options.download_files:
                self._enqueue(extracted.files, depth + 1, FILE)

    async def _build_page(self, url: str, html: str) -> tuple[PageRecord, ExtractedLinks]:
        extracted = extract_all(html, url)
        page = PageRecord(
            url=url,
            title=parse_page_info(html).title,
            content=to_plain_text(html),
            markdown=to_markdown(html),
            html=html,
            links=extracted.links,
        )
        opts = self.options
        if opts.download_images:
            for image_url in extracted.images[: opts.max_images_per_page]:
                asset = await self._download(image_url, IMAGE)
                if asset:
                    page.downloaded_images.append(asset)
        if opts.download_files:
            for file_url in extracted.files[: opts.max_files_per_page]:
                asset = await self._download(file_url, FILE)
                if asset:
                    page.downloaded_files.append(asset)
        return page, extracted

    async def _download(self, url: str, kind: str) -> Optional[AssetRef]:
        """Download *url* once per crawl, honouring the image/file flags."""
        image = kind == IMAGE
        enabled = self.options.download_images if image else self.options.download_files
        seen = self.downloaded_images if image else self.downloaded_files
        if url in seen:
            return None
        outcome = await self.downloader.download(
            url, self.domain, persist=enabled, category=IMAGES if image else None
        )
        if not outcome.success or outcome.file_path is None:
            return None
        seen.add(url)
        self._mark_visited(url)
        asset = AssetRef(
            original_url=url, local_path=outcome.file_path, size=outcome.size, category=outcome.category
        )
        self.downloads.add(asset)
        return asset

    def _enqueue(self, urls: List[str], depth: int, kind: str = PAGE) -> None:
        # Duplicates already waiting in the frontier are tolerated; the
        # visited check at dequeue time keeps processing at-most-once.
        for url in urls:
            if is_same_domain(url, self.domain) and url not in self.visited:
                self.frontier.append(FrontierEntry(url, depth, kind))
                self.logger.debug("Enqueued %s %s at depth %d", kind, url, depth)

    async def _throttle(self) -> None:
        if self.options.delay > 0:
            await asyncio.sleep(self.options.delay_seconds)

    def _mark_visited(self, url: str) -> None:
        if url not in self.visited:
            self.visited.add(url)
            self.visited_order.append(url)

    def _require_session(self) -> None:
        if self.fetcher is None or self.downloader is None:
            raise RuntimeError("Session not initialized")
