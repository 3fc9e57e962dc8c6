"""Exceptions raised to callers of :func:`site_harvest.engine.start_crawl`."""
from __future__ import annotations


class CrawlError(Exception):
    """Base class for failures that abort a crawl."""


class InvalidSeedURL(CrawlError, ValueError):
    """The seed URL has no usable host, so there is no domain to crawl."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Invalid seed URL: {url!r}")
        self.url = url


class PageFetchError(CrawlError):
    """Single-page mode could not fetch its only page."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


__all__ = ["CrawlError", "InvalidSeedURL", "PageFetchError"]
