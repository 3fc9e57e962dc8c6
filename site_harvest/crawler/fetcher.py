# site_harvest/crawler/fetcher.py
"""
Fetcher module: single HTTP GETs over a shared aiohttp session.

Failures are reported through :class:`FetchResult.error` instead of
exceptions, so the crawl loop can decide between "skip" and "continue".
"""
from __future__ import annotations

import asyncio

from aiohttp import ClientError, ClientSession

from site_harvest.config import CrawlOptions
from site_harvest.models import FetchResult

_CHUNK_SIZE = 64 * 1024


class Fetcher:
    """Issues GET requests with the configured User-Agent."""

    def __init__(self, session: ClientSession, options: CrawlOptions) -> None:
        self.session = session
        self.options = options

    async def fetch_page(self, url: str) -> FetchResult:
        """
        Fetch *url* as text.

        Non-2xx statuses and transport errors produce a failed result.
        """
        try:
            async with self.session.get(url, allow_redirects=True) as resp:
                ctype = resp.headers.get("Content-Type", "").lower()
                if not 200 <= resp.status < 300:
                    return FetchResult(url, status=resp.status, content_type=ctype, error=f"HTTP {resp.status}")
                text = await resp.text(errors="replace")
                return FetchResult(url, status=resp.status, content=text, content_type=ctype)
        except (ClientError, asyncio.TimeoutError, ValueError) as exc:
            return FetchResult(url, error=f"{type(exc).__name__}: {exc}")

    async def fetch_bytes(self, url: str, max_size: int | None = None) -> FetchResult:
        """
        Fetch *url* as raw bytes, reading the body in chunks.

        When *max_size* is given, the download aborts as soon as the declared
        Content-Length or the bytes read so far exceed it.
        """
        limit = self.options.max_file_size if max_size is None else max_size
        try:
            async with self.session.get(url, allow_redirects=True) as resp:
                ctype = resp.headers.get("Content-Type", "").lower()
                if not 200 <= resp.status < 300:
                    return FetchResult(url, status=resp.status, content_type=ctype, error=f"HTTP {resp.status}")
                if resp.content_length is not None and resp.content_length > limit:
                    return FetchResult(
                        url, status=resp.status, content_type=ctype,
                        error=f"Content-Length {resp.content_length} exceeds {limit} bytes",
                    )
                body = bytearray()
                async for chunk in resp.content.iter_chunked(_CHUNK_SIZE):
                    body.extend(chunk)
                    if len(body) > limit:
                        return FetchResult(
                            url, status=resp.status, content_type=ctype,
                            error=f"body exceeds {limit} bytes",
                        )
                return FetchResult(url, status=resp.status, content=bytes(body), content_type=ctype)
        except (ClientError, asyncio.TimeoutError, ValueError) as exc:
            return FetchResult(url, error=f"{type(exc).__name__}: {exc}")
