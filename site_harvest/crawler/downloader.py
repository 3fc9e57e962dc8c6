# site_harvest/crawler/downloader.py
"""
Asset downloader: fetches a resource and stores it under
``<root>/<domain>/<category>/<filename>``.

Existing files are never overwritten; a clashing name gets ``_1``, ``_2`` …
inserted before its extension.
"""
from __future__ import annotations

import logging
import mimetypes
import os
import posixpath
import re
import time
from pathlib import Path
from urllib.parse import unquote, urlparse

from site_harvest.crawler.classifier import categorize
from site_harvest.crawler.fetcher import Fetcher
from site_harvest.logger import LOGGER_NAME
from site_harvest.models import DownloadOutcome

_UNSAFE_CHARS_RE = re.compile(r"[^\w.\-]+")


def _guess_extension(content_type: str) -> str:
    mime = content_type.split(";", 1)[0].strip()
    if not mime:
        return ""
    return mimetypes.guess_extension(mime) or ""


def filename_from_url(url: str, content_type: str = "") -> str:
    """
    Build a local filename from the last path segment of *url*.

    Empty or extensionless names are replaced by ``file_<epoch ms>`` with an
    extension guessed from *content_type*.
    """
    try:
        path = urlparse(url).path
    except ValueError:
        path = ""
    basename = _UNSAFE_CHARS_RE.sub("_", unquote(posixpath.basename(path))).strip("._")
    if not basename or not posixpath.splitext(basename)[1]:
        return f"file_{int(time.time() * 1000)}{_guess_extension(content_type)}"
    return basename


def unique_filename(directory: Path, filename: str) -> str:
    """Return *filename*, or the first free ``stem_N.ext`` variant inside *directory*."""
    if not (directory / filename).exists():
        return filename
    stem, ext = os.path.splitext(filename)
    counter = 1
    while (directory / f"{stem}_{counter}{ext}").exists():
        counter += 1
    return f"{stem}_{counter}{ext}"


class Downloader:
    """Saves assets to disk; every failure is reported, never raised."""

    def __init__(self, fetcher: Fetcher, root: Path | str, max_file_size: int) -> None:
        self.fetcher = fetcher
        self.root = Path(root)
        self.max_file_size = max_file_size
        self.logger = logging.getLogger(LOGGER_NAME)

    async def download(
        self, url: str, domain: str, persist: bool = True, category: str | None = None
    ) -> DownloadOutcome:
        """
        Fetch *url* and store it; *category* overrides the extension-based bucket
        (an ``<img>`` without an extension is still an image).
        """
        category = category or categorize(url)
        if not persist:
            return DownloadOutcome.failed(category)

        target_dir = self.root / domain / category
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self.logger.warning("Cannot create %s: %s", target_dir, exc)
            return DownloadOutcome.failed(category)

        fetched = await self.fetcher.fetch_bytes(url, max_size=self.max_file_size)
        if not fetched.ok:
            self.logger.warning("Download failed %s: %s", url, fetched.error)
            return DownloadOutcome.failed(category)

        data = fetched.content if isinstance(fetched.content, bytes) else fetched.content.encode()
        filename = unique_filename(target_dir, filename_from_url(url, fetched.content_type))
        try:
            (target_dir / filename).write_bytes(data)
        except OSError as exc:
            self.logger.warning("Cannot write %s: %s", target_dir / filename, exc)
            return DownloadOutcome.failed(category)

        self.logger.debug("Saved %s -> %s/%s (%d bytes)", url, target_dir, filename, len(data))
        return DownloadOutcome(
            success=True,
            file_path=f"{domain}/{category}/{filename}",
            size=len(data),
            category=category,
        )
