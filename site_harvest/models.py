# File: site_harvest/models.py
"""site_harvest.models: структуры данных результата обхода.

Атрибуты - snake_case; :meth:`to_dict` отдаёт camelCase-представление,
которое ожидает транспортный слой (``pagesCount``, ``visitedUrls`` …).
"""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from site_harvest.crawler.classifier import IMAGES
from site_harvest.domain import extract_domain


# FrontierEntry.kind
PAGE = "page"
IMAGE = "image"
FILE = "file"


@dataclass(slots=True)
class FrontierEntry:
    """
    Pending unit of work in the BFS queue.

    *kind* is set by whoever enqueues the URL: ``page`` for hyperlinks,
    ``image``/``file`` for asset references, which are only ever downloaded.
    """

    url: str
    depth: int = 0
    kind: str = PAGE


@dataclass(slots=True)
class FetchResult:
    """Outcome of a single GET: body on success, *error* otherwise."""

    url: str
    status: Optional[int] = None
    content: Union[str, bytes, None] = None
    content_type: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.content is not None


@dataclass(slots=True)
class DownloadOutcome:
    """Transient result of one download attempt."""

    success: bool
    file_path: Optional[str]
    size: int
    category: str

    @classmethod
    def failed(cls, category: str) -> DownloadOutcome:
        return cls(success=False, file_path=None, size=0, category=category)


@dataclass(slots=True, frozen=True)
class AssetRef:
    """Successfully downloaded asset."""

    original_url: str
    local_path: str
    size: int
    category: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "originalUrl": self.original_url,
            "localPath": self.local_path,
            "size": self.size,
            "category": self.category,
        }


@dataclass(slots=True)
class PageRecord:
    """Одна успешно загруженная HTML-страница."""

    url: str
    title: str
    content: str
    markdown: str
    html: str
    links: List[str] = field(default_factory=list)
    downloaded_images: List[AssetRef] = field(default_factory=list)
    downloaded_files: List[AssetRef] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "content": self.content,
            "markdown": self.markdown,
            "html": self.html,
            "links": list(self.links),
            "downloadedImages": [a.to_dict() for a in self.downloaded_images],
            "downloadedFiles": [a.to_dict() for a in self.downloaded_files],
        }


@dataclass(slots=True)
class DownloadStats:
    total_images: int = 0
    total_files: int = 0
    total_size: int = 0
    files_by_category: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalImages": self.total_images,
            "totalFiles": self.total_files,
            "totalSize": self.total_size,
            "filesByCategory": dict(self.files_by_category),
        }


@dataclass(slots=True)
class Downloads:
    """Все скачанные за обход ресурсы, разложенные по двум спискам."""

    images: List[AssetRef] = field(default_factory=list)
    files: List[AssetRef] = field(default_factory=list)

    def add(self, asset: AssetRef) -> None:
        if asset.category == IMAGES:
            self.images.append(asset)
        else:
            self.files.append(asset)

    @property
    def stats(self) -> DownloadStats:
        by_category = Counter(a.category for a in self.files if a.category != IMAGES)
        return DownloadStats(
            total_images=len(self.images),
            total_files=len(self.files),
            total_size=sum(a.size for a in self.images) + sum(a.size for a in self.files),
            files_by_category=dict(by_category),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "images": [a.to_dict() for a in self.images],
            "files": [a.to_dict() for a in self.files],
            "stats": self.stats.to_dict(),
        }


@dataclass(slots=True)
class CrawlResult:
    """Итог рекурсивного обхода домена."""

    domain: str
    pages: List[PageRecord] = field(default_factory=list)
    visited_urls: List[str] = field(default_factory=list)
    downloads: Downloads = field(default_factory=Downloads)
    export_format: str = "json"

    @property
    def pages_count(self) -> int:
        return len(self.pages)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domainCrawl": True,
            "domain": self.domain,
            "pagesCount": self.pages_count,
            "visitedUrls": list(self.visited_urls),
            "pages": [p.to_dict() for p in self.pages],
            "downloads": self.downloads.to_dict(),
            "exportFormat": self.export_format,
        }

    def json(self, *, pretty: bool = False) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


@dataclass(slots=True)
class PageMetadata:
    title: str
    description: str
    keywords: str
    url: str
    images: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "keywords": self.keywords,
            "url": self.url,
            "images": list(self.images),
        }


@dataclass(slots=True)
class SinglePageResult:
    """Итог загрузки одной страницы (режим без рекурсии)."""

    page: PageRecord
    metadata: PageMetadata
    downloads: Downloads = field(default_factory=Downloads)
    export_format: str = "json"

    @property
    def domain(self) -> str:
        return extract_domain(self.page.url)

    @property
    def pages(self) -> List[PageRecord]:
        return [self.page]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "extractedContent": self.page.content,
            "markdown": self.page.markdown,
            "cleanedHtml": self.page.html,
            "metadata": self.metadata.to_dict(),
            "links": list(self.page.links),
            "downloads": self.downloads.to_dict(),
            "exportFormat": self.export_format,
        }

    def json(self, *, pretty: bool = False) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


__all__ = [
    "AssetRef",
    "CrawlResult",
    "DownloadOutcome",
    "DownloadStats",
    "Downloads",
    "FetchResult",
    "FILE",
    "FrontierEntry",
    "IMAGE",
    "PAGE",
    "PageMetadata",
    "PageRecord",
    "SinglePageResult",
]
