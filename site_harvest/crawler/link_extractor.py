# site_harvest/crawler/link_extractor.py
"""
Link and asset extraction for SiteHarvest.

Every reference is resolved against the page URL; anything that cannot be
resolved to an http(s) URL is dropped without failing the page.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_harvest.crawler.classifier import is_downloadable, is_image

_SKIP_PREFIXES = ("javascript:", "mailto:", "tel:", "data:", "#")
_MEDIA_TAGS = ("video", "audio", "source")


@dataclass(slots=True)
class ExtractedLinks:
    """Ordered (first occurrence) references found on one page."""

    links: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    media: List[str] = field(default_factory=list)

    @property
    def files(self) -> List[str]:
        """Non-image downloadables: media sources plus downloadable anchors."""
        candidates = self.media + [u for u in self.links if is_downloadable(u) and not is_image(u)]
        return _unique(candidates)


def resolve_url(href: Optional[str], base_url: str) -> Optional[str]:
    """
    Resolve *href* against *base_url*.

    Returns None for empty, fragment-only, non-http(s) or malformed references.
    """
    if not isinstance(href, str):
        return None
    raw = href.strip()
    if not raw or raw.lower().startswith(_SKIP_PREFIXES):
        return None
    try:
        absolute, _ = urldefrag(urljoin(base_url, raw))
        parsed = urlparse(absolute)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            return None
    except ValueError:
        return None
    return absolute


def _unique(urls: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(urls))


def _resolve_all(tags: Iterable[Tag], attr: str, base_url: str) -> List[str]:
    resolved = []
    for tag in tags:
        if not isinstance(tag, Tag):
            continue
        url = resolve_url(tag.get(attr), base_url)
        if url:
            resolved.append(url)
    return _unique(resolved)


def extract_links(soup: BeautifulSoup, base_url: str) -> List[str]:
    """Absolute targets of ``<a href>`` in document order."""
    return _resolve_all(soup.find_all("a", href=True), "href", base_url)


def extract_images(soup: BeautifulSoup, base_url: str) -> List[str]:
    return _resolve_all(soup.find_all("img", src=True), "src", base_url)


def extract_media(soup: BeautifulSoup, base_url: str) -> List[str]:
    """Sources of video/audio/source tags and downloadable ``<link href>`` resources."""
    found: List[str] = []
    for tag in soup.find_all([*_MEDIA_TAGS, "link"]):
        if not isinstance(tag, Tag):
            continue
        if tag.name == "link":
            url = resolve_url(tag.get("href"), base_url)
            if url and is_downloadable(url):
                found.append(url)
        else:
            url = resolve_url(tag.get("src"), base_url)
            if url:
                found.append(url)
    return _unique(found)


def extract_all(html: str, base_url: str) -> ExtractedLinks:
    """Parse *html* once and collect links, images and other media."""
    soup = BeautifulSoup(html, "html.parser")
    return ExtractedLinks(
        links=extract_links(soup, base_url),
        images=extract_images(soup, base_url),
        media=extract_media(soup, base_url),
    )


__all__ = (
    "ExtractedLinks",
    "extract_all",
    "extract_images",
    "extract_links",
    "extract_media",
    "resolve_url",
)
