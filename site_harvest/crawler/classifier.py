# site_harvest/crawler/classifier.py
"""
Asset classification by URL path extension.
"""
from __future__ import annotations

import posixpath
from typing import Dict, FrozenSet
from urllib.parse import urlparse

IMAGES = "images"
DOCUMENTS = "documents"
AUDIO = "audio"
VIDEOS = "videos"
ARCHIVES = "archives"
OTHER = "other"

CATEGORIES = (IMAGES, DOCUMENTS, AUDIO, VIDEOS, ARCHIVES, OTHER)

# Frozen sets for O(1) lookup; "other" holds downloadable resources with no better bucket
CATEGORY_EXTENSIONS: Dict[str, FrozenSet[str]] = {
    IMAGES: frozenset((
        "jpg", "jpeg", "png", "gif", "webp", "svg", "bmp", "ico", "tif", "tiff", "avif",
    )),
    DOCUMENTS: frozenset((
        "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "odt", "ods", "odp",
        "rtf", "txt", "csv", "epub",
    )),
    AUDIO: frozenset(("mp3", "wav", "ogg", "oga", "flac", "aac", "m4a", "weba")),
    VIDEOS: frozenset(("mp4", "webm", "avi", "mov", "mkv", "wmv", "flv", "m4v", "mpeg", "mpg")),
    ARCHIVES: frozenset(("zip", "rar", "7z", "tar", "gz", "tgz", "bz2", "xz")),
    OTHER: frozenset(("css", "js", "woff", "woff2", "ttf", "otf", "eot")),
}

DOWNLOADABLE_EXTENSIONS: FrozenSet[str] = frozenset().union(*CATEGORY_EXTENSIONS.values())


def extension(url: str) -> str:
    """Lower-cased extension of the URL path without the dot, or ``""``."""
    try:
        path = urlparse(url).path
    except ValueError:
        return ""
    return posixpath.splitext(path)[1].lstrip(".").lower()


def categorize(url: str) -> str:
    """Return the category bucket for *url*; unknown extensions fall into ``other``."""
    ext = extension(url)
    for category, extensions in CATEGORY_EXTENSIONS.items():
        if ext in extensions:
            return category
    return OTHER


def is_image(url: str) -> bool:
    return extension(url) in CATEGORY_EXTENSIONS[IMAGES]


def is_downloadable(url: str) -> bool:
    """Check if a URL points to a non-HTML resource worth saving."""
    return extension(url) in DOWNLOADABLE_EXTENSIONS


__all__ = (
    "CATEGORIES",
    "CATEGORY_EXTENSIONS",
    "DOWNLOADABLE_EXTENSIONS",
    "categorize",
    "extension",
    "is_downloadable",
    "is_image",
)
