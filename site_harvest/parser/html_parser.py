# === FILE: site_harvest/parser/html_parser.py ===
"""HTML → text/markdown helpers for SiteHarvest.

Two derived views are produced from raw markup:

* :func:`to_plain_text` - visible text with ``<script>``/``<style>`` removed
  and whitespace collapsed; this is the ``content`` field of a page.
* :func:`to_markdown` - a simplified markdown rendering.

Both are **shallow pattern substitutions**, not a structural parse: nested,
overlapping or malformed markup is rendered on a best-effort basis and is
not expected to round-trip.  Title and ``<meta>`` lookups go through
BeautifulSoup instead, since they need attribute access.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__: Sequence[str] = ("PageInfo", "parse_page_info", "to_markdown", "to_plain_text")

_FLAGS = re.IGNORECASE

_SCRIPT_RE = re.compile(r"<script\b[^>]*>.*?</script\s*>", _FLAGS | re.DOTALL)
_STYLE_RE = re.compile(r"<style\b[^>]*>.*?</style\s*>", _FLAGS | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")
_SPACES_RE = re.compile(r"\s{2,}")
_NEWLINES_RE = re.compile(r"\n{3,}")


def _tag(name: str) -> str:
    """Opening-tag pattern that matches *name* exactly (``b`` but not ``br``/``body``)."""
    return rf"<{name}(?:\s[^>]*)?>"


# Applied in order; each value is a replacement template.
_INLINE_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    *(
        (re.compile(rf"{_tag(f'h{level}')}(.*?)</h{level}>", _FLAGS), "#" * level + r" \1\n\n")
        for level in range(1, 7)
    ),
    (re.compile(rf"{_tag('p')}(.*?)</p>", _FLAGS), r"\1\n\n"),
    (re.compile(r"<a\s[^>]*?href=[\"']([^\"']*)[\"'][^>]*>(.*?)</a>", _FLAGS), r"[\2](\1)"),
    (re.compile(rf"{_tag('strong')}(.*?)</strong>", _FLAGS), r"**\1**"),
    (re.compile(rf"{_tag('b')}(.*?)</b>", _FLAGS), r"**\1**"),
    (re.compile(rf"{_tag('em')}(.*?)</em>", _FLAGS), r"*\1*"),
    (re.compile(rf"{_tag('i')}(.*?)</i>", _FLAGS), r"*\1*"),
)

_UL_RE = re.compile(rf"{_tag('ul')}.*?</ul>", _FLAGS | re.DOTALL)
_OL_RE = re.compile(rf"{_tag('ol')}.*?</ol>", _FLAGS | re.DOTALL)
_LI_RE = re.compile(rf"{_tag('li')}(.*?)</li>", _FLAGS)


def to_plain_text(html: str) -> str:
    """Strip scripts, styles and tags; collapse whitespace runs to one space."""
    text = _SCRIPT_RE.sub("", html)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    return _SPACES_RE.sub(" ", text).strip()


def _unordered(match: re.Match[str]) -> str:
    items = _LI_RE.sub(lambda m: f"- {m.group(1)}\n", match.group(0))
    return _TAG_RE.sub("", items).strip() + "\n\n"


def _ordered(match: re.Match[str]) -> str:
    counter = 0

    def number(m: re.Match[str]) -> str:
        nonlocal counter
        counter += 1
        return f"{counter}. {m.group(1)}\n"

    items = _LI_RE.sub(number, match.group(0))
    return _TAG_RE.sub("", items).strip() + "\n\n"


def to_markdown(html: str) -> str:
    """Render *html* as simplified markdown (headings, paragraphs, links, emphasis, lists)."""
    md = html
    for pattern, replacement in _INLINE_RULES:
        md = pattern.sub(replacement, md)
    md = _UL_RE.sub(_unordered, md)
    md = _OL_RE.sub(_ordered, md)
    md = _TAG_RE.sub("", md)
    md = _NEWLINES_RE.sub("\n\n", md)
    return md.strip()


# ---------------------------------------------------------------------------
# Title / meta
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class PageInfo:
    """Title and descriptive ``<meta>`` values of a page."""

    title: str
    description: str
    keywords: str


def _meta_content(soup: BeautifulSoup, name: str) -> str:
    tag = soup.find("meta", attrs={"name": re.compile(rf"^{name}$", re.I)})
    if not isinstance(tag, Tag):
        return ""
    content = tag.get("content")
    return content.strip() if isinstance(content, str) else ""


def parse_page_info(html: str) -> PageInfo:
    """Extract ``<title>`` text and ``description``/``keywords`` meta content."""
    soup = BeautifulSoup(html, "html.parser")
    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else ""
    return PageInfo(
        title=title,
        description=_meta_content(soup, "description"),
        keywords=_meta_content(soup, "keywords"),
    )
