# File: site_harvest/report/__init__.py
"""site_harvest.report: экспорт результата обхода в json/text/markdown/html, используемый CLI и тестами."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Optional, Union

from site_harvest.models import CrawlResult, SinglePageResult
from site_harvest.report.html_report import render_html
from site_harvest.report.json_report import render_json
from site_harvest.report.text_report import render_markdown, render_text

Result = Union[CrawlResult, SinglePageResult]

RENDERERS: Dict[str, Callable[[Result], str]] = {
    "json": render_json,
    "text": render_text,
    "markdown": render_markdown,
    "html": render_html,
}

EXTENSIONS: Dict[str, str] = {"json": "json", "text": "txt", "markdown": "md", "html": "html"}


def render_export(result: Result, fmt: Optional[str] = None, *, pretty: bool = True) -> str:
    """Рендерит результат в формате *fmt* (по умолчанию - ``result.export_format``).

    *pretty* влияет только на JSON: отступ 2 или одна строка.
    """
    fmt = (fmt or result.export_format or "json").lower()
    if fmt == "json":
        return render_json(result, pretty=pretty)
    try:
        renderer = RENDERERS[fmt]
    except KeyError:
        raise ValueError(f"Неподдерживаемый формат экспорта: {fmt}") from None
    return renderer(result)


def default_filename(result: Result, fmt: Optional[str] = None) -> str:
    """``<domain>-crawl.<ext>`` для обхода домена, ``<host>-page.<ext>`` для одной страницы."""
    fmt = (fmt or result.export_format or "json").lower()
    kind = "crawl" if isinstance(result, CrawlResult) else "page"
    return f"{result.domain}-{kind}.{EXTENSIONS.get(fmt, fmt)}"


def write_export(
    result: Result, output_path: Union[str, Path], fmt: Optional[str] = None, *, pretty: bool = True
) -> Path:
    """Сохраняет экспорт в файл; если *output_path* - папка, имя берётся из :func:`default_filename`."""
    path = Path(output_path)
    if path.is_dir():
        path = path / default_filename(result, fmt)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_export(result, fmt, pretty=pretty), encoding="utf-8")
    return path


__all__ = ["RENDERERS", "default_filename", "render_export", "write_export"]
