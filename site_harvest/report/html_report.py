# File: site_harvest/report/html_report.py
"""site_harvest.report.html_report: HTML-экспорт (исходная разметка страниц) через Jinja2."""

from __future__ import annotations

from typing import Union

from site_harvest.models import CrawlResult, SinglePageResult
from site_harvest.report.environment import get_environment


def render_html(result: Union[CrawlResult, SinglePageResult]) -> str:
    """Склеивает HTML всех страниц, предваряя каждую комментарием ``<!-- url -->``.

    Args:
        result: CrawlResult или SinglePageResult.

    Returns:
        Строка HTML; разметка страниц вставляется без экранирования.
    """
    template = get_environment().get_template("export.html.j2")
    return template.render(pages=result.pages)
