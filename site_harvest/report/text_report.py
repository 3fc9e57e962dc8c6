# File: site_harvest/report/text_report.py
"""site_harvest.report.text_report: текстовый и markdown-экспорт страниц."""

from __future__ import annotations

from typing import Union

from site_harvest.models import CrawlResult, SinglePageResult
from site_harvest.report.environment import get_environment


def render_text(result: Union[CrawlResult, SinglePageResult]) -> str:
    """Блоки ``--- url ---`` с очищенным текстом каждой страницы."""
    return get_environment().get_template("export.txt.j2").render(pages=result.pages)


def render_markdown(result: Union[CrawlResult, SinglePageResult]) -> str:
    """Для каждой страницы: заголовок, строка ``URL:``, markdown и разделитель ``---``."""
    return get_environment().get_template("export.md.j2").render(pages=result.pages)
