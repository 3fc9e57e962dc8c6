# File: site_harvest/report/environment.py
"""site_harvest.report.environment: общее Jinja2-окружение для шаблонов экспорта."""

from __future__ import annotations

from functools import lru_cache

from jinja2 import Environment, PackageLoader, select_autoescape


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    """Окружение с шаблонами из ``site_harvest/templates``; экранируются только *.html.j2."""
    return Environment(
        loader=PackageLoader("site_harvest", "templates"),
        autoescape=select_autoescape(enabled_extensions=("html.j2",), default_for_string=False),
        trim_blocks=True,
    )


__all__ = ["get_environment"]
