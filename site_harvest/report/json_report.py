# site_harvest/report/json_report.py

"""
Генерация JSON-экспорта для проекта SiteHarvest.

Сериализация CrawlResult / SinglePageResult в строку.
"""
from typing import Union

from site_harvest.models import CrawlResult, SinglePageResult


def render_json(result: Union[CrawlResult, SinglePageResult], *, pretty: bool = True) -> str:
    """
    Возвращает JSON-представление результата.

    Ключи в camelCase (``pagesCount``, ``visitedUrls`` …), Unicode без экранирования,
    отступ 2 при ``pretty=True``.

    Пример:
    ```python
    from site_harvest.report.json_report import render_json
    print(render_json(result))
    ```
    """
    return result.json(pretty=pretty)
