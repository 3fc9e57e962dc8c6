# cli.py

"""
Точка входа для запуска SiteHarvest из корня репозитория без установки пакета.

Функционал тот же, что у команды ``site-harvest``:
- Загрузка конфигурации (Pydantic) и инициализация логирования
- Обход страницы или домена (asyncio + aiohttp)
- Экспорт результата в json / text / markdown / html

Пример запуска:
    python cli.py --config configs/default.yaml crawl https://example.com --recursive --format markdown -o exports/
"""
from site_harvest.cli import cli


if __name__ == '__main__':
    cli()
