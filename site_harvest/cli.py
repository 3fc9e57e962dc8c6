# === FILE: site_harvest/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска SiteHarvest через командную строку.

Команды:
  crawl URL   Загрузить страницу (или обойти домен) и вывести/сохранить экспорт
  config      Показать текущие параметры обхода

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (только консоль, если не указан)
  --log-format FORMAT Формат логирования

Команда crawl опции:
  --recursive/--single     Обойти домен или загрузить одну страницу
  --max-depth, --max-pages Ограничения обхода
  --delay MS               Пауза между запросами
  --no-images, --no-files  Не сохранять изображения / файлы
  --max-file-size BYTES    Лимит размера одного файла
  --download-dir DIR       Куда сохранять файлы
  --format FMT             json | text | markdown | html
  --output PATH            Сохранить экспорт в файл (или папку)
  --pretty/--compact      JSON с отступами или в одну строку
  --crawl-timeout SEC      Таймаут всего обхода (секунд)

Дополнительно:
  --version, -v       Показать версию SiteHarvest

Пример:
  site-harvest crawl https://example.com --recursive --max-pages 20 --format markdown -o exports/
"""
import asyncio
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from site_harvest import __version__
from site_harvest.config import load_config, merge_options
from site_harvest.engine import start_crawl
from site_harvest.errors import CrawlError
from site_harvest.logger import DEFAULT_FORMAT, init_logging
from site_harvest.report import render_export, write_export

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])
EXPORT_FORMATS = ["json", "text", "markdown", "html"]


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteHarvest, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (только консоль, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SiteHarvest CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--recursive/--single', 'recursive', default=None,
              help='Обойти весь домен / загрузить только одну страницу')
@click.option('--max-depth', 'max_depth', type=int, default=None, help='Максимальная глубина обхода')
@click.option('--max-pages', 'max_pages', type=int, default=None, help='Максимальное число страниц')
@click.option('--delay', 'delay', type=int, default=None, help='Пауза между запросами (мс)')
@click.option('--images/--no-images', 'download_images', default=None, help='Сохранять изображения')
@click.option('--files/--no-files', 'download_files', default=None, help='Сохранять документы и медиа')
@click.option('--max-file-size', 'max_file_size', type=int, default=None, help='Лимит размера файла (байт)')
@click.option(
    '--download-dir', 'download_dir',
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help='Папка для скачанных файлов'
)
@click.option(
    '--format', '-f', 'export_format',
    type=click.Choice(EXPORT_FORMATS),
    default=None,
    help='Формат экспорта'
)
@click.option(
    '--output', '-o', 'output',
    type=click.Path(path_type=Path),
    default=None,
    help='Сохранить экспорт в файл или папку'
)
@click.option('--pretty/--compact', 'pretty', default=True, show_default=True,
              help='JSON с отступами / в одну строку')
@click.option('--crawl-timeout', 'crawl_timeout', type=float, default=None,
              help='Таймаут всего обхода (секунд)')
@click.pass_context
def crawl(ctx, url, recursive, max_depth, max_pages, delay, download_images, download_files,
          max_file_size, download_dir, export_format, output, pretty, crawl_timeout):
    """Загрузить URL и вывести результат в выбранном формате."""
    try:
        opts = merge_options(
            ctx.obj['config'],
            recursive=recursive,
            max_depth=max_depth,
            max_pages=max_pages,
            delay=delay,
            download_images=download_images,
            download_files=download_files,
            max_file_size=max_file_size,
            download_dir=download_dir,
            export_format=export_format,
        )
    except ValidationError as e:
        print_error(f'Неверные параметры: {e}')

    try:
        if crawl_timeout:
            result = asyncio.run(
                asyncio.wait_for(start_crawl(url, opts), timeout=crawl_timeout)
            )
        else:
            result = asyncio.run(start_crawl(url, opts))
    except asyncio.TimeoutError:
        print_error(f'Обход не завершён за {crawl_timeout} секунд')
    except CrawlError as e:
        print_error(str(e))
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')

    if output is None:
        click.echo(render_export(result, opts.export_format, pretty=pretty))
        return

    try:
        saved = write_export(result, output, opts.export_format, pretty=pretty)
    except OSError as e:
        print_error(f'Ошибка при сохранении экспорта: {e}')
    click.echo(f'{opts.export_format.upper()} export: {saved}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
