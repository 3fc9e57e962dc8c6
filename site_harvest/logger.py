# === FILE: site_harvest/logger.py ===
"""Логирование SiteHarvest.

Все модули пишут в логгер ``SiteHarvest`` (``logging.getLogger(LOGGER_NAME)``).
Обработчики вешает только CLI через :func:`init_logging`; при использовании
пакета как библиотеки настройка остаётся за вызывающим кодом.

Консоль - stderr, потому что stdout занят экспортом.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Optional, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "SiteHarvest"

_LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
_LOG_FILE_BACKUPS: Final[int] = 3


def _handlers(log_file: Optional[Union[str, Path]]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                str(log_file),
                maxBytes=_LOG_FILE_MAX_BYTES,
                backupCount=_LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    return handlers


def init_logging(
    level: Union[int, str] = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """
    Настраивает логгер ``SiteHarvest``: уровень, консоль и (опционально)
    файл с ротацией 5 MiB × 3. Повторный вызов заменяет прежние обработчики.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    for old in list(lg.handlers):
        lg.removeHandler(old)
        old.close()

    formatter = logging.Formatter(log_format)
    for handler in _handlers(log_file):
        handler.setFormatter(formatter)
        lg.addHandler(handler)

    lg.propagate = False
    return lg


__all__ = ["DEFAULT_FORMAT", "LOGGER_NAME", "init_logging"]
