# === FILE: site_harvest/config.py ===
"""
Модуль для загрузки и валидации параметров обхода SiteHarvest.
Используется Pydantic для описания схемы и проверки данных.

Ключи принимаются как в snake_case, так и в camelCase (формат, в котором
их присылает веб-форма: ``maxDepth``, ``downloadImages`` и т.д.).
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Literal, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

ExportFormat = Literal["json", "text", "markdown", "html"]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)
MAX_FILE_SIZE = 50 * 1024 * 1024


class CrawlOptions(BaseModel):
    """Параметры одного запуска обхода."""
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    recursive: bool = Field(False, description="Обход всего домена вместо одной страницы.")
    max_depth: int = Field(3, ge=0, description="Максимальная глубина обхода ссылок.")
    max_pages: int = Field(50, ge=1, description="Жесткий лимит по числу страниц.")
    delay: int = Field(500, ge=0, description="Пауза между запросами (мс).")
    download_images: bool = Field(True, description="Сохранять изображения.")
    download_files: bool = Field(True, description="Сохранять документы, медиа и архивы.")
    max_file_size: int = Field(MAX_FILE_SIZE, gt=0, description="Лимит размера одного файла (байт).")
    export_format: ExportFormat = Field("json", description="Формат экспорта результата.")

    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    timeout: float = Field(30.0, gt=0, description="Таймаут на один запрос (секунд).")
    download_dir: Path = Field(Path("downloads"), description="Корневая папка для файлов.")
    max_images_per_page: int = Field(20, ge=0, description="Изображений на страницу, не больше.")
    max_files_per_page: int = Field(20, ge=0, description="Файлов на страницу, не больше.")

    @field_validator("export_format", mode="before")
    def _lower_format(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def delay_seconds(self) -> float:
        return self.delay / 1000.0


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> CrawlOptions:
    """
    Читает YAML или JSON и возвращает проверенный объект CrawlOptions.
    Без пути берётся configs/default.yaml, а если его нет - значения по умолчанию.
    Явно указанный, но отсутствующий файл - FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return CrawlOptions()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return CrawlOptions(**data)


def merge_options(base: CrawlOptions, **overrides: Any) -> CrawlOptions:
    """Возвращает новый CrawlOptions с переопределёнными полями (None пропускаются)."""
    data = base.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    return CrawlOptions(**data)


__all__ = [
    "CrawlOptions",
    "ExportFormat",
    "ValidationError",
    "DEFAULT_USER_AGENT",
    "MAX_FILE_SIZE",
    "load_config",
    "merge_options",
]
