# === FILE: sitemap_builder/config.py ===
"""
Модуль для загрузки и валидации конфигурации генератора карты сайта.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    field_validator,
    model_validator,
)

from sitemap_builder.errors import ConfigurationError
from sitemap_builder.filters import FilterExpression
from sitemap_builder.models import STANDARD_PAGE, PageNode
from sitemap_builder.utils import is_identifier

__all__ = [
    "SourceKind",
    "FieldMap",
    "SourceConfig",
    "PageNodeConfig",
    "PageTreeConfig",
    "SitemapConfig",
    "check_source",
    "load_config",
]


class SourceKind(str, Enum):
    PAGE_TREE = "page_tree"
    RECORD_TABLE = "record_table"


class FieldMap(BaseModel):
    """Соответствие полей записи карты сайта колонкам строки.

    ``loc`` — шаблон Jinja2, остальные поля — имена колонок.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    loc: Optional[str] = Field(None, description="Шаблон URL, вычисляется по строке.")
    lastmod: Optional[str] = Field(None, description="Колонка с датой изменения.")
    changefreq: Optional[str] = Field(None, description="Колонка с частотой изменения.")
    priority: Optional[str] = Field(None, description="Колонка с приоритетом.")

    @field_validator("lastmod", "changefreq", "priority")
    def _check_column(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        if not is_identifier(v):
            raise ValueError(f"invalid column name: {v!r}")
        return v

    def columns(self) -> List[str]:
        return [c for c in (self.lastmod, self.changefreq, self.priority) if c]


class SourceConfig(BaseModel):
    """Настройки одного источника URL."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: Optional[str] = Field(None, description="Метка источника для логов и диагностики.")
    kind: SourceKind = Field(SourceKind.RECORD_TABLE, description="Тип источника.")
    table: Optional[str] = Field(None, description="Имя таблицы для record_table.")
    active: bool = Field(False, description="Источник включён.")
    additional_filter: Optional[FilterExpression] = Field(
        None, description="Дополнительное условие выборки."
    )
    field_map: FieldMap = Field(default_factory=FieldMap)
    parent_column: Optional[str] = Field("pid", description="Записи с parent_column = 0 пропускаются.")
    exclude_column: Optional[str] = Field(
        "exclude_from_sitemap", description="Флаг исключения из карты сайта; null — не проверять."
    )

    @field_validator("parent_column", "exclude_column")
    def _check_optional_column(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_identifier(v):
            raise ValueError(f"invalid column name: {v!r}")
        return v

    @model_validator(mode="after")
    def _check_invariants(self) -> SourceConfig:
        check_source(self)
        return self

    @property
    def label(self) -> str:
        return self.name or self.table or self.kind.value


def check_source(source: SourceConfig) -> None:
    """Проверяет инварианты источника, бросает ConfigurationError."""
    if source.kind != SourceKind.RECORD_TABLE:
        return
    if source.table and not is_identifier(source.table):
        raise ConfigurationError(f"invalid table name: {source.table!r}")
    if not source.active:
        return
    if not source.table:
        raise ConfigurationError(f"source {source.label!r}: table is required for record_table")
    if not (source.field_map.loc or "").strip():
        raise ConfigurationError(f"source {source.label!r}: field_map.loc is required")


class PageNodeConfig(BaseModel):
    """Страница, описанная прямо в конфиге (без таблицы pages)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: int = Field(..., ge=0)
    parent_id: int = Field(0, ge=0)
    doc_type: int = STANDARD_PAGE
    timestamp: Optional[int] = None
    exclude: bool = False
    sitemap_priority: Union[int, str, None] = None
    sorting: int = 0
    slug: Optional[str] = None

    def to_node(self) -> PageNode:
        return PageNode(**self.model_dump())


class PageTreeConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    root_page_id: Optional[int] = Field(None, ge=0, description="Корневая страница; null — без страниц.")
    max_depth: Optional[int] = Field(None, ge=0, description="Глубина обхода; null — без ограничения.")
    table: str = Field("pages", description="Таблица страниц в БД.")
    nodes: List[PageNodeConfig] = Field(default_factory=list, description="Страницы прямо в конфиге.")

    @field_validator("table")
    def _check_table(cls, v: str) -> str:
        if not is_identifier(v):
            raise ValueError(f"invalid table name: {v!r}")
        return v


class SitemapConfig(BaseModel):
    """Конфигурация одного запуска генерации."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: HttpUrl = Field(..., description="Базовый URL сайта.")
    database_url: Optional[str] = Field(None, description="SQLAlchemy URL базы данных.")
    pages: PageTreeConfig = Field(default_factory=PageTreeConfig)
    sources: List[SourceConfig] = Field(default_factory=list)
    parallel: bool = Field(False, description="Опрашивать таблицы параллельно.")

    @field_validator("base_url", mode="before")
    def _strip_trailing_slash(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @model_validator(mode="after")
    def _check_database(self) -> SitemapConfig:
        if self.database_url:
            return self
        if any(s.active and s.kind == SourceKind.RECORD_TABLE for s in self.sources):
            raise ConfigurationError("database_url is required for active record_table sources")
        if self.pages.root_page_id is not None and not self.pages.nodes:
            raise ConfigurationError("database_url or pages.nodes is required for the page tree")
        return self

    @property
    def site_url(self) -> str:
        return str(self.base_url).rstrip("/")


_DEFAULT_CFG = Path("configs/sitemap.yaml")

# suffix -> (format name, parser, parse error type)
_PARSERS: dict[str, tuple[str, Callable[[str], Any], type[Exception]]] = {
    ".yaml": ("YAML", yaml.safe_load, yaml.YAMLError),
    ".yml": ("YAML", yaml.safe_load, yaml.YAMLError),
    ".json": ("JSON", json.loads, json.JSONDecodeError),
}


def _resolve(path: Union[str, Path, None]) -> Path:
    candidate = _DEFAULT_CFG if path is None else Path(path).expanduser().resolve()
    if not candidate.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(candidate))
    return candidate


def _parse_mapping(path: Path) -> dict[str, Any]:
    """Разбирает файл конфига в словарь; формат выбирается по расширению."""
    try:
        fmt, parse, parse_error = _PARSERS[path.suffix.lower()]
    except KeyError:
        raise ValueError(f"Неподдерживаемый формат конфига: {path.suffix.lower()}") from None
    try:
        data = parse(path.read_text(encoding="utf-8"))
    except parse_error as exc:
        raise ValueError(f"Неправильный {fmt} в {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень {fmt} должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> SitemapConfig:
    """Загружает SitemapConfig из YAML/JSON; ``None`` означает configs/sitemap.yaml.

    FileNotFoundError — файла нет; ValueError/TypeError — файл не разобран;
    ValidationError — данные не проходят схему.
    """
    return SitemapConfig(**_parse_mapping(_resolve(path)))
