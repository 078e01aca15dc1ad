# File: sitemap_builder/engine.py
"""sitemap_builder.engine: Orchestration layer: сборка коллабораторов по конфигу и запуск агрегации."""

from __future__ import annotations

from typing import Optional

import sqlalchemy as sa

from sitemap_builder.aggregator import AggregationResult, Aggregator
from sitemap_builder.backends import (
    InMemoryPageTree,
    JinjaTemplateEvaluator,
    PageUrlBuilder,
    SqlPageTree,
    SqlQueryBackend,
    create_db_engine,
)
from sitemap_builder.collaborators import PageTree
from sitemap_builder.config import SitemapConfig, SourceKind, load_config
from sitemap_builder.diagnostics import DiagnosticKind
from sitemap_builder.errors import ConfigurationError, SourceUnavailable
from sitemap_builder.logger import logger

__all__ = ["Engine"]


class Engine:
    """Фасад для CLI и тестов: загрузка конфига, создание сервисов и запуск агрегации."""

    @staticmethod
    def load_config(path: Optional[str]) -> SitemapConfig:
        """Загружает конфиг из YAML/JSON."""
        return load_config(path)

    def __init__(self, config: SitemapConfig, *, db_engine: Optional[sa.Engine] = None) -> None:
        """Инициализирует Engine; без database_url используется пустая SQLite в памяти."""
        self.config = config
        self._owns_db = db_engine is None
        self.db = db_engine or create_db_engine(config.database_url or "sqlite://")
        self.query = SqlQueryBackend(self.db)
        self.page_tree = self._build_page_tree()
        self.aggregator = Aggregator(
            self.page_tree,
            PageUrlBuilder(config.site_url, self.page_tree),
            self.query,
            JinjaTemplateEvaluator({"base_url": config.site_url}),
            max_depth=config.pages.max_depth,
        )

    def _build_page_tree(self) -> PageTree:
        if self.config.pages.nodes:
            return InMemoryPageTree(n.to_node() for n in self.config.pages.nodes)
        return SqlPageTree(self.query, table=self.config.pages.table)

    def validate_schema(self) -> None:
        """Сверяет колонки из конфигурации с реальными таблицами.

        Отсутствующая таблица здесь не ошибка: при запуске источник будет
        помечен как source_unavailable. Недоступная БД даёт SourceUnavailable.
        """
        for source in self.config.sources:
            if not source.active or source.kind != SourceKind.RECORD_TABLE:
                continue
            columns = self.query.columns(source.table)
            if columns is None:
                logger.warning("Table %s not found, source %s will be skipped", source.table, source.label)
                continue
            wanted = source.field_map.columns() + [
                c for c in (source.parent_column, source.exclude_column) if c
            ]
            missing = [c for c in wanted if c not in columns]
            if missing:
                raise ConfigurationError(
                    f"source {source.label!r}: table {source.table!r} has no column(s) {', '.join(missing)}"
                )

    def run(self, *, parallel: Optional[bool] = None) -> AggregationResult:
        """Проверяет схему и собирает записи карты сайта."""
        logger.info("Starting sitemap aggregation for %s", self.config.site_url)
        try:
            self.validate_schema()
        except ConfigurationError as exc:
            result = AggregationResult()
            result.diagnostics.aborted = True
            result.diagnostics.add(DiagnosticKind.CONFIGURATION_ERROR, "config", str(exc))
            return result
        except SourceUnavailable as exc:
            # the affected sources report source_unavailable during aggregation
            logger.warning("Schema check skipped, database unavailable: %s", exc)
        return self.aggregator.aggregate(
            self.config.sources,
            self.config.pages.root_page_id,
            parallel=self.config.parallel if parallel is None else parallel,
        )

    def close(self) -> None:
        if self._owns_db:
            self.db.dispose()

    def __enter__(self) -> Engine:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
