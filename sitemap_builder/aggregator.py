# File: sitemap_builder/aggregator.py
"""sitemap_builder.aggregator: Сбор записей карты сайта из всех источников."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, Sequence

from sitemap_builder.collaborators import PageTree, QueryBackend, TemplateEvaluator, UrlBuilder
from sitemap_builder.config import SourceConfig, SourceKind, check_source
from sitemap_builder.diagnostics import DiagnosticKind, Diagnostics
from sitemap_builder.errors import ConfigurationError, InvalidEntry, SourceUnavailable
from sitemap_builder.logger import logger
from sitemap_builder.mapper import PAGES_SOURCE, UrlEntryMapper
from sitemap_builder.models import UrlEntry
from sitemap_builder.sources import PageTreeAdapter, RecordTableAdapter

__all__ = ["AggregationResult", "Aggregator"]


@dataclass(slots=True)
class AggregationResult:
    """Итог агрегации: упорядоченные записи без дублей и диагностика."""

    entries: List[UrlEntry] = field(default_factory=list)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    @property
    def locs(self) -> List[str]:
        return [e.loc for e in self.entries]

    def to_dict(self) -> dict[str, Any]:
        return {
            "entries": [e.to_dict() for e in self.entries],
            "diagnostics": self.diagnostics.to_dict(),
        }

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление результата."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


@dataclass(slots=True)
class _Batch:
    """Буфер одного источника; склеивается с остальными в порядке конфигурации."""

    source: str
    entries: List[UrlEntry] = field(default_factory=list)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


class Aggregator:
    """Запускает адаптеры источников, нормализует записи и склеивает результат.

    Все внешние сервисы передаются явно через конструктор.
    """

    def __init__(
        self,
        page_tree: PageTree,
        url_builder: UrlBuilder,
        query: QueryBackend,
        templates: TemplateEvaluator,
        *,
        max_depth: Optional[int] = None,
    ) -> None:
        self.pages = PageTreeAdapter(page_tree, max_depth=max_depth)
        self.tables = RecordTableAdapter(query)
        self.mapper = UrlEntryMapper(url_builder, templates)

    # ------------------------------------------------------------- public API

    def aggregate(
        self,
        configs: Sequence[SourceConfig],
        page_tree_root: Optional[int],
        *,
        parallel: bool = False,
    ) -> AggregationResult:
        """Собирает записи: сначала дерево страниц, затем таблицы в порядке конфигурации.

        Никогда не бросает исключений: ошибки попадают в ``result.diagnostics``.
        ``parallel=True`` опрашивает источники параллельно через :meth:`aggregate_async`;
        внутри работающего event loop сбор идёт последовательно.
        """
        if parallel:
            try:
                asyncio.get_running_loop()
            except RuntimeError:
                return asyncio.run(self.aggregate_async(configs, page_tree_root))
            logger.warning("Event loop already running, collecting sources sequentially; await aggregate_async() instead")

        tables = self._prepare(configs)
        if isinstance(tables, AggregationResult):
            return tables
        batches = [self._collect_pages(page_tree_root)]
        batches.extend(self._collect_table(source) for source in tables)
        return self._merge(batches)

    async def aggregate_async(
        self,
        configs: Sequence[SourceConfig],
        page_tree_root: Optional[int],
    ) -> AggregationResult:
        """Как :meth:`aggregate`, но каждый источник опрашивается в отдельном потоке.

        Результаты буферизуются по источникам и склеиваются в том же порядке,
        что и при последовательном запуске.
        """
        tables = self._prepare(configs)
        if isinstance(tables, AggregationResult):
            return tables
        batches = await asyncio.gather(
            asyncio.to_thread(self._collect_pages, page_tree_root),
            *(asyncio.to_thread(self._collect_table, source) for source in tables),
        )
        return self._merge(batches)

    # ---------------------------------------------------------------- helpers

    def _prepare(self, configs: Sequence[SourceConfig]) -> List[SourceConfig] | AggregationResult:
        """Возвращает табличные источники либо прерванный результат при ошибке конфигурации."""
        tables: List[SourceConfig] = []
        try:
            for index, source in enumerate(configs or ()):
                if not isinstance(source, SourceConfig):
                    raise ConfigurationError(
                        f"sources[{index}]: expected SourceConfig, got {type(source).__name__}"
                    )
                check_source(source)
                if source.kind == SourceKind.RECORD_TABLE:
                    tables.append(source)
        except ConfigurationError as exc:
            result = AggregationResult()
            result.diagnostics.aborted = True
            result.diagnostics.add(DiagnosticKind.CONFIGURATION_ERROR, "config", str(exc))
            return result
        return tables

    def _collect_pages(self, root_id: Optional[int]) -> _Batch:
        batch = _Batch(PAGES_SOURCE)
        if root_id is None:
            return batch
        return self._collect(
            batch,
            self.pages.iter_pages(root_id),
            lambda page: self.mapper.map_page(page, batch.diagnostics),
        )

    def _collect_table(self, source: SourceConfig) -> _Batch:
        batch = _Batch(source.label)
        return self._collect(
            batch,
            self.tables.iter_rows(source),
            lambda row: self.mapper.map_row(row, source, batch.diagnostics),
        )

    @staticmethod
    def _collect(batch: _Batch, records: Iterable[Any], map_one: Callable[[Any], UrlEntry]) -> _Batch:
        try:
            for record in records:
                try:
                    batch.entries.append(map_one(record))
                except InvalidEntry as exc:
                    batch.diagnostics.dropped_entries += 1
                    batch.diagnostics.add(DiagnosticKind.INVALID_ENTRY, batch.source, str(exc))
        except SourceUnavailable as exc:
            batch.entries.clear()
            batch.diagnostics.add(DiagnosticKind.SOURCE_UNAVAILABLE, batch.source, exc.reason)
        except Exception as exc:
            batch.entries.clear()
            logger.exception("Source %s failed", batch.source)
            batch.diagnostics.add(
                DiagnosticKind.SOURCE_UNAVAILABLE, batch.source, f"{type(exc).__name__}: {exc}"
            )
        logger.debug("Source %s: %d entries", batch.source, len(batch.entries))
        return batch

    @staticmethod
    def _merge(batches: Iterable[_Batch]) -> AggregationResult:
        result = AggregationResult()
        seen: set[str] = set()
        for batch in batches:
            result.diagnostics.extend(batch.diagnostics)
            for entry in batch.entries:
                if entry.loc in seen:
                    result.diagnostics.duplicate_entries += 1
                    continue
                seen.add(entry.loc)
                result.entries.append(entry)
        logger.info(
            "Aggregated %d entries (%d dropped, %d duplicates, %d diagnostics)",
            len(result.entries),
            result.diagnostics.dropped_entries,
            result.diagnostics.duplicate_entries,
            len(result.diagnostics),
        )
        return result
