# File: sitemap_builder/sources/record_table.py
"""sitemap_builder.sources.record_table: Выборка записей из таблицы, описанной в конфиге."""

from __future__ import annotations

from typing import Iterator, Optional

from sitemap_builder.collaborators import QueryBackend
from sitemap_builder.config import SourceConfig
from sitemap_builder.errors import SourceUnavailable
from sitemap_builder.filters import And, FilterExpression, NotEquals, all_of
from sitemap_builder.logger import child
from sitemap_builder.models import Row

logger = child("sources.record_table")


class RecordTableAdapter:
    """Строит фильтр для источника и отдаёт строки таблицы."""

    def __init__(self, query: QueryBackend) -> None:
        self.query = query

    @staticmethod
    def build_filter(source: SourceConfig) -> Optional[FilterExpression]:
        """parent_column != 0 AND exclude_column IS DISTINCT FROM 1 AND additional_filter.

        Records without a parent (NULL) are skipped like storage-root ones.
        """
        base_parent = None
        if source.parent_column:
            base_parent = And(
                clauses=[
                    NotEquals(column=source.parent_column, value=None),
                    NotEquals(column=source.parent_column, value=0),
                ]
            )
        not_excluded = (
            NotEquals(column=source.exclude_column, value=1) if source.exclude_column else None
        )
        return all_of(base_parent, not_excluded, source.additional_filter)

    def iter_rows(self, source: SourceConfig) -> Iterator[Row]:
        """Строки источника; пусто, если источник выключен или без таблицы.

        Raises:
            SourceUnavailable: запрос к БД завершился ошибкой.
        """
        if not source.active or not source.table:
            logger.debug("Source %s is inactive or has no table, skipping", source.label)
            return
        result = self.query.select(source.table, self.build_filter(source))
        if not result.ok:
            raise SourceUnavailable(source.label, result.error or "query failed")
        logger.debug("Source %s: %d rows", source.label, len(result.rows))
        yield from result.rows


__all__ = ["RecordTableAdapter"]
