# sitemap_builder/backends/sql.py
"""
SQLAlchemy-backed collaborators: record query backend and page tree.

Filters are compiled to SQLAlchemy expressions, so every value is sent as a
bound parameter; table and column names are resolved through reflection.
"""
from __future__ import annotations

import threading
from typing import Any, Dict, List, Mapping, Optional, Sequence

import sqlalchemy as sa
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError
from sqlalchemy.pool import StaticPool

from sitemap_builder.collaborators import PagePredicate
from sitemap_builder.errors import SourceUnavailable
from sitemap_builder.filters import And, Equals, FilterExpression, NotEquals, Or, Raw
from sitemap_builder.logger import child
from sitemap_builder.models import STANDARD_PAGE, PageNode, QueryResult

__all__ = ["create_db_engine", "compile_filter", "SqlQueryBackend", "SqlPageTree"]

#: columns that hide a record from the frontend when set to 1
ENABLE_COLUMNS = ("deleted", "hidden")

logger = child("sql")


def create_db_engine(database_url: str, *, echo: bool = False) -> sa.Engine:
    """Create an engine; in-memory SQLite is pinned to one connection shared by all threads."""
    url = sa.engine.make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return sa.create_engine(url, echo=echo, pool_pre_ping=True)
    # sources may be read from worker threads
    connect_args = {"check_same_thread": False}
    if url.database in (None, "", ":memory:"):
        return sa.create_engine(url, echo=echo, poolclass=StaticPool, connect_args=connect_args)
    return sa.create_engine(url, echo=echo, connect_args=connect_args)


def _enabled(table: sa.Table) -> List[sa.ColumnElement[bool]]:
    """Visibility clauses for the enable columns the table actually has."""
    return [
        compile_filter(NotEquals(column=name, value=1), table)
        for name in ENABLE_COLUMNS
        if name in table.c
    ]


def _column(table: sa.Table, name: str) -> sa.Column[Any]:
    try:
        return table.c[name]
    except KeyError:
        raise ValueError(f"table {table.name!r} has no column {name!r}") from None


def compile_filter(expression: FilterExpression, table: sa.Table) -> sa.ColumnElement[bool]:
    """Translate a structured filter into a parameterized SQLAlchemy clause."""
    if isinstance(expression, Equals):
        column = _column(table, expression.column)
        if expression.value is None:
            return column.is_(None)
        return column == expression.value
    if isinstance(expression, NotEquals):
        column = _column(table, expression.column)
        if expression.value is None:
            return column.is_not(None)
        return column.is_distinct_from(expression.value)
    if isinstance(expression, And):
        return sa.and_(*(compile_filter(c, table) for c in expression.clauses))
    if isinstance(expression, Or):
        return sa.or_(*(compile_filter(c, table) for c in expression.clauses))
    if isinstance(expression, Raw):
        return sa.text(expression.sql).bindparams(**expression.params)
    raise TypeError(f"unsupported filter expression: {expression!r}")


class SqlQueryBackend:
    """Read-only query collaborator over a SQLAlchemy engine."""

    def __init__(self, engine: sa.Engine) -> None:
        self.engine = engine
        self.metadata = sa.MetaData()
        self._tables: Dict[str, sa.Table] = {}
        self._lock = threading.Lock()

    def table(self, name: str) -> sa.Table:
        """Reflected table, cached per backend. Raises NoSuchTableError."""
        with self._lock:
            if name not in self._tables:
                self._tables[name] = sa.Table(name, self.metadata, autoload_with=self.engine)
            return self._tables[name]

    def columns(self, name: str) -> Optional[List[str]]:
        """Column names of ``name`` or None when the table does not exist.

        Raises SourceUnavailable when the database cannot be reached.
        """
        try:
            return [c.name for c in self.table(name).columns]
        except NoSuchTableError:
            return None
        except SQLAlchemyError as exc:
            raise SourceUnavailable(name, str(exc).splitlines()[0]) from exc

    def select(self, table: str, filter_expression: Optional[FilterExpression]) -> QueryResult:
        try:
            tbl = self.table(table)
            stmt = sa.select(tbl)
            if filter_expression is not None:
                stmt = stmt.where(compile_filter(filter_expression, tbl))
            stmt = stmt.where(*_enabled(tbl))
            stmt = stmt.order_by(*tbl.primary_key.columns)
            with self.engine.connect() as conn:
                rows = [dict(r._mapping) for r in conn.execute(stmt)]
        except NoSuchTableError:
            return QueryResult.failure(f"no such table: {table}")
        except (SQLAlchemyError, ValueError) as exc:
            logger.debug("Query on %s failed: %s", table, exc)
            return QueryResult.failure(str(exc).splitlines()[0])
        return QueryResult.success(rows)


def _page_from_row(row: Mapping[str, Any]) -> PageNode:
    return PageNode(
        id=row["uid"],
        parent_id=row.get("pid") or 0,
        doc_type=row.get("doktype", STANDARD_PAGE),
        timestamp=row.get("tstamp"),
        exclude=bool(row.get("exclude_from_sitemap")),
        sitemap_priority=row.get("sitemap_priority"),
        sorting=row.get("sorting") or 0,
        slug=row.get("slug"),
    )


class SqlPageTree:
    """Page tree stored in a ``pages`` table (uid, pid, doktype, tstamp, sorting, ...)."""

    def __init__(self, backend: SqlQueryBackend, table: str = "pages") -> None:
        self.backend = backend
        self.table_name = table

    def get_page(self, page_id: int) -> Optional[PageNode]:
        rows = self._fetch(lambda tbl: _column(tbl, "uid") == page_id)
        return _page_from_row(rows[0]) if rows else None

    def get_children(self, page_id: int, predicate: PagePredicate) -> Sequence[PageNode]:
        rows = self._fetch(lambda tbl: _column(tbl, "pid") == page_id, ordered=True)
        return [page for page in map(_page_from_row, rows) if predicate(page)]

    def _fetch(self, where, *, ordered: bool = False) -> List[Mapping[str, Any]]:
        try:
            tbl = self.backend.table(self.table_name)
            stmt = sa.select(tbl).where(where(tbl), *_enabled(tbl))
            if ordered:
                order = [tbl.c[name] for name in ("sorting", "uid") if name in tbl.c]
                stmt = stmt.order_by(*order)
            with self.backend.engine.connect() as conn:
                return [r._mapping for r in conn.execute(stmt)]
        except (SQLAlchemyError, ValueError) as exc:
            raise SourceUnavailable(self.table_name, str(exc).splitlines()[0]) from exc
