"""
Interfaces of the external services the aggregator depends on.

Concrete implementations live in :mod:`sitemap_builder.backends`; tests
use small in-memory fakes.
"""
from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence, runtime_checkable

from sitemap_builder.filters import FilterExpression
from sitemap_builder.models import PageNode, QueryResult, Row

PagePredicate = Callable[[PageNode], bool]


@runtime_checkable
class PageTree(Protocol):
    def get_page(self, page_id: int) -> Optional[PageNode]: ...

    def get_children(self, page_id: int, predicate: PagePredicate) -> Sequence[PageNode]:
        """Direct children of ``page_id`` in sibling order, filtered by ``predicate``."""
        ...


@runtime_checkable
class UrlBuilder(Protocol):
    def build_absolute_url(self, page_id: int, page: Optional[PageNode] = None) -> str:
        """Absolute URL of ``page_id``; ``page`` is the already loaded node, if any."""
        ...


@runtime_checkable
class QueryBackend(Protocol):
    def select(self, table: str, filter_expression: Optional[FilterExpression]) -> QueryResult: ...


@runtime_checkable
class TemplateEvaluator(Protocol):
    def evaluate(self, expression: str, row: Row) -> str: ...
