# File: tests/conftest.py
import time
from typing import Dict, Iterable, List, Optional

import pytest
import sqlalchemy as sa

from sitemap_builder.aggregator import Aggregator
from sitemap_builder.backends import InMemoryPageTree, JinjaTemplateEvaluator, PageUrlBuilder
from sitemap_builder.config import SourceConfig
from sitemap_builder.models import PageNode, QueryResult

BASE_URL = "https://example.com"
TS = 1700000000  # 2023-11-14 UTC


class FakeQuery:
    """Query collaborator over plain lists; filters are recorded, not applied."""

    def __init__(
        self,
        tables: Optional[Dict[str, List[dict]]] = None,
        failing: Iterable[str] = (),
        delays: Optional[Dict[str, float]] = None,
    ) -> None:
        self.tables = tables or {}
        self.failing = set(failing)
        self.delays = delays or {}
        self.calls: List[tuple] = []

    def select(self, table, filter_expression):
        self.calls.append((table, filter_expression))
        if table in self.delays:
            time.sleep(self.delays[table])
        if table in self.failing:
            return QueryResult.failure("connection refused")
        return QueryResult.success(self.tables.get(table, []))


def news_source(**overrides) -> SourceConfig:
    data = {
        "name": "news",
        "table": "news",
        "active": True,
        "field_map": {"loc": "{{ base_url }}/news/{{ uid }}"},
    }
    data.update(overrides)
    return SourceConfig(**data)


@pytest.fixture()
def site_pages() -> List[PageNode]:
    """Root 1 with children 2 and 3; page 3 is excluded from the sitemap."""
    return [
        PageNode(id=1, parent_id=0, timestamp=TS, slug="/"),
        PageNode(id=2, parent_id=1, timestamp=TS, sorting=1, slug="/about", sitemap_priority="7"),
        PageNode(id=3, parent_id=1, timestamp=TS, sorting=2, slug="/private", exclude=True),
    ]


@pytest.fixture()
def make_aggregator(site_pages):
    """Factory: aggregator over the in-memory page tree and a FakeQuery."""

    def _make(query: Optional[FakeQuery] = None, pages: Optional[List[PageNode]] = None, **kwargs):
        tree = InMemoryPageTree(site_pages if pages is None else pages)
        return Aggregator(
            tree,
            PageUrlBuilder(BASE_URL, tree),
            query or FakeQuery(),
            JinjaTemplateEvaluator({"base_url": BASE_URL}),
            **kwargs,
        )

    return _make


@pytest.fixture()
def site_db(tmp_path) -> str:
    """SQLite file with a ``pages`` tree and a ``tx_news`` record table; returns its URL."""
    url = f"sqlite:///{tmp_path / 'site.db'}"
    engine = sa.create_engine(url)
    md = sa.MetaData()
    pages = sa.Table(
        "pages",
        md,
        sa.Column("uid", sa.Integer, primary_key=True),
        sa.Column("pid", sa.Integer),
        sa.Column("doktype", sa.Integer),
        sa.Column("tstamp", sa.Integer),
        sa.Column("sorting", sa.Integer),
        sa.Column("slug", sa.String),
        sa.Column("hidden", sa.Integer),
        sa.Column("deleted", sa.Integer),
        sa.Column("exclude_from_sitemap", sa.Integer),
        sa.Column("sitemap_priority", sa.String, nullable=True),
    )
    news = sa.Table(
        "tx_news",
        md,
        sa.Column("uid", sa.Integer, primary_key=True),
        sa.Column("pid", sa.Integer),
        sa.Column("path_segment", sa.String),
        sa.Column("tstamp", sa.Integer, nullable=True),
        sa.Column("changefreq", sa.String, nullable=True),
        sa.Column("priority", sa.Float, nullable=True),
        sa.Column("exclude_from_sitemap", sa.Integer, nullable=True),
        sa.Column("sys_language_uid", sa.Integer),
    )
    md.create_all(engine)

    def page(uid, pid, sorting, slug, doktype=1, hidden=0, deleted=0, exclude=0, prio=None):
        return {
            "uid": uid, "pid": pid, "doktype": doktype, "tstamp": TS, "sorting": sorting,
            "slug": slug, "hidden": hidden, "deleted": deleted,
            "exclude_from_sitemap": exclude, "sitemap_priority": prio,
        }

    def record(uid, pid, segment, tstamp=TS, changefreq=None, priority=None, exclude=0, lang=0):
        return {
            "uid": uid, "pid": pid, "path_segment": segment, "tstamp": tstamp,
            "changefreq": changefreq, "priority": priority,
            "exclude_from_sitemap": exclude, "sys_language_uid": lang,
        }

    with engine.begin() as conn:
        conn.execute(
            pages.insert(),
            [
                page(1, 0, 0, "/"),
                page(2, 1, 20, "/about", prio="5"),
                page(3, 1, 10, "/contact"),
                page(4, 1, 30, "/secret", hidden=1),
                page(5, 1, 40, "/old", exclude=1),
                page(6, 2, 0, "/about/team"),
                page(7, 1, 50, "/storage", doktype=254),
                page(8, 7, 0, "/storage/file"),
                page(9, 1, 60, "/trash", deleted=1),
            ],
        )
        conn.execute(
            news.insert(),
            [
                record(1, 10, "first", changefreq="Weekly", priority=0.8),
                record(2, 10, "second", tstamp=None, exclude=None),
                record(3, 0, "root-record"),
                record(4, 10, "excluded", exclude=1),
                record(5, 10, "german", lang=1),
            ],
        )
    engine.dispose()
    return url
