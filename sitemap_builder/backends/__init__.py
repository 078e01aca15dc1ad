# File: sitemap_builder/backends/__init__.py
"""sitemap_builder.backends: Конкретные реализации внешних сервисов (БД, дерево страниц, URL, шаблоны)."""

from .memory import InMemoryPageTree
from .sql import SqlPageTree, SqlQueryBackend, compile_filter, create_db_engine
from .templates import JinjaTemplateEvaluator
from .urls import PageUrlBuilder

__all__ = [
    "InMemoryPageTree",
    "SqlPageTree",
    "SqlQueryBackend",
    "compile_filter",
    "create_db_engine",
    "JinjaTemplateEvaluator",
    "PageUrlBuilder",
]
