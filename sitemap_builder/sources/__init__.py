# File: sitemap_builder/sources/__init__.py
"""sitemap_builder.sources: Адаптеры источников URL (дерево страниц и таблицы БД)."""

from .page_tree import PageTreeAdapter, is_sitemap_page
from .record_table import RecordTableAdapter

__all__ = ["PageTreeAdapter", "RecordTableAdapter", "is_sitemap_page"]
