# File: sitemap_builder/backends/urls.py
"""sitemap_builder.backends.urls: Построение абсолютных URL страниц."""

from __future__ import annotations

from typing import Optional

from sitemap_builder.collaborators import PageTree
from sitemap_builder.models import PageNode
from sitemap_builder.utils import join_url


class PageUrlBuilder:
    """Базовый URL + slug страницы; без slug — ``/index.php?id=<id>``."""

    def __init__(self, base_url: str, page_tree: PageTree) -> None:
        self.base_url = base_url.rstrip("/")
        self.page_tree = page_tree

    def build_absolute_url(self, page_id: int, page: Optional[PageNode] = None) -> str:
        """URL страницы; уже загруженный ``page`` избавляет от повторного запроса к дереву."""
        if page is None or page.id != page_id:
            page = self.page_tree.get_page(page_id)
        if page is not None and page.slug:
            return join_url(self.base_url, page.slug)
        return f"{self.base_url}/index.php?id={page_id}"
