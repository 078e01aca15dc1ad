# File: sitemap_builder/sources/page_tree.py
"""sitemap_builder.sources.page_tree: Обход дерева страниц CMS."""

from __future__ import annotations

from typing import Iterator, Optional, Set

from sitemap_builder.collaborators import PageTree
from sitemap_builder.logger import child
from sitemap_builder.models import STANDARD_PAGE, PageNode

logger = child("sources.page_tree")


def is_sitemap_page(page: PageNode) -> bool:
    """Страница попадает в карту сайта: обычный тип и не исключена."""
    return not page.exclude and page.doc_type == STANDARD_PAGE


class PageTreeAdapter:
    """Отдаёт страницы дерева в порядке pre-order: корень, затем дети по sorting."""

    def __init__(self, tree: PageTree, max_depth: Optional[int] = None) -> None:
        self.tree = tree
        self.max_depth = max_depth

    def iter_pages(self, root_id: int) -> Iterator[PageNode]:
        """Ленивый обход; каждый вызов начинает обход заново.

        Если корня нет, последовательность пуста. Исключённые страницы и
        страницы не обычного типа не отдаются и не обходятся вглубь (кроме корня).
        """
        root = self.tree.get_page(root_id)
        if root is None:
            logger.warning("Root page %s not found, page tree is empty", root_id)
            return
        visited: Set[int] = {root.id}
        if is_sitemap_page(root):
            yield root
        yield from self._walk(root.id, 1, visited)

    def _walk(self, parent_id: int, depth: int, visited: Set[int]) -> Iterator[PageNode]:
        if self.max_depth is not None and depth > self.max_depth:
            return
        for page in self.tree.get_children(parent_id, is_sitemap_page):
            if page.id in visited:
                logger.warning("Page %s reached twice, skipping (cycle in page tree?)", page.id)
                continue
            visited.add(page.id)
            yield page
            yield from self._walk(page.id, depth + 1, visited)
