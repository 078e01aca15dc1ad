# File: sitemap_builder/backends/memory.py
"""sitemap_builder.backends.memory: Дерево страниц в памяти (страницы из конфига или тестов)."""

from __future__ import annotations

from collections import defaultdict
from typing import DefaultDict, Dict, Iterable, List, Optional, Sequence

from sitemap_builder.collaborators import PagePredicate
from sitemap_builder.models import PageNode


class InMemoryPageTree:
    """Индексирует страницы по id и по родителю; дети упорядочены по sorting."""

    def __init__(self, nodes: Iterable[PageNode]) -> None:
        self._pages: Dict[int, PageNode] = {}
        children: DefaultDict[int, List[PageNode]] = defaultdict(list)
        for node in nodes:
            self._pages[node.id] = node
            if node.parent_id != node.id:
                children[node.parent_id].append(node)
        # sort is stable: equal sorting keeps insertion order
        self._children = {pid: sorted(kids, key=lambda n: n.sorting) for pid, kids in children.items()}

    def get_page(self, page_id: int) -> Optional[PageNode]:
        return self._pages.get(page_id)

    def get_children(self, page_id: int, predicate: PagePredicate) -> Sequence[PageNode]:
        return [n for n in self._children.get(page_id, ()) if predicate(n)]

    def __len__(self) -> int:
        return len(self._pages)
