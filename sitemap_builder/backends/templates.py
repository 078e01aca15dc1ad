# File: sitemap_builder/backends/templates.py
"""sitemap_builder.backends.templates: Вычисление шаблона URL записи с помощью Jinja2."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from jinja2 import StrictUndefined, Template, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from sitemap_builder.errors import InvalidEntry
from sitemap_builder.models import Row


class JinjaTemplateEvaluator:
    """Рендерит шаблон из конфига по строке таблицы.

    В контексте доступны колонки строки напрямую и вся строка как ``row``;
    глобальные значения (например ``base_url``) задаются в конструкторе.
    Шаблоны выполняются в песочнице, неизвестные переменные — ошибка.

    Пример:
    ```python
    evaluator = JinjaTemplateEvaluator({"base_url": "https://example.com"})
    evaluator.evaluate("{{ base_url }}/news/{{ slug }}", {"slug": "hello"})
    # 'https://example.com/news/hello'
    ```
    """

    def __init__(self, globals: Optional[Mapping[str, Any]] = None) -> None:
        self.env = SandboxedEnvironment(undefined=StrictUndefined, autoescape=False)
        self.env.globals.update(globals or {})
        self._cache: Dict[str, Template] = {}

    def evaluate(self, expression: str, row: Row) -> str:
        try:
            template = self._cache.get(expression)
            if template is None:
                template = self._cache[expression] = self.env.from_string(expression)
            return template.render({**row, "row": row})
        except TemplateError as exc:
            raise InvalidEntry(f"template {expression!r}: {exc}") from exc
        except Exception as exc:
            # errors raised while rendering one row (arithmetic, filters) drop only that row
            raise InvalidEntry(f"template {expression!r}: {type(exc).__name__}: {exc}") from exc
