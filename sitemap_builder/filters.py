# File: sitemap_builder/filters.py
"""sitemap_builder.filters: Структурированные выражения фильтра для запросов к таблицам.

Фильтр описывается деревом моделей вместо строки SQL, поэтому значения
никогда не попадают в текст запроса: бэкенд компилирует дерево в
параметризованное выражение.

Пример YAML::

    additional_filter:
      op: and
      clauses:
        - {op: eq, column: sys_language_uid, value: 0}
        - {op: raw, sql: "starttime <= :now", params: {now: 1700000000}}
"""

from __future__ import annotations

from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sitemap_builder.utils import is_identifier

__all__ = ["Equals", "NotEquals", "And", "Or", "Raw", "FilterExpression", "all_of"]

Scalar = Union[bool, int, float, str, None]


class _Node(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class _Comparison(_Node):
    column: str
    value: Scalar = None

    @field_validator("column")
    def _check_column(cls, v: str) -> str:
        if not is_identifier(v):
            raise ValueError(f"invalid column name: {v!r}")
        return v


class Equals(_Comparison):
    """column = value (``value: null`` means ``IS NULL``)."""

    op: Literal["eq"] = "eq"


class NotEquals(_Comparison):
    """column IS DISTINCT FROM value; NULL counts as different."""

    op: Literal["ne"] = "ne"


class And(_Node):
    op: Literal["and"] = "and"
    clauses: List[FilterExpression] = Field(..., min_length=1)


class Or(_Node):
    op: Literal["or"] = "or"
    clauses: List[FilterExpression] = Field(..., min_length=1)


class Raw(_Node):
    """SQL-фрагмент с именованными параметрами (``:name``); значения передаются отдельно."""

    op: Literal["raw"] = "raw"
    sql: str = Field(..., min_length=1)
    params: Dict[str, Scalar] = Field(default_factory=dict)


FilterExpression = Annotated[
    Union[Equals, NotEquals, And, Or, Raw],
    Field(discriminator="op"),
]

And.model_rebuild()
Or.model_rebuild()


def all_of(*clauses: Optional[FilterExpression]) -> Optional[FilterExpression]:
    """Объединяет условия через AND, пропуская None; один элемент возвращается как есть."""
    present = [c for c in clauses if c is not None]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return And(clauses=present)
