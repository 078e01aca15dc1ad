# sitemap_builder/models.py
"""
Data models for the sitemap builder.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from sitemap_builder.errors import InvalidEntry
from sitemap_builder.utils import is_absolute_url

__all__ = [
    "STANDARD_PAGE",
    "ChangeFreq",
    "UrlEntry",
    "PageNode",
    "Row",
    "QueryResult",
]

#: doc_type of a regular content page; everything else (folders, shortcuts, ...) is skipped
STANDARD_PAGE = 1

Row = Mapping[str, Any]


class ChangeFreq(str, Enum):
    ALWAYS = "always"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    NEVER = "never"


@dataclass(frozen=True, slots=True)
class UrlEntry:
    """A single validated sitemap URL entry."""

    loc: str
    lastmod: Optional[dt.date] = None
    changefreq: Optional[ChangeFreq] = None
    priority: Optional[float] = None

    def __post_init__(self) -> None:
        if not isinstance(self.loc, str) or not is_absolute_url(self.loc):
            raise InvalidEntry(f"loc must be an absolute http(s) URL, got {self.loc!r}")
        if self.lastmod is not None:
            if isinstance(self.lastmod, dt.datetime):
                object.__setattr__(self, "lastmod", self.lastmod.date())
            elif not isinstance(self.lastmod, dt.date):
                raise InvalidEntry(f"lastmod must be a date, got {self.lastmod!r}")
        if self.changefreq is not None and not isinstance(self.changefreq, ChangeFreq):
            try:
                object.__setattr__(self, "changefreq", ChangeFreq(self.changefreq))
            except ValueError as exc:
                raise InvalidEntry(f"unknown changefreq {self.changefreq!r}") from exc
        if self.priority is not None and not 0.0 <= self.priority <= 1.0:
            raise InvalidEntry(f"priority must be within [0.0, 1.0], got {self.priority!r}")

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict for JSON output; unset fields are omitted."""
        data: Dict[str, Any] = {"loc": self.loc}
        if self.lastmod is not None:
            data["lastmod"] = self.lastmod.isoformat()
        if self.changefreq is not None:
            data["changefreq"] = self.changefreq.value
        if self.priority is not None:
            data["priority"] = self.priority
        return data


@dataclass(frozen=True, slots=True)
class PageNode:
    """A page record as provided by the page tree collaborator."""

    id: int
    parent_id: int = 0
    doc_type: int = STANDARD_PAGE
    timestamp: Union[int, float, dt.datetime, None] = None
    exclude: bool = False
    sitemap_priority: Union[int, str, None] = None
    sorting: int = 0
    slug: Optional[str] = None


@dataclass(slots=True)
class QueryResult:
    """Outcome of a query: either rows or a failure reason."""

    rows: List[Row] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, rows: List[Row]) -> QueryResult:
        return cls(rows=list(rows))

    @classmethod
    def failure(cls, reason: str) -> QueryResult:
        return cls(error=reason or "unknown error")
