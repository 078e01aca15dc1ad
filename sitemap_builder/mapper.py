# File: sitemap_builder/mapper.py
"""sitemap_builder.mapper: Преобразование страниц и строк таблиц в записи UrlEntry."""

from __future__ import annotations

from typing import Any

from sitemap_builder.collaborators import TemplateEvaluator, UrlBuilder
from sitemap_builder.config import SourceConfig
from sitemap_builder.diagnostics import DiagnosticKind, Diagnostics
from sitemap_builder.errors import InvalidEntry
from sitemap_builder.models import ChangeFreq, PageNode, Row, UrlEntry
from sitemap_builder.utils import to_date

__all__ = ["UrlEntryMapper", "PAGES_SOURCE"]

#: source label used in diagnostics for the page tree pass
PAGES_SOURCE = "pages"


class UrlEntryMapper:
    """Строит UrlEntry для страницы или строки таблицы.

    Ошибка в отдельном поле (дата, приоритет, частота) не прерывает обработку:
    поле остаётся пустым, в диагностику пишется mapping_warning.
    Неверный loc приводит к InvalidEntry — такую запись отбрасывает агрегатор.
    """

    def __init__(self, url_builder: UrlBuilder, templates: TemplateEvaluator) -> None:
        self.url_builder = url_builder
        self.templates = templates

    # ------------------------------------------------------------------ pages

    def map_page(self, page: PageNode, diagnostics: Diagnostics) -> UrlEntry:
        loc = self.url_builder.build_absolute_url(page.id, page)
        context = f"page {page.id}"

        lastmod = None
        if page.timestamp is not None:
            lastmod = self._convert(
                to_date, page.timestamp, "lastmod", context, diagnostics
            )

        priority = None
        if str(page.sitemap_priority or "").strip() not in ("", "0"):
            priority = self._convert(
                _page_priority, page.sitemap_priority, "priority", context, diagnostics
            )

        return UrlEntry(loc=loc, lastmod=lastmod, priority=priority)

    # ------------------------------------------------------------------- rows

    def map_row(self, row: Row, source: SourceConfig, diagnostics: Diagnostics) -> UrlEntry:
        fields = source.field_map
        context = f"{source.label} row {row.get('uid', row.get('id', '?'))}"

        try:
            loc = self.templates.evaluate(fields.loc or "", row)
        except Exception as exc:
            raise InvalidEntry(f"{context}: url template failed: {exc}") from exc

        lastmod = changefreq = priority = None
        if fields.lastmod:
            lastmod = self._column(row, fields.lastmod, to_date, "lastmod", context, diagnostics)
        if fields.changefreq:
            changefreq = self._column(
                row, fields.changefreq, _changefreq, "changefreq", context, diagnostics
            )
        if fields.priority:
            priority = self._column(
                row, fields.priority, _priority, "priority", context, diagnostics
            )

        return UrlEntry(
            loc=loc.strip(), lastmod=lastmod, changefreq=changefreq, priority=priority
        )

    # ---------------------------------------------------------------- helpers

    def _column(self, row, column, convert, field_name, context, diagnostics):
        if column not in row:
            diagnostics.add(
                DiagnosticKind.MAPPING_WARNING, context, f"{field_name}: no column {column!r}"
            )
            return None
        value = row[column]
        if value is None:
            return None
        return self._convert(convert, value, field_name, context, diagnostics)

    @staticmethod
    def _convert(convert, value, field_name, context, diagnostics):
        try:
            return convert(value)
        except (TypeError, ValueError) as exc:
            diagnostics.add(
                DiagnosticKind.MAPPING_WARNING, context, f"{field_name}: {value!r} skipped ({exc})"
            )
            return None


def _page_priority(value: Any) -> float:
    """Приоритет страницы хранится цифрами дробной части: "7" → 0.7, "25" → 0.25."""
    digits = str(value).strip()
    if not digits.isdigit():
        raise ValueError("expected digits of a decimal fraction")
    return float(f"0.{digits}")


def _priority(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("boolean is not a priority")
    priority = float(value)
    if not 0.0 <= priority <= 1.0:
        raise ValueError("priority must be within [0.0, 1.0]")
    return priority


def _changefreq(value: Any) -> ChangeFreq:
    if not isinstance(value, str):
        raise TypeError("changefreq must be a string")
    return ChangeFreq(value.strip().lower())
