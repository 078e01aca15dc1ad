# File: sitemap_builder/report/__init__.py
"""sitemap_builder.report: Сохранение результата агрегации (JSON), используется CLI и тестами."""

from .json_report import render_json

__all__ = ["render_json"]
