# File: sitemap_builder/errors.py
"""sitemap_builder.errors: Иерархия исключений генератора карты сайта."""

from __future__ import annotations

__all__ = ["SitemapError", "ConfigurationError", "SourceUnavailable", "InvalidEntry"]


class SitemapError(Exception):
    """Базовое исключение пакета."""


class ConfigurationError(SitemapError, ValueError):
    """Отсутствующая или некорректная конфигурация источника. Прерывает агрегацию."""


class SourceUnavailable(SitemapError):
    """Коллаборатор источника (БД, дерево страниц) не ответил."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class InvalidEntry(SitemapError, ValueError):
    """Запись не может быть построена: пустой или не абсолютный loc и т.п."""
