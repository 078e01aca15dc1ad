# File: sitemap_builder/utils.py
"""sitemap_builder.utils: Утилиты для проверки URL, идентификаторов SQL и преобразования дат."""

from __future__ import annotations

import datetime as dt
import re
from typing import Any, Sequence
from urllib.parse import urlparse

from sitemap_builder.logger import logger

__all__: Sequence[str] = (
    "is_absolute_url",
    "is_identifier",
    "to_date",
    "join_url",
)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_absolute_url(url: str) -> bool:
    """Проверяет, что URL абсолютный и использует http(s)."""
    if not url or not url.strip():
        return False
    try:
        parsed = urlparse(url)
    except ValueError as exc:
        logger.debug("URL parse error %r: %s", url, exc)
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc) and url == url.strip()


def is_identifier(name: str) -> bool:
    """Проверяет, что имя таблицы/колонки — простой SQL-идентификатор."""
    return bool(name) and bool(_IDENTIFIER_RE.match(name))


def to_date(value: Any) -> dt.date:
    """Приводит unix-timestamp, date, datetime или ISO-строку к дате (UTC для timestamp).

    Бросает ValueError/TypeError, если значение не распознано.
    """
    if isinstance(value, bool):
        raise TypeError(f"boolean is not a date: {value!r}")
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, (int, float)):
        try:
            return dt.datetime.fromtimestamp(value, tz=dt.timezone.utc).date()
        except (OverflowError, OSError) as exc:
            raise ValueError(f"timestamp out of range: {value!r}") from exc
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return to_date(int(text))
        return dt.datetime.fromisoformat(text).date()
    raise TypeError(f"unsupported date value: {value!r}")


def join_url(base_url: str, path: str) -> str:
    """Склеивает базовый URL и относительный путь ровно одним слешем."""
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"
