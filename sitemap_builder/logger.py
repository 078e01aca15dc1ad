# === FILE: sitemap_builder/logger.py ===
"""Logging setup for **sitemap_builder**.

All modules log through one project logger (``SitemapBuilder``) or one of its
children::

      from sitemap_builder.logger import logger, child
      logger.info("Aggregation started")
      log = child("sql")            # -> "SitemapBuilder.sql"

Console output goes to *stderr*: the ``build`` command prints its JSON report
on stdout. The CLI calls :func:`init_logging` once per invocation; tests call
:func:`configure` to restore defaults.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Optional, TextIO, Union

_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOGGER_NAME: Final[str] = "SitemapBuilder"
_MAX_BYTES: Final[int] = 5 * 1024 * 1024
_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


def _build_handlers(
    fmt: str, stream: Optional[TextIO], log_file: Union[str, Path, None]
) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(stream or sys.stderr)]
    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                filename=str(log_file), maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8"
            )
        )
    formatter = logging.Formatter(fmt)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: Union[str, Path, None] = None,
    log_format: str = _DEFAULT_FORMAT,
    stream: Optional[TextIO] = None,
    replace_handlers: bool = True,
) -> logging.Logger:
    """(Re)configure the project logger.

    Parameters
    ----------
    level
        Numeric or textual level, e.g. ``"DEBUG"``.
    log_file
        Optional rotating log file (5 MB x 3), in addition to the console.
    log_format
        :class:`logging.Formatter` format string.
    stream
        Console stream; *None* means the current ``sys.stderr``.
    replace_handlers
        Drop previously installed handlers first.
    """
    lg = logging.getLogger(_LOGGER_NAME)
    lg.setLevel(level.upper() if isinstance(level, str) else level)
    if replace_handlers:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()
    for handler in _build_handlers(log_format, stream, log_file):
        lg.addHandler(handler)
    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: Union[str, Path, None] = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """CLI entry: fresh handlers with the given options."""
    return configure(level=level, log_file=log_file, log_format=log_format)


def child(name: str) -> logging.Logger:
    """Child of the project logger; inherits its level and handlers."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")


logger: logging.Logger = init_logging()

__all__ = ["logger", "child", "configure", "init_logging"]
