# File: sitemap_builder/diagnostics.py
"""sitemap_builder.diagnostics: Сбор предупреждений и счётчиков одного запуска агрегации."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from sitemap_builder.logger import logger


class DiagnosticKind(str, Enum):
    CONFIGURATION_ERROR = "configuration_error"
    SOURCE_UNAVAILABLE = "source_unavailable"
    MAPPING_WARNING = "mapping_warning"
    INVALID_ENTRY = "invalid_entry"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    kind: DiagnosticKind
    source: str
    message: str


@dataclass(slots=True)
class Diagnostics:
    """Диагностика запуска: записи о проблемах и счётчики отброшенных записей."""

    records: List[Diagnostic] = field(default_factory=list)
    dropped_entries: int = 0
    duplicate_entries: int = 0
    aborted: bool = False

    def add(self, kind: DiagnosticKind, source: str, message: str) -> None:
        self.records.append(Diagnostic(kind, source, message))
        if kind is DiagnosticKind.CONFIGURATION_ERROR:
            logger.error("[%s] %s", source, message)
        else:
            logger.warning("[%s] %s: %s", source, kind.value, message)

    def extend(self, other: Diagnostics) -> None:
        """Добавляет записи и счётчики другого экземпляра (без повторного логирования)."""
        self.records.extend(other.records)
        self.dropped_entries += other.dropped_entries
        self.duplicate_entries += other.duplicate_entries
        self.aborted = self.aborted or other.aborted

    def count(self, kind: Optional[DiagnosticKind] = None) -> int:
        if kind is None:
            return len(self.records)
        return sum(1 for r in self.records if r.kind is kind)

    def __len__(self) -> int:
        return len(self.records)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aborted": self.aborted,
            "dropped_entries": self.dropped_entries,
            "duplicate_entries": self.duplicate_entries,
            "records": [{**asdict(r), "kind": r.kind.value} for r in self.records],
        }


__all__ = ["DiagnosticKind", "Diagnostic", "Diagnostics"]
