"""
Diagnostics primitives shared by the validator and rules.

- DiagnosticLevel: error/warning/info
- Diagnostic: a single validation finding
- ValidationReport: an immutable bag of diagnostics with a convenience .ok flag

Notes
-----
- `table_key` is the table name as declared. Use "" for global/no-table diagnostics.
- Prefer full words in codes (UPPER_SNAKE_CASE), e.g., "IDENTIFIER_LENGTH_WITHIN_LIMIT".
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TypeAlias

from src.ddl_engine.errors import ValidationError

TableKey: TypeAlias = str


class DiagnosticLevel(StrEnum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """
    A single validation finding.

    table_key:
        Table name. Use "" for global/no-table diagnostics.
    code:
        Stable identifier in UPPER_SNAKE_CASE with full words.
    message:
        One-line human-readable message.
    hint:
        Optional guidance; empty string means "no hint".
    """

    table_key: TableKey
    level: DiagnosticLevel
    code: str
    message: str
    hint: str = ""


@dataclass(frozen=True, slots=True)
class ValidationReport:
    """Immutable bag of diagnostics with a convenience 'ok' property."""

    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def ok(self) -> bool:
        return not any(d.level == DiagnosticLevel.ERROR for d in self.diagnostics)

    @property
    def errors(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.level == DiagnosticLevel.ERROR)

    @property
    def warnings(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.level == DiagnosticLevel.WARNING)

    def raise_for_errors(self) -> None:
        """Raise ValidationError summarising the first error when the report is not ok."""
        errors = self.errors
        if not errors:
            return
        first = errors[0]
        where = f"{first.table_key}: " if first.table_key else ""
        more = f" (and {len(errors) - 1} more)" if len(errors) > 1 else ""
        raise ValidationError(f"{first.code}: {where}{first.message}{more}")
