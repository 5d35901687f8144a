"""
Validator core: run model rules per table, change rules per change, then
read-error rules once.

Responsibilities
----------------
- Keep rules decoupled via simple Protocols (each rule receives only what it needs).
- Perform no I/O. Caller supplies the desired model, a change-set and read errors.
- Produce a ValidationReport (immutable) with a convenience .ok flag.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from src.ddl_engine.dialects.base import Dialect
from src.ddl_engine.errors import MetadataReadError
from src.ddl_engine.models import Database, Table
from src.ddl_engine.plan.changes import Change, ChangeSet
from src.ddl_engine.validation.diagnostics import Diagnostic, ValidationReport

# ---------- rule protocols ----------


class ModelRule(Protocol):
    """A rule over one desired table; returns zero or more diagnostics and never raises."""

    code: str
    description: str

    def check(self, table: Table, dialect: Dialect) -> list[Diagnostic]: ...


class ChangeRule(Protocol):
    """A rule over one planned change."""

    code: str
    description: str

    def check(self, change: Change, dialect: Dialect) -> list[Diagnostic]: ...


class ReadErrorRule(Protocol):
    """A global rule that converts metadata read errors into diagnostics."""

    code: str
    description: str

    def check(self, errors: tuple[MetadataReadError, ...]) -> list[Diagnostic]: ...


# ---------- validator orchestrator ----------


class Validator:
    """
    Orchestrates validation in three stages:

      1) Model rules       (each desired table)
      2) Change rules      (each planned change)
      3) Read error rules  (all read errors at once)
    """

    def __init__(
        self,
        model_rules: Iterable[ModelRule] = (),
        change_rules: Iterable[ChangeRule] = (),
        read_error_rules: Iterable[ReadErrorRule] = (),
    ) -> None:
        self._model_rules = tuple(model_rules)
        self._change_rules = tuple(change_rules)
        self._read_error_rules = tuple(read_error_rules)

    def validate(
        self,
        desired: Database,
        dialect: Dialect,
        change_set: ChangeSet = ChangeSet(),
        read_errors: tuple[MetadataReadError, ...] = (),
    ) -> ValidationReport:
        diagnostics: list[Diagnostic] = []

        for table in desired.tables:
            for rule in self._model_rules:
                diagnostics.extend(rule.check(table, dialect))

        for change in change_set:
            for rule in self._change_rules:
                diagnostics.extend(rule.check(change, dialect))

        if read_errors:
            for rule in self._read_error_rules:
                diagnostics.extend(rule.check(read_errors))

        return ValidationReport(diagnostics=tuple(diagnostics))
