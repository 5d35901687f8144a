"""
Execution ports and result types.

- StatementExecutor: protocol for anything that can run one DDL statement
- ExecutionPolicy: toggles for dry-run and error handling
- StatementResult / ApplyReport: structured outcomes to log or surface upstream
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol


class ApplyStatus(StrEnum):
    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"  # dry-run or short-circuited after a failure


@dataclass(frozen=True)
class ExecutionPolicy:
    """
    Controls how the runner behaves.

    stop_on_first_error=False continues with the remaining statements after a
    failure and reports every failure at the end.
    """

    dry_run: bool = False
    stop_on_first_error: bool = True


@dataclass(frozen=True)
class StatementResult:
    """Outcome for a single statement."""

    statement: str
    status: ApplyStatus
    message: str = ""  # one line


@dataclass(frozen=True)
class ApplyReport:
    """Outcome for running a whole script."""

    results: tuple[StatementResult, ...] = ()

    @property
    def ok(self) -> bool:
        return all(result.status != ApplyStatus.FAILED for result in self.results)

    @property
    def failures(self) -> tuple[StatementResult, ...]:
        return tuple(r for r in self.results if r.status == ApplyStatus.FAILED)


class StatementExecutor(Protocol):
    """Runs one DDL statement; raises on failure."""

    def execute(self, sql: str) -> None: ...
