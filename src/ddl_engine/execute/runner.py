"""
Statement Runner

Purpose
-------
Execute rendered DDL statements one by one, in the given order.

Design
------
- No SQL rendering here; statements come from a builder's script.
- Respects ExecutionPolicy:
  - dry_run=True: nothing is executed; every statement is reported SKIPPED.
  - stop_on_first_error=True: after the first FAILED statement, the remaining
    ones are reported SKIPPED with a short-circuit message.
- No transactions are opened or committed here.
"""

from __future__ import annotations

from collections.abc import Sequence

from src.ddl_engine.errors import summarize_exception
from src.ddl_engine.execute.ports import (
    ApplyReport,
    ApplyStatus,
    ExecutionPolicy,
    StatementExecutor,
    StatementResult,
)
from src.logger import LOGGER


class StatementRunner:
    """Run statements against an injected executor (typically a MetadataConnection)."""

    def __init__(self, executor: StatementExecutor) -> None:
        self._executor = executor

    def apply(self, statements: Sequence[str], *, policy: ExecutionPolicy) -> ApplyReport:
        results: list[StatementResult] = []
        for position, statement in enumerate(statements):
            if policy.dry_run:
                results.append(
                    StatementResult(statement, ApplyStatus.SKIPPED, f"DRY RUN: {statement}")
                )
                continue

            result = self._run_one(statement)
            results.append(result)
            if result.status == ApplyStatus.FAILED and policy.stop_on_first_error:
                results.extend(self._skip_remaining(statements[position + 1 :]))
                break

        report = ApplyReport(results=tuple(results))
        LOGGER.info(
            "Ran %d statement(s): %d failed, %d skipped",
            len(report.results),
            len(report.failures),
            sum(1 for r in report.results if r.status == ApplyStatus.SKIPPED),
        )
        return report

    # ---------- helpers ----------

    def _run_one(self, statement: str) -> StatementResult:
        LOGGER.debug("Executing statement: %s", statement)
        try:
            self._executor.execute(statement)
        except Exception as error:
            brief = summarize_exception(error)
            LOGGER.error("Statement failed: %s -- %s", statement.splitlines()[0], brief)
            return StatementResult(statement, ApplyStatus.FAILED, brief)
        return StatementResult(statement, ApplyStatus.OK)

    @staticmethod
    def _skip_remaining(statements: Sequence[str]) -> list[StatementResult]:
        """Create SKIPPED stubs for remaining statements after a failure when short-circuiting."""
        return [
            StatementResult(
                statement,
                ApplyStatus.SKIPPED,
                "Skipped due to previous failure (stop_on_first_error)",
            )
            for statement in statements
        ]
