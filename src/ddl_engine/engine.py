"""
Engine: high-level entry point for the DDL engine.

Responsibilities
----------------
- Wire default components (platform reader/builder, differ, validator, runner).
- Render whole models or change-sets as statement lists:
    - create_model_sql(desired), drop_model_sql(database), alter_model_sql(current, desired)
- Run the full alter flow against a live database:
    - alter_database(connection, desired, options)

Flow of alter_database (one pass):
  1) Read the live model through the platform's reader.
  2) Diff live vs desired into an ordered change-set.
  3) Validate (desired model, change-set, read errors).
  4) Render, then optionally execute the statements.

Notes:
-----
- No SQL text and no catalog plumbing here; work is delegated to injected components.
- Defaults are provided, but everything can be overridden for testing or custom behaviour.
"""

from __future__ import annotations

from dataclasses import dataclass

from src import settings
from src.ddl_engine.dialects.registry import DialectRegistry, default_registry
from src.ddl_engine.execute.ports import ApplyReport, ExecutionPolicy
from src.ddl_engine.execute.runner import StatementRunner
from src.ddl_engine.models import Database
from src.ddl_engine.plan.changes import ChangeSet
from src.ddl_engine.plan.differ import Differ
from src.ddl_engine.platform import Platform
from src.ddl_engine.state.ports import MetadataConnection, ReadResult, TableFilter
from src.ddl_engine.validation.diagnostics import ValidationReport
from src.ddl_engine.validation.rules import default_rule_set
from src.ddl_engine.validation.validator import Validator
from src.logger import LOGGER

# ---------- inputs/outputs ----------


@dataclass(frozen=True)
class AlterOptions:
    """
    Toggles for a single alter run.

    table_filter:
        Which live tables to read (default: every table of type TABLE).
    strict_read:
        Raise on the first metadata read error instead of continuing with a partial model.
    execute:
        If False, stop after rendering and validation (nothing is applied).
    fail_on_validation_errors:
        If True, block execution when validation has any ERROR.
    execution_policy:
        How to run statements (dry-run, stop-on-first-error).
    """

    table_filter: TableFilter = TableFilter()
    strict_read: bool = False
    execute: bool = True
    fail_on_validation_errors: bool = True
    execution_policy: ExecutionPolicy = ExecutionPolicy()


@dataclass(frozen=True)
class AlterReport:
    """Everything a caller would want to inspect or log from a single run."""

    read: ReadResult
    change_set: ChangeSet
    statements: tuple[str, ...]
    validation: ValidationReport
    apply_report: ApplyReport | None = None


# ---------- engine ----------


class Engine:
    """
    High-level entry point bound to one platform.

    You can:
      - pass your own components (for custom behaviour), or
      - rely on defaults (simple, batteries included).
    """

    def __init__(
        self,
        platform: Platform,
        differ: Differ | None = None,
        validator: Validator | None = None,
    ) -> None:
        self.platform = platform
        self.differ = differ or Differ(type_mapping=platform.dialect.type_mapping)
        if validator is None:
            model_rules, change_rules, read_error_rules = default_rule_set()
            self.validator = Validator(model_rules, change_rules, read_error_rules)
        else:
            self.validator = validator

    @classmethod
    def for_dialect(
        cls,
        name: str = settings.DEFAULT_DIALECT,
        registry: DialectRegistry | None = None,
    ) -> Engine:
        """Engine for a registered dialect name (raises UnknownPlatformError)."""
        registry = registry or default_registry(settings.DELIMITED_IDENTIFIERS)
        return cls(registry.get(name))

    # ----- rendering -----

    def create_model_sql(self, desired: Database) -> tuple[str, ...]:
        script = self.platform.new_script()
        self.platform.create_builder(script).create_model(desired)
        return script.statements

    def drop_model_sql(self, database: Database) -> tuple[str, ...]:
        script = self.platform.new_script()
        self.platform.create_builder(script).drop_model(database)
        return script.statements

    def alter_model_sql(self, current: Database, desired: Database) -> tuple[str, ...]:
        return self._render(self.differ.diff(current, desired))

    # ----- live database -----

    def read_model(
        self,
        connection: MetadataConnection,
        name: str = "database",
        table_filter: TableFilter | None = None,
    ) -> ReadResult:
        return self.platform.reader.read(connection, name, table_filter)

    def alter_database(
        self,
        connection: MetadataConnection,
        desired: Database,
        options: AlterOptions = AlterOptions(),
    ) -> AlterReport:
        """Read → diff → validate → render → (optionally) execute."""
        LOGGER.info("Reading live model for %r (%s)", desired.name, self.platform.name)
        read = self.read_model(connection, desired.name, options.table_filter)
        if options.strict_read and read.errors:
            raise read.errors[0]

        change_set = self.differ.diff(read.database, desired)
        validation = self.validator.validate(
            desired, self.platform.dialect, change_set, read.errors
        )
        for diagnostic in validation.diagnostics:
            LOGGER.warning("%s %s: %s", diagnostic.code, diagnostic.table_key, diagnostic.message)

        statements = self._render(change_set)
        apply_report: ApplyReport | None = None
        if options.execute and (validation.ok or not options.fail_on_validation_errors):
            LOGGER.info("Applying %d statement(s)", len(statements))
            apply_report = StatementRunner(connection).apply(
                statements, policy=options.execution_policy
            )
        elif options.execute:
            LOGGER.error("Validation failed with %d error(s); nothing applied", len(validation.errors))

        return AlterReport(
            read=read,
            change_set=change_set,
            statements=statements,
            validation=validation,
            apply_report=apply_report,
        )

    # ----- helpers -----

    def _render(self, change_set: ChangeSet) -> tuple[str, ...]:
        script = self.platform.new_script()
        self.platform.create_builder(script).process_changes(change_set)
        return script.statements
