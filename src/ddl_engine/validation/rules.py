"""
Concrete validation rules.

- Centralised RuleCode (StrEnum)
- Model rules (one table + dialect), change rules (one change + dialect) and
  read-error rules (all metadata read errors at once)
- A `default_rule_set()` factory returning (model_rules, change_rules, read_error_rules)
"""

from __future__ import annotations

from enum import StrEnum

from src.ddl_engine.dialects.base import Dialect
from src.ddl_engine.errors import MetadataReadError
from src.ddl_engine.models import Table
from src.ddl_engine.plan.changes import Change, DropColumn, DropTable
from src.ddl_engine.types import LogicalType
from src.ddl_engine.validation.diagnostics import Diagnostic, DiagnosticLevel

# ---------- Centralised rule codes (full words, no abbreviations) ----------


class RuleCode(StrEnum):
    """Rule codes for diagnostics; each value identifies one rule."""

    IDENTIFIER_LENGTH_WITHIN_LIMIT = "IDENTIFIER_LENGTH_WITHIN_LIMIT"
    LOGICAL_TYPE_SUPPORTED = "LOGICAL_TYPE_SUPPORTED"
    AUTO_INCREMENT_SUPPORTED = "AUTO_INCREMENT_SUPPORTED"
    DESTRUCTIVE_CHANGE = "DESTRUCTIVE_CHANGE"
    METADATA_READ_ERRORS = "METADATA_READ_ERRORS"


# Types with no DDL rendering of their own; they only ever come back from a catalog.
_UNRENDERABLE_TYPES = frozenset(
    {
        LogicalType.ARRAY,
        LogicalType.DATALINK,
        LogicalType.DISTINCT,
        LogicalType.NULL,
        LogicalType.OTHER,
        LogicalType.REF,
        LogicalType.STRUCT,
    }
)


# ---------- MODEL RULES (one table) ----------


class IdentifierLengthWithinLimit:
    """Explicit table, column, foreign key and index names must fit the dialect's limit."""

    code = RuleCode.IDENTIFIER_LENGTH_WITHIN_LIMIT.value
    description = "Identifiers must not exceed the dialect's maximum identifier length."

    def check(self, table: Table, dialect: Dialect) -> list[Diagnostic]:
        limit = dialect.quoting.max_identifier_length
        names = [table.name, *table.column_names]
        names.extend(fk.name for fk in table.foreign_keys if fk.name)
        names.extend(index.name for index in table.indexes if index.name)
        too_long = [name for name in names if len(name) > limit]
        return [
            Diagnostic(
                table_key=table.name,
                level=DiagnosticLevel.ERROR,
                code=self.code,
                message=f"Identifier {name!r} is {len(name)} characters; {dialect.name} allows {limit}",
                hint="Shorten the name or leave constraint names unset to have them generated.",
            )
            for name in too_long
        ]


class LogicalTypeSupported:
    """Columns should use types the dialect can render."""

    code = RuleCode.LOGICAL_TYPE_SUPPORTED.value
    description = "Column types must be renderable as DDL."

    def check(self, table: Table, dialect: Dialect) -> list[Diagnostic]:
        return [
            Diagnostic(
                table_key=table.name,
                level=DiagnosticLevel.WARNING,
                code=self.code,
                message=(
                    f"Column '{column.name}' has type {column.data_type.logical_type.value}, "
                    f"which {dialect.name} renders as "
                    f"{dialect.type_mapping.to_native(column.data_type)}"
                ),
            )
            for column in table.columns
            if column.data_type.logical_type in _UNRENDERABLE_TYPES
        ]


class AutoIncrementSupported:
    """Auto-increment columns need a dialect with an auto-increment clause."""

    code = RuleCode.AUTO_INCREMENT_SUPPORTED.value
    description = "Auto-increment columns require dialect support."

    def check(self, table: Table, dialect: Dialect) -> list[Diagnostic]:
        if dialect.supports_auto_increment:
            return []
        return [
            Diagnostic(
                table_key=table.name,
                level=DiagnosticLevel.WARNING,
                code=self.code,
                message=f"Column '{column.name}' is auto-increment but {dialect.name} has no such clause",
                hint="Create a sequence and trigger for this column separately.",
            )
            for column in table.auto_increment_columns
        ]


# ---------- CHANGE RULES (one change) ----------


class DestructiveChange:
    """Dropping tables or columns loses data; surface it."""

    code = RuleCode.DESTRUCTIVE_CHANGE.value
    description = "Changes that drop tables or columns are reported."

    def check(self, change: Change, dialect: Dialect) -> list[Diagnostic]:
        if isinstance(change, DropTable):
            message = f"Table '{change.table_name}' will be dropped"
        elif isinstance(change, DropColumn):
            message = f"Column '{change.column.name}' will be dropped"
        else:
            return []
        return [
            Diagnostic(
                table_key=change.table_name,
                level=DiagnosticLevel.WARNING,
                code=self.code,
                message=message,
            )
        ]


# ---------- READ ERROR RULES (global) ----------


class ReadErrorsToDiagnostics:
    """Turn metadata read errors into error diagnostics, one per failed table aspect."""

    code = RuleCode.METADATA_READ_ERRORS.value
    description = "Convert metadata read errors into diagnostics."

    def check(self, errors: tuple[MetadataReadError, ...]) -> list[Diagnostic]:
        return [
            Diagnostic(
                table_key=error.table_name or "",
                level=DiagnosticLevel.ERROR,
                code=f"{self.code}_{error.aspect.upper().replace(' ', '_')}",
                message=error.message,
                hint="The table is missing from the read model; fix access and read again.",
            )
            for error in errors
        ]


# ---------- convenience factory ----------


def default_rule_set() -> tuple[
    tuple[object, ...],  # model rules
    tuple[object, ...],  # change rules
    tuple[object, ...],  # read error rules
]:
    """
    Return a default bundle of rules as 3 tuples to pass to Validator:

        model_rules, change_rules, read_error_rules = default_rule_set()
        validator = Validator(model_rules, change_rules, read_error_rules)
    """
    model_rules = (IdentifierLengthWithinLimit(), LogicalTypeSupported(), AutoIncrementSupported())
    change_rules = (DestructiveChange(),)
    read_error_rules = (ReadErrorsToDiagnostics(),)
    return (model_rules, change_rules, read_error_rules)
