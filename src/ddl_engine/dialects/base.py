"""
Dialect capability record.

A `Dialect` bundles everything that differs between database vendors:
type mapping, quoting rules, statement text templates, catalog queries and a
few strategy functions (primary-key generation policy, table exclusion).

Specialisation is done with `derive(base, name=..., **overrides)`: the new
dialect overrides exactly the given behaviours and inherits the rest. There is
no class hierarchy of dialects.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING

from src.constants import DEFAULT_MAX_IDENTIFIER_LENGTH, DEFAULT_STATEMENT_TERMINATOR
from src.ddl_engine.models import Column
from src.ddl_engine.state.queries import INFORMATION_SCHEMA_QUERIES, CatalogQueries
from src.ddl_engine.types import ColumnType, LogicalType

if TYPE_CHECKING:
    from src.ddl_engine.state.ports import MetadataConnection


# ---------- strategy defaults ----------


def always_generate_primary_keys(primary_key_columns: Sequence[Column]) -> bool:
    """Default policy: emit a PRIMARY KEY for every non-empty key."""
    return True


def skip_single_auto_increment_key(primary_key_columns: Sequence[Column]) -> bool:
    """Suppress the PRIMARY KEY when a single auto-increment column already implies uniqueness."""
    return not (len(primary_key_columns) == 1 and primary_key_columns[0].is_auto_increment)


def never_exclude_table(connection: MetadataConnection, raw_table_name: str) -> bool:
    """Default exclusion rule: keep every table the catalog reports."""
    return False


# ---------- quoting ----------


@dataclass(frozen=True)
class QuotingRules:
    """How identifiers and literals are quoted, and how long identifiers may be."""

    delimiter_token: str = '"'
    value_quote_token: str = "'"
    max_identifier_length: int = DEFAULT_MAX_IDENTIFIER_LENGTH


# ---------- types ----------


@dataclass(frozen=True)
class TypeMapping:
    """
    Two-way mapping between logical types and native type names.

    native_by_logical:
        Native type used when rendering a logical type. A native name that
        already carries arguments (e.g. 'NUMBER(10)') is rendered verbatim.
    logical_by_native:
        Extra native → logical aliases used when reading metadata; the inverse
        of `native_by_logical` is always included.
    default_sizes:
        Size used for sized types declared without one.
    """

    native_by_logical: Mapping[LogicalType, str]
    logical_by_native: Mapping[str, LogicalType] = field(
        default_factory=lambda: MappingProxyType({})
    )
    default_sizes: Mapping[LogicalType, int] = field(
        default_factory=lambda: MappingProxyType(
            {
                LogicalType.CHAR: 254,
                LogicalType.VARCHAR: 254,
                LogicalType.BINARY: 254,
                LogicalType.VARBINARY: 254,
            }
        )
    )

    def native_name(self, logical_type: LogicalType) -> str:
        return self.native_by_logical.get(logical_type, logical_type.value)

    def to_native(self, column_type: ColumnType) -> str:
        """Render a ColumnType as native SQL type text, e.g. 'VARCHAR2(32)'."""
        logical_type = column_type.logical_type
        native = self.native_name(logical_type)
        if "(" in native:
            return native
        if logical_type.has_precision_and_scale and column_type.precision is not None:
            return f"{native}({column_type.precision},{column_type.scale or 0})"
        if logical_type.has_size:
            size = column_type.size or self.default_sizes.get(logical_type)
            return f"{native}({size})" if size else native
        return native

    def normalize(self, column_type: ColumnType) -> ColumnType:
        """The ColumnType as the database reports it back: unsized types get their default size."""
        logical_type = column_type.logical_type
        if not logical_type.has_size or column_type.size is not None:
            return column_type
        if "(" in self.native_name(logical_type):
            return column_type
        size = self.default_sizes.get(logical_type)
        return column_type if size is None else replace(column_type, size=size)

    def to_logical(self, native_name: str) -> LogicalType | None:
        """Map a native type name (any case, arguments ignored) to a logical type."""
        key = str(native_name).split("(")[0].strip().upper()
        if key in self._aliases:
            return self._aliases[key]
        try:
            return LogicalType(key)
        except ValueError:
            return None

    @property
    def _aliases(self) -> Mapping[str, LogicalType]:
        aliases: dict[str, LogicalType] = {}
        for logical_type, native in self.native_by_logical.items():
            key = native.split("(")[0].strip().upper()
            # a native name that is also rendered for its own logical type maps back to it
            if key in LogicalType.__members__ and self.native_name(LogicalType(key)) == key:
                continue
            aliases.setdefault(key, logical_type)
        aliases.update({k.upper(): v for k, v in self.logical_by_native.items()})
        return aliases

    def with_overrides(
        self,
        native_by_logical: Mapping[LogicalType, str] | None = None,
        logical_by_native: Mapping[str, LogicalType] | None = None,
    ) -> TypeMapping:
        """Return a copy with some entries replaced."""
        return replace(
            self,
            native_by_logical=MappingProxyType(
                {**self.native_by_logical, **(native_by_logical or {})}
            ),
            logical_by_native=MappingProxyType(
                {**self.logical_by_native, **(logical_by_native or {})}
            ),
        )


def default_column_type(
    type_mapping: TypeMapping,
    native_name: str,
    size: int | None,
    precision: int | None,
    scale: int | None,
) -> ColumnType:
    """Normalize a catalog row's type columns into a ColumnType via the type mapping."""
    logical_type = type_mapping.to_logical(native_name) or LogicalType.OTHER
    if logical_type.has_precision_and_scale:
        return ColumnType(logical_type, precision=precision, scale=scale)
    if logical_type.has_size:
        return ColumnType(logical_type, size=size)
    return ColumnType(logical_type)


# ---------- statement text ----------


@dataclass(frozen=True)
class StatementTemplates:
    """
    Statement text shapes. Placeholders are filled with already-quoted values.

    ALTER TABLE fragments (after 'ALTER TABLE <table> '):
        add_primary_key, drop_primary_key, add_foreign_key, drop_foreign_key,
        add_column, drop_column, alter_column
    Full statements:
        drop_table, create_index, drop_index
    Optional ALTER TABLE fragments emitted as extra statements when set:
        alter_column_nullability, alter_column_default
    """

    add_primary_key: str = "ADD CONSTRAINT {name} PRIMARY KEY ({columns})"
    drop_primary_key: str = "DROP CONSTRAINT {name}"
    add_foreign_key: str = (
        "ADD CONSTRAINT {name} FOREIGN KEY ({columns}) REFERENCES {foreign_table} ({foreign_columns})"
    )
    drop_foreign_key: str = "DROP CONSTRAINT {name}"
    add_column: str = "ADD COLUMN {definition}"
    drop_column: str = "DROP COLUMN {name}"
    alter_column: str = "ALTER COLUMN {definition}"
    alter_column_nullability: str | None = None
    alter_column_default: str | None = None
    drop_table: str = "DROP TABLE {table}"
    create_index: str = "CREATE {unique}INDEX {name} ON {table} ({columns})"
    drop_index: str = "DROP INDEX {name}"
    embedded_primary_key: str = "PRIMARY KEY ({columns})"
    auto_increment: str | None = "GENERATED BY DEFAULT AS IDENTITY"


# ---------- the record ----------


@dataclass(frozen=True)
class Dialect:
    """Everything one database vendor/version needs, as data and small functions."""

    name: str
    type_mapping: TypeMapping
    quoting: QuotingRules = QuotingRules()
    templates: StatementTemplates = StatementTemplates()
    catalog_queries: CatalogQueries = INFORMATION_SCHEMA_QUERIES
    statement_terminator: str = DEFAULT_STATEMENT_TERMINATOR
    primary_key_embedded: bool = True
    system_indexes_returned: bool = True
    system_schemas: frozenset[str] = frozenset({"INFORMATION_SCHEMA"})
    should_generate_primary_keys: Callable[[Sequence[Column]], bool] = always_generate_primary_keys
    is_table_excluded: Callable[[MetadataConnection, str], bool] = never_exclude_table
    column_type_from_catalog: Callable[
        [TypeMapping, str, int | None, int | None, int | None], ColumnType
    ] = default_column_type

    @property
    def supports_auto_increment(self) -> bool:
        return self.templates.auto_increment is not None


def derive(base: Dialect, name: str, **overrides: object) -> Dialect:
    """Create a dialect that overrides only the given fields of `base`."""
    return replace(base, name=name, **overrides)


def derive_templates(base: StatementTemplates, **overrides: str | None) -> StatementTemplates:
    """Copy statement templates with some shapes replaced."""
    return replace(base, **overrides)
