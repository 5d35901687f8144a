"""
SQL builder: render schema entities and change-sets as dialect DDL.

Conventions
-----------
- Every statement is written to the sink and closed with
  `print_end_of_statement()`, which appends the dialect's terminator.
- Statement *shape* comes from the dialect's `StatementTemplates`; ordering and
  naming live here and are the same for every dialect.
- The table name that opens a CREATE/ALTER TABLE statement is written with
  the sink's `print_identifier`; identifiers inside statement templates go
  through the platform's quoting (delimited or not).
- Generated names are deterministic, bounded by the dialect's identifier
  length and unique among one table's foreign keys and indexes.
- `create_primary_key` is a silent no-op when there are no key columns or the
  dialect's `should_generate_primary_keys` policy declines.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING, TypeVar

from src.ddl_engine.identifiers import (
    build_constraint_name,
    build_foreign_key_name,
    build_index_name,
    build_ordinal_name,
    build_primary_key_name,
    quote_sql_literal,
)
from src.ddl_engine.models import Column, Database, ForeignKey, Index, Table, name_key
from src.ddl_engine.plan.changes import (
    AddColumn,
    AddForeignKey,
    AddIndex,
    AddPrimaryKey,
    AlterColumn,
    Change,
    CreateTable,
    DropColumn,
    DropForeignKey,
    DropIndex,
    DropPrimaryKey,
    DropTable,
)
from src.ddl_engine.sql.sink import SqlSink
from src.enums import CascadeAction, TypeCategory
from src.logger import LOGGER

if TYPE_CHECKING:
    from src.ddl_engine.platform import Platform

_QUOTED_CATEGORIES = frozenset({TypeCategory.TEXTUAL, TypeCategory.DATETIME})

NamedT = TypeVar("NamedT", ForeignKey, Index)


class SqlBuilder:
    """Render DDL for one platform into one sink."""

    def __init__(self, platform: Platform, sink: SqlSink) -> None:
        self.platform = platform
        self.dialect = platform.dialect
        self.sink = sink
        self._renderers: dict[type[Change], Callable[[Change], None]] = {
            CreateTable: lambda c: self.create_table(c.table),
            DropTable: lambda c: self.drop_table(c.table),
            AddColumn: lambda c: self.add_column(c.table, c.column),
            DropColumn: lambda c: self.drop_column(c.table, c.column),
            AlterColumn: lambda c: self.alter_column(c.table, c.column, c.previous),
            AddPrimaryKey: lambda c: self.create_primary_key(c.table, c.columns),
            DropPrimaryKey: lambda c: self.drop_primary_key(c.table),
            AddForeignKey: lambda c: self.create_foreign_key(c.table, c.foreign_key),
            DropForeignKey: lambda c: self.drop_foreign_key(c.table, c.foreign_key),
            AddIndex: lambda c: self.create_index(c.table, c.index),
            DropIndex: lambda c: self.drop_index(c.table, c.index),
        }

    # ---------- models ----------

    def create_model(self, database: Database) -> None:
        """Create every table, then every foreign key."""
        for table in database.tables:
            self.create_table(table)
        for table in database.tables:
            for foreign_key in table.foreign_keys:
                self.create_foreign_key(table, foreign_key)

    def drop_model(self, database: Database) -> None:
        """Drop every foreign key, then every table in reverse declared order."""
        for table in database.tables:
            for foreign_key in table.foreign_keys:
                self.drop_foreign_key(table, foreign_key)
        for table in reversed(database.tables):
            self.drop_table(table)

    def process_changes(self, changes: Iterable[Change]) -> None:
        """Render changes in the given order."""
        for change in changes:
            renderer = self._renderers.get(type(change))
            if renderer is None:
                raise TypeError(f"Unsupported change type: {type(change).__name__}")
            renderer(change)

    # ---------- tables ----------

    def create_table(self, table: Table) -> None:
        """CREATE TABLE with columns (and the embedded PK when the dialect embeds it), then indexes."""
        primary_key_columns = table.primary_key_columns
        embed_primary_key = self.dialect.primary_key_embedded and self._generates_primary_key(
            primary_key_columns
        )

        self.sink.print("CREATE TABLE ")
        self.sink.println_identifier(table.name)
        self.sink.println("(")
        definitions = [self._column_definition(column) for column in table.columns]
        if embed_primary_key:
            definitions.append(
                self.dialect.templates.embedded_primary_key.format(
                    columns=self._column_list(primary_key_columns)
                )
            )
        for position, definition in enumerate(definitions):
            self.sink.print_indent()
            self.sink.println(definition + ("," if position < len(definitions) - 1 else ""))
        self.sink.print(")")
        self.sink.print_end_of_statement()

        if not self.dialect.primary_key_embedded:
            self.create_primary_key(table, primary_key_columns)
        for index in table.indexes:
            self.create_index(table, index)

    def drop_table(self, table: Table) -> None:
        self.sink.print(self.dialect.templates.drop_table.format(table=self._table_name(table)))
        self.sink.print_end_of_statement()

    # ---------- primary keys ----------

    def create_primary_key(self, table: Table, primary_key_columns: Sequence[Column]) -> None:
        """ALTER TABLE ... ADD PRIMARY KEY; no statement for an empty or policy-suppressed key."""
        if not self._generates_primary_key(primary_key_columns):
            return
        self._alter_table(
            table,
            self.dialect.templates.add_primary_key.format(
                name=self._identifier(self.get_primary_key_name(table)),
                columns=self._column_list(primary_key_columns),
            ),
        )

    def drop_primary_key(self, table: Table) -> None:
        self._alter_table(
            table,
            self.dialect.templates.drop_primary_key.format(
                name=self._identifier(self.get_primary_key_name(table))
            ),
        )

    # ---------- foreign keys ----------

    def create_foreign_key(self, table: Table, foreign_key: ForeignKey) -> None:
        clause = self.dialect.templates.add_foreign_key.format(
            name=self._identifier(self.get_foreign_key_name(table, foreign_key)),
            columns=self._name_list(foreign_key.local_columns),
            foreign_table=self._identifier(foreign_key.foreign_table),
            foreign_columns=self._name_list(foreign_key.foreign_columns),
        )
        if foreign_key.on_delete is not CascadeAction.NONE:
            clause += f" ON DELETE {foreign_key.on_delete.value}"
        if foreign_key.on_update is not CascadeAction.NONE:
            clause += f" ON UPDATE {foreign_key.on_update.value}"
        self._alter_table(table, clause)

    def drop_foreign_key(self, table: Table, foreign_key: ForeignKey) -> None:
        """Drop using the same name `create_foreign_key` would use."""
        self._alter_table(
            table,
            self.dialect.templates.drop_foreign_key.format(
                name=self._identifier(self.get_foreign_key_name(table, foreign_key))
            ),
        )

    # ---------- indexes ----------

    def create_index(self, table: Table, index: Index) -> None:
        self.sink.print(
            self.dialect.templates.create_index.format(
                unique="UNIQUE " if index.is_unique else "",
                name=self._identifier(self.get_index_name(table, index)),
                table=self._table_name(table),
                columns=self._name_list(index.columns),
            )
        )
        self.sink.print_end_of_statement()

    def drop_index(self, table: Table, index: Index) -> None:
        self.sink.print(
            self.dialect.templates.drop_index.format(
                name=self._identifier(self.get_index_name(table, index)),
                table=self._table_name(table),
            )
        )
        self.sink.print_end_of_statement()

    # ---------- columns ----------

    def add_column(self, table: Table, column: Column) -> None:
        self._alter_table(
            table,
            self.dialect.templates.add_column.format(definition=self._column_definition(column)),
        )

    def drop_column(self, table: Table, column: Column) -> None:
        self._alter_table(
            table, self.dialect.templates.drop_column.format(name=self._identifier(column.name))
        )

    def alter_column(self, table: Table, column: Column, previous: Column | None = None) -> None:
        """
        Redefine a column. Dialects with separate nullability/default clauses
        (e.g. PostgreSQL) get one extra statement per changed attribute.
        """
        templates = self.dialect.templates
        self._alter_table(
            table,
            templates.alter_column.format(
                name=self._identifier(column.name),
                type=self._native_type(column),
                definition=self._column_definition(column),
            ),
        )
        if templates.alter_column_nullability and (
            previous is None or previous.is_nullable != column.is_nullable
        ):
            self._alter_table(
                table,
                templates.alter_column_nullability.format(
                    name=self._identifier(column.name),
                    set_or_drop="DROP" if column.is_nullable else "SET",
                ),
            )
        if templates.alter_column_default and (
            previous is None or previous.default != column.default
        ):
            default_clause = (
                "DROP DEFAULT"
                if column.default is None
                else f"SET DEFAULT {self._default_literal(column)}"
            )
            self._alter_table(
                table,
                templates.alter_column_default.format(
                    name=self._identifier(column.name), default_clause=default_clause
                ),
            )

    # ---------- naming ----------

    def get_constraint_name(
        self,
        prefix: str | None,
        table: Table,
        constraint_type: str | None,
        suffix: str | Sequence[str] | None = None,
    ) -> str:
        """Deterministic, length-bounded constraint name for `table`."""
        return build_constraint_name(
            prefix, table.name, constraint_type, suffix, self.platform.max_identifier_length
        )

    def get_primary_key_name(self, table: Table) -> str:
        return build_primary_key_name(table.name, self.platform.max_identifier_length)

    def get_foreign_key_name(self, table: Table, foreign_key: ForeignKey) -> str:
        """Explicit name if set, else `<table>_fk__<columns>__<foreign table>__<foreign columns>`."""
        if foreign_key.name:
            return foreign_key.name
        return self._unique_name(
            table.foreign_keys,
            foreign_key,
            lambda fk: build_foreign_key_name(
                table.name,
                fk.local_columns,
                fk.foreign_table,
                fk.foreign_columns,
                self.platform.max_identifier_length,
            ),
        )

    def get_index_name(self, table: Table, index: Index) -> str:
        """Explicit name if set, else `<table>_uq__<columns>` / `<table>_ix__<columns>`."""
        if index.name:
            return index.name
        return self._unique_name(
            table.indexes,
            index,
            lambda ix: build_index_name(
                table.name, ix.columns, ix.is_unique, self.platform.max_identifier_length
            ),
        )

    def _unique_name(
        self,
        entries: Sequence[NamedT],
        entry: NamedT,
        generate: Callable[[NamedT], str],
    ) -> str:
        """
        Generated name of `entry` among one table's foreign keys or indexes.

        Explicit names are reserved first. Unnamed entries are then named in
        declared order; a generated name that is already taken gets an
        ordinal suffix (`__2`, `__3`, ...). An entry the table does not hold
        is named as if appended to it.
        """
        candidates = tuple(entries) if entry in entries else (*entries, entry)
        taken = {name_key(candidate.name) for candidate in candidates if candidate.name}
        names: dict[NamedT, str] = {}
        for candidate in candidates:
            if candidate.name or candidate in names:
                continue
            base = generate(candidate)
            name, ordinal = base, 1
            while name_key(name) in taken:
                ordinal += 1
                name = build_ordinal_name(base, ordinal, self.platform.max_identifier_length)
            taken.add(name_key(name))
            names[candidate] = name
        return names[entry]

    # ---------- helpers ----------

    def _generates_primary_key(self, primary_key_columns: Sequence[Column]) -> bool:
        if not primary_key_columns:
            return False
        return self.dialect.should_generate_primary_keys(tuple(primary_key_columns))

    def _alter_table(self, table: Table, clause: str) -> None:
        self.sink.print("ALTER TABLE ")
        self.sink.print_identifier(table.name)
        self.sink.print(" ")
        self.sink.print(clause)
        self.sink.print_end_of_statement()

    def _column_definition(self, column: Column) -> str:
        parts = [self._identifier(column.name), self._native_type(column)]
        if column.default is not None:
            parts.append(f"DEFAULT {self._default_literal(column)}")
        if column.is_auto_increment:
            if self.dialect.supports_auto_increment:
                parts.append(self.dialect.templates.auto_increment or "")
            else:
                LOGGER.warning(
                    "Dialect %s has no auto-increment clause; column %s is rendered without it",
                    self.dialect.name,
                    column.name,
                )
        if not column.is_nullable:
            parts.append("NOT NULL")
        return " ".join(parts)

    def _native_type(self, column: Column) -> str:
        return self.dialect.type_mapping.to_native(column.data_type)

    def _default_literal(self, column: Column) -> str:
        value = column.default or ""
        if column.data_type.logical_type.category in _QUOTED_CATEGORIES:
            return quote_sql_literal(value, self.dialect.quoting.value_quote_token)
        return value

    def _identifier(self, name: str) -> str:
        return self.platform.quote_identifier(name)

    def _table_name(self, table: Table) -> str:
        return self._identifier(table.name)

    def _name_list(self, names: Sequence[str]) -> str:
        return ", ".join(self._identifier(name) for name in names)

    def _column_list(self, columns: Sequence[Column]) -> str:
        return self._name_list([column.name for column in columns])
