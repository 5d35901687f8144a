"""
Change operations: immutable, declarative schema changes targeting one table.

Conventions
-----------
- Every change carries the `table` it applies to, as that table looks in the
  model the change was derived from (current model for drops, desired model
  for creates/adds). Builders use it for naming and rendering.
- Verbs: Create*/Drop* for whole tables, Add*/Drop* for parts of a table,
  Alter* for in-place column redefinition.
- `apply(database)` returns a new Database with the change applied; inputs are
  never mutated.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, replace

from src.ddl_engine.errors import ValidationError
from src.ddl_engine.models import Column, Database, ForeignKey, Index, Table, name_key

# ---------- base ----------


@dataclass(frozen=True)
class Change:
    """Base change tied to a single table."""

    table: Table

    @property
    def table_name(self) -> str:
        return self.table.name

    def apply(self, database: Database) -> Database:
        raise NotImplementedError

    def describe(self) -> str:
        return f"{type(self).__name__}({self.table_name})"

    def _target(self, database: Database) -> Table:
        table = database.find_table(self.table_name)
        if table is None:
            raise ValidationError(f"{self.describe()}: table {self.table_name!r} does not exist")
        return table


# ---------- tables ----------


@dataclass(frozen=True)
class CreateTable(Change):
    """CREATE TABLE with columns, primary key and indexes. Foreign keys are added separately."""

    def apply(self, database: Database) -> Database:
        return database.with_tables((*database.tables, self.table))


@dataclass(frozen=True)
class DropTable(Change):
    """DROP TABLE."""

    def apply(self, database: Database) -> Database:
        key = name_key(self.table_name)
        return database.with_tables(t for t in database.tables if name_key(t.name) != key)


# ---------- columns ----------


@dataclass(frozen=True)
class AddColumn(Change):
    """Append a column to an existing table."""

    column: Column

    def apply(self, database: Database) -> Database:
        target = self._target(database)
        column = replace(self.column, is_primary_key=False)
        return database.replace_table(target.with_columns((*target.columns, column)))

    def describe(self) -> str:
        return f"AddColumn({self.table_name}.{self.column.name})"


@dataclass(frozen=True)
class DropColumn(Change):
    """Drop a column by name."""

    column: Column

    def apply(self, database: Database) -> Database:
        target = self._target(database)
        key = name_key(self.column.name)
        return database.replace_table(
            target.with_columns(c for c in target.columns if name_key(c.name) != key)
        )

    def describe(self) -> str:
        return f"DropColumn({self.table_name}.{self.column.name})"


@dataclass(frozen=True)
class AlterColumn(Change):
    """
    Redefine a column in place (type, nullability, default, auto-increment).

    `previous` is the column as it currently is; renderers may use it to emit
    only the parts that changed.
    """

    column: Column
    previous: Column

    def apply(self, database: Database) -> Database:
        target = self._target(database)
        key = name_key(self.column.name)
        columns = tuple(
            replace(self.column, name=c.name, is_primary_key=c.is_primary_key)
            if name_key(c.name) == key
            else c
            for c in target.columns
        )
        return database.replace_table(target.with_columns(columns))

    def describe(self) -> str:
        return f"AlterColumn({self.table_name}.{self.column.name})"


# ---------- primary keys ----------


@dataclass(frozen=True)
class AddPrimaryKey(Change):
    """Add a primary key over ordered columns."""

    columns: tuple[Column, ...]

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    def apply(self, database: Database) -> Database:
        target = self._target(database)
        return database.replace_table(target.with_primary_key(self.column_names))


@dataclass(frozen=True)
class DropPrimaryKey(Change):
    """Drop the table's primary key."""

    def apply(self, database: Database) -> Database:
        target = self._target(database)
        return database.replace_table(target.with_primary_key(None))


# ---------- foreign keys ----------


@dataclass(frozen=True)
class AddForeignKey(Change):
    """Add a foreign key."""

    foreign_key: ForeignKey

    def apply(self, database: Database) -> Database:
        target = self._target(database)
        return database.replace_table(
            target.with_foreign_keys((*target.foreign_keys, self.foreign_key))
        )

    def describe(self) -> str:
        return f"AddForeignKey({self.table_name}.{self.foreign_key.name or self.foreign_key.foreign_table})"


@dataclass(frozen=True)
class DropForeignKey(Change):
    """Drop a foreign key."""

    foreign_key: ForeignKey

    def apply(self, database: Database) -> Database:
        target = self._target(database)
        own = target.find_foreign_key(self.foreign_key)
        return database.replace_table(
            target.with_foreign_keys(fk for fk in target.foreign_keys if fk is not own)
        )

    def describe(self) -> str:
        return f"DropForeignKey({self.table_name}.{self.foreign_key.name or self.foreign_key.foreign_table})"


# ---------- indexes ----------


@dataclass(frozen=True)
class AddIndex(Change):
    """Create an index."""

    index: Index

    def apply(self, database: Database) -> Database:
        target = self._target(database)
        return database.replace_table(target.with_indexes((*target.indexes, self.index)))

    def describe(self) -> str:
        label = self.index.name or ",".join(self.index.columns)
        return f"AddIndex({self.table_name}.{label})"


@dataclass(frozen=True)
class DropIndex(Change):
    """Drop an index."""

    index: Index

    def apply(self, database: Database) -> Database:
        target = self._target(database)
        own = target.find_index(self.index)
        return database.replace_table(
            target.with_indexes(i for i in target.indexes if i is not own)
        )

    def describe(self) -> str:
        label = self.index.name or ",".join(self.index.columns)
        return f"DropIndex({self.table_name}.{label})"


# ---------- change-set ----------


@dataclass(frozen=True)
class ChangeSet:
    """An ordered, render-ready sequence of changes."""

    changes: tuple[Change, ...] = ()

    def __iter__(self) -> Iterator[Change]:
        return iter(self.changes)

    def __len__(self) -> int:
        return len(self.changes)

    def __bool__(self) -> bool:
        return bool(self.changes)

    def describe(self) -> list[str]:
        return [change.describe() for change in self.changes]


def apply_changes(database: Database, changes: Iterable[Change]) -> Database:
    """Apply changes in order; each intermediate model is validated."""
    for change in changes:
        database = change.apply(database)
    return database
