"""
Schema model: immutable, vendor-neutral description of a database schema.

Conventions and semantics
-------------------------
- All entities are frozen dataclasses; sequences are stored as tuples.
- Name comparisons are case-insensitive unless a caller asks otherwise.
- `Table.primary_key` (optional):
    None           → primary key is the columns flagged `is_primary_key`, in declared order
    ("c1", "c2")   → explicit, ordered primary key
- Foreign key and index names are optional; builders derive deterministic
  names when they are absent.
- Construction validates invariants and raises `ValidationError`.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field, replace

from src.ddl_engine.errors import ValidationError
from src.ddl_engine.types import ColumnType
from src.enums import CascadeAction


def name_key(name: str, case_sensitive: bool = False) -> str:
    """Comparison key for an identifier."""
    return name if case_sensitive else name.lower()


def _names_match(left: str | None, right: str | None, case_sensitive: bool) -> bool:
    """Optional names are compatible when either side is unnamed or both are equal."""
    if left is None or right is None:
        return True
    return name_key(left, case_sensitive) == name_key(right, case_sensitive)


def _duplicates(names: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    duplicates: list[str] = []
    for name in names:
        key = name_key(name)
        if key in seen:
            duplicates.append(name)
        seen.add(key)
    return duplicates


# -----------------------------
# Columns / keys / indexes
# -----------------------------


@dataclass(frozen=True, slots=True)
class Column:
    """A table column."""

    name: str
    data_type: ColumnType
    is_nullable: bool = True
    default: str | None = None
    is_auto_increment: bool = False
    is_primary_key: bool = False
    description: str = ""

    def same_definition(self, other: Column) -> bool:
        """True when type, nullability, default and auto-increment are equal (name and PK flag ignored)."""
        return (
            self.data_type == other.data_type
            and self.is_nullable == other.is_nullable
            and self.default == other.default
            and self.is_auto_increment == other.is_auto_increment
        )


@dataclass(frozen=True, slots=True)
class Reference:
    """One column pair of a foreign key: local column → referenced column."""

    local_column: str
    foreign_column: str


@dataclass(frozen=True, slots=True)
class ForeignKey:
    """A foreign key from the owning table to `foreign_table`."""

    foreign_table: str
    references: tuple[Reference, ...]
    name: str | None = None
    on_delete: CascadeAction = CascadeAction.NONE
    on_update: CascadeAction = CascadeAction.NONE

    def __post_init__(self) -> None:
        object.__setattr__(self, "references", tuple(self.references))
        if not self.references:
            raise ValidationError(
                f"Foreign key {self.name or '<unnamed>'} to {self.foreign_table!r} has no column references"
            )

    @property
    def local_columns(self) -> tuple[str, ...]:
        return tuple(reference.local_column for reference in self.references)

    @property
    def foreign_columns(self) -> tuple[str, ...]:
        return tuple(reference.foreign_column for reference in self.references)

    def same_definition(self, other: ForeignKey, case_sensitive: bool = False) -> bool:
        """Equal target, ordered column pairs and referential actions (names ignored)."""

        def keys(values: Sequence[str]) -> tuple[str, ...]:
            return tuple(name_key(v, case_sensitive) for v in values)

        return (
            name_key(self.foreign_table, case_sensitive)
            == name_key(other.foreign_table, case_sensitive)
            and keys(self.local_columns) == keys(other.local_columns)
            and keys(self.foreign_columns) == keys(other.foreign_columns)
            and self.on_delete == other.on_delete
            and self.on_update == other.on_update
        )

    def matches(self, other: ForeignKey, case_sensitive: bool = False) -> bool:
        """Same definition and compatible names."""
        return self.same_definition(other, case_sensitive) and _names_match(
            self.name, other.name, case_sensitive
        )


@dataclass(frozen=True, slots=True)
class Index:
    """An index over ordered columns of the owning table."""

    columns: tuple[str, ...]
    is_unique: bool = False
    name: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))
        if not self.columns:
            raise ValidationError(f"Index {self.name or '<unnamed>'} has no columns")

    def same_definition(self, other: Index, case_sensitive: bool = False) -> bool:
        return self.is_unique == other.is_unique and tuple(
            name_key(c, case_sensitive) for c in self.columns
        ) == tuple(name_key(c, case_sensitive) for c in other.columns)

    def matches(self, other: Index, case_sensitive: bool = False) -> bool:
        """Same definition and compatible names."""
        return self.same_definition(other, case_sensitive) and _names_match(
            self.name, other.name, case_sensitive
        )


# -----------------------------
# Table
# -----------------------------


@dataclass(frozen=True, slots=True)
class Table:
    """A table: ordered columns, optional primary key, foreign keys and indexes."""

    name: str
    columns: tuple[Column, ...]
    primary_key: tuple[str, ...] | None = None
    foreign_keys: tuple[ForeignKey, ...] = ()
    indexes: tuple[Index, ...] = ()
    schema: str | None = None
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "foreign_keys", tuple(self.foreign_keys))
        object.__setattr__(self, "indexes", tuple(self.indexes))
        if self.primary_key is not None:
            object.__setattr__(self, "primary_key", tuple(self.primary_key))
        self._validate()

    def _validate(self) -> None:
        if not self.name:
            raise ValidationError("Table name must not be empty")

        duplicates = _duplicates(self.column_names)
        if duplicates:
            raise ValidationError(f"Table {self.name!r} has duplicate columns: {duplicates}")

        if self.primary_key is not None:
            missing = [c for c in self.primary_key if self.find_column(c) is None]
            if missing:
                raise ValidationError(
                    f"Primary key of table {self.name!r} references unknown columns: {missing}"
                )
            declared = {name_key(c) for c in self.primary_key}
            stray = [c.name for c in self.columns if c.is_primary_key and name_key(c.name) not in declared]
            if stray:
                raise ValidationError(
                    f"Columns {stray} of table {self.name!r} are flagged primary key "
                    "but missing from the declared primary key"
                )

        self._validate_unique_entries("index", self.indexes)
        self._validate_unique_entries("foreign key", self.foreign_keys)

        for index in self.indexes:
            missing = [c for c in index.columns if self.find_column(c) is None]
            if missing:
                raise ValidationError(
                    f"Index {index.name or '<unnamed>'} of table {self.name!r} references unknown columns: {missing}"
                )

        for foreign_key in self.foreign_keys:
            missing = [c for c in foreign_key.local_columns if self.find_column(c) is None]
            if missing:
                raise ValidationError(
                    f"Foreign key {foreign_key.name or '<unnamed>'} of table {self.name!r} "
                    f"references unknown local columns: {missing}"
                )

    def _validate_unique_entries(
        self, kind: str, entries: Sequence[Index] | Sequence[ForeignKey]
    ) -> None:
        """Explicit names are unique per kind; unnamed entries may not repeat a definition."""
        duplicates = _duplicates(entry.name for entry in entries if entry.name)
        if duplicates:
            raise ValidationError(f"Table {self.name!r} has duplicate {kind} names: {duplicates}")
        unnamed = [entry for entry in entries if not entry.name]
        for position, entry in enumerate(unnamed):
            if any(entry.same_definition(other) for other in unnamed[:position]):
                raise ValidationError(
                    f"Table {self.name!r} declares the same unnamed {kind} twice: {entry}"
                )

    # --------- Convenience properties ---------

    @property
    def column_names(self) -> tuple[str, ...]:
        """Column names in declared order."""
        return tuple(column.name for column in self.columns)

    @property
    def primary_key_columns(self) -> tuple[Column, ...]:
        """Primary-key columns in key order (empty tuple if none)."""
        if self.primary_key is not None:
            return tuple(self._require_column(name) for name in self.primary_key)
        return tuple(column for column in self.columns if column.is_primary_key)

    @property
    def primary_key_column_names(self) -> tuple[str, ...]:
        return tuple(column.name for column in self.primary_key_columns)

    @property
    def auto_increment_columns(self) -> tuple[Column, ...]:
        return tuple(column for column in self.columns if column.is_auto_increment)

    # --------- Structural queries ---------

    def find_column(self, name: str, case_sensitive: bool = False) -> Column | None:
        key = name_key(name, case_sensitive)
        for column in self.columns:
            if name_key(column.name, case_sensitive) == key:
                return column
        return None

    def find_index(self, index: Index, case_sensitive: bool = False) -> Index | None:
        """Return this table's index matching `index` (definition + compatible name)."""
        return next((own for own in self.indexes if own.matches(index, case_sensitive)), None)

    def find_foreign_key(
        self, foreign_key: ForeignKey, case_sensitive: bool = False
    ) -> ForeignKey | None:
        """Return this table's foreign key matching `foreign_key` (definition + compatible name)."""
        return next(
            (own for own in self.foreign_keys if own.matches(foreign_key, case_sensitive)), None
        )

    def _require_column(self, name: str) -> Column:
        column = self.find_column(name)
        if column is None:
            raise ValidationError(f"Table {self.name!r} has no column {name!r}")
        return column

    # --------- Copy-with helpers (used by change application) ---------

    def with_columns(self, columns: Iterable[Column]) -> Table:
        return replace(self, columns=tuple(columns))

    def with_primary_key(self, column_names: Sequence[str] | None) -> Table:
        """Replace the primary key; PK flags follow the new key."""
        keys = {name_key(c) for c in column_names or ()}
        columns = tuple(replace(c, is_primary_key=name_key(c.name) in keys) for c in self.columns)
        primary_key = tuple(column_names) if column_names else None
        return replace(self, columns=columns, primary_key=primary_key)

    def with_foreign_keys(self, foreign_keys: Iterable[ForeignKey]) -> Table:
        return replace(self, foreign_keys=tuple(foreign_keys))

    def with_indexes(self, indexes: Iterable[Index]) -> Table:
        return replace(self, indexes=tuple(indexes))


# -----------------------------
# Database
# -----------------------------


@dataclass(frozen=True, slots=True)
class Database:
    """A named, ordered collection of tables."""

    name: str
    tables: tuple[Table, ...] = field(default_factory=tuple)
    version: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tables", tuple(self.tables))
        self._validate()

    def _validate(self) -> None:
        duplicates = _duplicates(table.name for table in self.tables)
        if duplicates:
            raise ValidationError(f"Database {self.name!r} has duplicate tables: {duplicates}")

        for table in self.tables:
            for foreign_key in table.foreign_keys:
                self._validate_foreign_key(table, foreign_key)

    def _validate_foreign_key(self, table: Table, foreign_key: ForeignKey) -> None:
        label = foreign_key.name or "<unnamed>"
        target = self.find_table(foreign_key.foreign_table)
        if target is None:
            raise ValidationError(
                f"Foreign key {label} of table {table.name!r} references unknown table "
                f"{foreign_key.foreign_table!r}"
            )
        missing = [c for c in foreign_key.foreign_columns if target.find_column(c) is None]
        if missing:
            raise ValidationError(
                f"Foreign key {label} of table {table.name!r} references unknown columns "
                f"{missing} of table {target.name!r}"
            )

    def __iter__(self) -> Iterator[Table]:
        return iter(self.tables)

    @property
    def table_names(self) -> tuple[str, ...]:
        return tuple(table.name for table in self.tables)

    # --------- Structural queries ---------

    def find_table(self, name: str, case_sensitive: bool = False) -> Table | None:
        key = name_key(name, case_sensitive)
        for table in self.tables:
            if name_key(table.name, case_sensitive) == key:
                return table
        return None

    def resolve_foreign_key(
        self, table: Table, foreign_key: ForeignKey
    ) -> tuple[Table, tuple[Column, ...]]:
        """Return the referenced table and referenced columns (in reference order)."""
        target = self.find_table(foreign_key.foreign_table)
        if target is None:
            raise ValidationError(
                f"Table {table.name!r} references unknown table {foreign_key.foreign_table!r}"
            )
        return target, tuple(target._require_column(c) for c in foreign_key.foreign_columns)

    def referencing_foreign_keys(self, table_name: str) -> list[tuple[Table, ForeignKey]]:
        """All (owning table, foreign key) pairs whose target is `table_name`."""
        key = name_key(table_name)
        return [
            (table, foreign_key)
            for table in self.tables
            for foreign_key in table.foreign_keys
            if name_key(foreign_key.foreign_table) == key
        ]

    # --------- Copy-with helpers ---------

    def with_tables(self, tables: Iterable[Table]) -> Database:
        return replace(self, tables=tuple(tables))

    def replace_table(self, table: Table) -> Database:
        key = name_key(table.name)
        return self.with_tables(table if name_key(t.name) == key else t for t in self.tables)


# -----------------------------
# Structural equality
# -----------------------------


def _match_all(left: Sequence, right: Sequence, matches) -> bool:
    """True when every item of `left` pairs with a distinct item of `right`."""
    if len(left) != len(right):
        return False
    remaining = list(right)
    for item in left:
        partner = next((other for other in remaining if matches(item, other)), None)
        if partner is None:
            return False
        remaining.remove(partner)
    return True


def tables_structurally_equal(left: Table, right: Table, case_sensitive: bool = False) -> bool:
    """Compare two tables ignoring column position and unset constraint names."""
    if name_key(left.name, case_sensitive) != name_key(right.name, case_sensitive):
        return False

    if {name_key(c, case_sensitive) for c in left.column_names} != {
        name_key(c, case_sensitive) for c in right.column_names
    }:
        return False
    for column in left.columns:
        other = right.find_column(column.name, case_sensitive)
        if other is None or not column.same_definition(other):
            return False

    if tuple(name_key(c, case_sensitive) for c in left.primary_key_column_names) != tuple(
        name_key(c, case_sensitive) for c in right.primary_key_column_names
    ):
        return False

    return _match_all(
        left.foreign_keys, right.foreign_keys, lambda a, b: a.matches(b, case_sensitive)
    ) and _match_all(left.indexes, right.indexes, lambda a, b: a.matches(b, case_sensitive))


def structurally_equal(left: Database, right: Database, case_sensitive: bool = False) -> bool:
    """Two models describe the same schema (table order and column position ignored)."""
    if len(left.tables) != len(right.tables):
        return False
    for table in left.tables:
        other = right.find_table(table.name, case_sensitive)
        if other is None or not tables_structurally_equal(table, other, case_sensitive):
            return False
    return True
