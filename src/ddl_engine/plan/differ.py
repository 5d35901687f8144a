"""
Differ: compute the change-set that turns a current model into a desired one.

Scope
-----
- Tables only in desired → CreateTable (with PK and indexes) + AddForeignKey per FK
- Tables only in current → DropTable
- Tables in both → column, primary key, foreign key and index changes

Matching
--------
- Tables and columns match by name (case-insensitive unless asked otherwise).
- Foreign keys and indexes match by definition and compatible name: an
  unnamed entry matches a named one with the same definition. A changed
  definition is a drop plus an add.
- A different primary-key column sequence is a drop plus an add.

Ordering is delegated to `plan.ordering.order_changes`.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import replace
from typing import TYPE_CHECKING

from src.ddl_engine.models import Column, Database, Table, name_key
from src.ddl_engine.plan.changes import (
    AddColumn,
    AddForeignKey,
    AddIndex,
    AddPrimaryKey,
    AlterColumn,
    Change,
    ChangeSet,
    CreateTable,
    DropColumn,
    DropForeignKey,
    DropIndex,
    DropPrimaryKey,
    DropTable,
)
from src.ddl_engine.plan.ordering import order_changes
from src.logger import LOGGER

if TYPE_CHECKING:
    from src.ddl_engine.dialects.base import TypeMapping


class Differ:
    """
    Compare two Database models and emit an ordered ChangeSet.

    type_mapping:
        When given, column types are compared as the dialect reports them back
        (e.g. an unsized VARCHAR is compared with its default size).
    """

    def __init__(
        self, case_sensitive: bool = False, type_mapping: TypeMapping | None = None
    ) -> None:
        self.case_sensitive = case_sensitive
        self.type_mapping = type_mapping

    def diff(self, current: Database, desired: Database) -> ChangeSet:
        changes: list[Change] = []
        for current_table, desired_table in self._pair_tables(current, desired):
            if current_table is None and desired_table is not None:
                changes.extend(self._create_table(desired_table))
            elif desired_table is None and current_table is not None:
                changes.append(DropTable(current_table))
            elif current_table is not None and desired_table is not None:
                changes.extend(self._diff_table(current_table, desired_table))

        change_set = ChangeSet(order_changes(changes))
        LOGGER.info(
            "Computed %d change(s) between %r and %r", len(change_set), current.name, desired.name
        )
        return change_set

    # ---------- tables ----------

    def _pair_tables(
        self, current: Database, desired: Database
    ) -> Iterator[tuple[Table | None, Table | None]]:
        """Yield (current, desired) pairs: desired order first, then current-only tables."""
        for desired_table in desired.tables:
            yield current.find_table(desired_table.name, self.case_sensitive), desired_table
        for current_table in current.tables:
            if desired.find_table(current_table.name, self.case_sensitive) is None:
                yield current_table, None

    def _create_table(self, desired: Table) -> list[Change]:
        changes: list[Change] = [CreateTable(desired.with_foreign_keys(()))]
        changes.extend(AddForeignKey(desired, foreign_key) for foreign_key in desired.foreign_keys)
        return changes

    def _diff_table(self, current: Table, desired: Table) -> list[Change]:
        return [
            *self._diff_foreign_keys(current, desired),
            *self._diff_indexes(current, desired),
            *self._diff_primary_key(current, desired),
            *self._diff_columns(current, desired),
        ]

    # ---------- parts ----------

    def _diff_columns(self, current: Table, desired: Table) -> list[Change]:
        changes: list[Change] = []
        for column in current.columns:
            if desired.find_column(column.name, self.case_sensitive) is None:
                changes.append(DropColumn(current, column))
        for column in desired.columns:
            existing = current.find_column(column.name, self.case_sensitive)
            if existing is None:
                changes.append(AddColumn(desired, column))
            elif not self._same_column(existing, column):
                changes.append(AlterColumn(desired, column, previous=existing))
        return changes

    def _diff_primary_key(self, current: Table, desired: Table) -> list[Change]:
        current_key = self._keys(current.primary_key_column_names)
        desired_key = self._keys(desired.primary_key_column_names)
        if current_key == desired_key:
            return []
        changes: list[Change] = []
        if current_key:
            changes.append(DropPrimaryKey(current))
        if desired_key:
            changes.append(AddPrimaryKey(desired, desired.primary_key_columns))
        return changes

    def _diff_foreign_keys(self, current: Table, desired: Table) -> list[Change]:
        changes: list[Change] = [
            DropForeignKey(current, foreign_key)
            for foreign_key in current.foreign_keys
            if desired.find_foreign_key(foreign_key, self.case_sensitive) is None
        ]
        changes.extend(
            AddForeignKey(desired, foreign_key)
            for foreign_key in desired.foreign_keys
            if current.find_foreign_key(foreign_key, self.case_sensitive) is None
        )
        return changes

    def _diff_indexes(self, current: Table, desired: Table) -> list[Change]:
        changes: list[Change] = [
            DropIndex(current, index)
            for index in current.indexes
            if desired.find_index(index, self.case_sensitive) is None
        ]
        changes.extend(
            AddIndex(desired, index)
            for index in desired.indexes
            if current.find_index(index, self.case_sensitive) is None
        )
        return changes

    def _keys(self, names: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(name_key(name, self.case_sensitive) for name in names)

    def _same_column(self, current: Column, desired: Column) -> bool:
        if self.type_mapping is None:
            return current.same_definition(desired)
        normalize = self.type_mapping.normalize
        return replace(current, data_type=normalize(current.data_type)).same_definition(
            replace(desired, data_type=normalize(desired.data_type))
        )
