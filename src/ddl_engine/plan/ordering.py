"""
Change ordering.

Changes are emitted phase by phase so that no statement refers to something
that is already gone or not yet there:

  1) DropForeignKey   2) DropIndex     3) DropPrimaryKey  4) DropTable
  5) DropColumn       6) CreateTable   7) AddColumn       8) AlterColumn
  9) AddPrimaryKey   10) AddIndex     11) AddForeignKey

Within a phase, input order is preserved (the differ produces changes in
desired-model table order). DropTable is additionally ordered so that a table
referencing another dropped table is dropped first.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from src.ddl_engine.errors import DependencyOrderError
from src.ddl_engine.models import name_key
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

PHASES: tuple[type[Change], ...] = (
    DropForeignKey,
    DropIndex,
    DropPrimaryKey,
    DropTable,
    DropColumn,
    CreateTable,
    AddColumn,
    AlterColumn,
    AddPrimaryKey,
    AddIndex,
    AddForeignKey,
)


def phase_of(change: Change) -> int:
    for position, change_type in enumerate(PHASES):
        if type(change) is change_type:
            return position
    raise TypeError(f"Unsupported change type: {type(change).__name__}")


def order_changes(changes: Iterable[Change]) -> tuple[Change, ...]:
    """Bucket changes by phase (stable) and dependency-order the DropTable bucket."""
    buckets: list[list[Change]] = [[] for _ in PHASES]
    for change in changes:
        buckets[phase_of(change)].append(change)

    drop_table_phase = PHASES.index(DropTable)
    buckets[drop_table_phase] = list(order_dropped_tables(buckets[drop_table_phase]))
    return tuple(change for bucket in buckets for change in bucket)


def order_dropped_tables(drops: Sequence[Change]) -> tuple[Change, ...]:
    """
    Order DropTable changes so that referencing tables are dropped before the
    tables they reference. Ties keep input order.

    Raises:
        DependencyOrderError: if the dropped tables reference each other in a cycle.
    """
    by_key = {name_key(drop.table_name): drop for drop in drops}
    # referenced table -> tables that must be dropped before it
    blockers: dict[str, set[str]] = {key: set() for key in by_key}
    for key, drop in by_key.items():
        for foreign_key in drop.table.foreign_keys:
            target = name_key(foreign_key.foreign_table)
            if target in by_key and target != key:
                blockers[target].add(key)

    ordered: list[Change] = []
    remaining = [name_key(drop.table_name) for drop in drops]
    while remaining:
        ready = next((key for key in remaining if not blockers[key]), None)
        if ready is None:
            cycle = [by_key[key].table_name for key in remaining]
            raise DependencyOrderError(
                f"Cannot order drops of tables with cyclic foreign keys: {', '.join(cycle)}",
                tables=cycle,
            )
        ordered.append(by_key[ready])
        remaining.remove(ready)
        for pending in blockers.values():
            pending.discard(ready)
    return tuple(ordered)
