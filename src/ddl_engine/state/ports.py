"""Ports and value types for reading a schema model from a live database.

Defines:
- Aspects of table metadata the reader visits (columns, primary key, ...)
- The connection protocol the reader and statement runner depend on
- Read filter and read result types
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol

from src.constants import DEFAULT_TABLE_TYPES
from src.ddl_engine.errors import MetadataReadError
from src.ddl_engine.models import Database

Row = Mapping[str, Any]


class Aspect(StrEnum):
    TABLES = "tables"
    TABLE = "table"
    COLUMNS = "columns"
    PRIMARY_KEY = "primary key"
    FOREIGN_KEYS = "foreign keys"
    INDEXES = "indexes"


class MetadataConnection(Protocol):
    """
    Port for anything that can run catalog queries and DDL statements.

    `query` takes SQL with `?` placeholders and returns rows keyed by
    lower-case column name. `execute` runs one statement without results.
    """

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[Row]: ...

    def execute(self, sql: str) -> None: ...


@dataclass(frozen=True, slots=True)
class TableFilter:
    """
    Which tables to read.

    schema_pattern / table_pattern are SQL LIKE patterns; None means the
    reader's default ('%'). `table_types` limits the catalog's table types.
    `catalog` keeps only tables of that catalog (database) when the listing
    reports one; None keeps every catalog.
    """

    schema_pattern: str | None = None
    table_pattern: str | None = None
    table_types: tuple[str, ...] = DEFAULT_TABLE_TYPES
    catalog: str | None = None


@dataclass(frozen=True, slots=True)
class ReadResult:
    """A (possibly partial) model plus the per-table errors collected while reading it."""

    database: Database
    errors: tuple[MetadataReadError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors
