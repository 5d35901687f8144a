"""
Read a live database's metadata into a `Database` model.

Flow
----
1) list tables (catalog query filtered by schema/table pattern and table type)
2) per table: exclusion check → columns → primary key → foreign keys → indexes
3) drop vendor-created indexes that only back the PK / FKs (when the dialect reports them)
4) drop foreign keys whose target was not read, sort tables, build the Database

A failure while reading one table is recorded as a `MetadataReadError` and the
table is skipped; siblings are still read. Failing to list tables is fatal.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from src.ddl_engine.dialects.base import Dialect
from src.ddl_engine.errors import MetadataReadError
from src.ddl_engine.models import Column, Database, ForeignKey, Index, Reference, Table, name_key
from src.ddl_engine.state.ports import Aspect, MetadataConnection, ReadResult, Row, TableFilter
from src.ddl_engine.types import LogicalType
from src.enums import CascadeAction
from src.logger import LOGGER

T = TypeVar("T")

_TRUE_FLAGS = frozenset({"YES", "Y", "TRUE", "1"})
_TABLE_TYPE_ALIASES = {"BASE TABLE": "TABLE"}
_CASCADE_BY_RULE = {
    "CASCADE": CascadeAction.CASCADE,
    "SET NULL": CascadeAction.SET_NULL,
    "SET DEFAULT": CascadeAction.SET_DEFAULT,
    "RESTRICT": CascadeAction.RESTRICT,
}


@dataclass(frozen=True, slots=True)
class TableEntry:
    """One row of the table listing."""

    name: str
    schema: str | None
    table_type: str
    description: str = ""


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().upper() in _TRUE_FLAGS


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def _normalize_default(raw: Any) -> str | None:
    """
    Turn a catalog default expression into the model's unquoted default value.

    'abc'::character varying → abc,  'it''s' → it's,  NULL → None
    """
    if raw is None:
        return None
    text = str(raw).strip()
    if not text or text.upper() == "NULL":
        return None
    if "::" in text:
        text = text.split("::", 1)[0].strip()
    if len(text) >= 2 and text[0] == "'" and text[-1] == "'":
        text = text[1:-1].replace("''", "'")
    return text


def _cascade_action(rule: Any) -> CascadeAction:
    if rule is None:
        return CascadeAction.NONE
    return _CASCADE_BY_RULE.get(str(rule).strip().upper(), CascadeAction.NONE)


def _ordered(rows: list[Row]) -> list[Row]:
    return sorted(rows, key=lambda row: row.get("ordinal_position") or 0)


class ModelReader:
    """Read tables, columns, keys and indexes through a dialect's catalog queries."""

    def __init__(self, dialect: Dialect) -> None:
        self.dialect = dialect

    # ---------- public ----------

    def read(
        self,
        connection: MetadataConnection,
        name: str = "database",
        table_filter: TableFilter | None = None,
    ) -> ReadResult:
        """Read every matching table into a Database; per-table failures become errors."""
        tables, errors = self.read_tables(connection, table_filter or TableFilter())
        tables = self._drop_dangling_foreign_keys(tables)
        LOGGER.info(
            "Read %d table(s) from %r using dialect %s (%d error(s))",
            len(tables),
            name,
            self.dialect.name,
            len(errors),
        )
        return ReadResult(database=Database(name=name, tables=tuple(tables)), errors=tuple(errors))

    def read_tables(
        self, connection: MetadataConnection, table_filter: TableFilter
    ) -> tuple[list[Table], list[MetadataReadError]]:
        """Read all listed tables, sorted by name case-insensitively."""
        tables: list[Table] = []
        errors: list[MetadataReadError] = []
        for entry in self.list_tables(connection, table_filter):
            try:
                table = self.read_table(connection, entry)
            except MetadataReadError as error:
                LOGGER.warning(str(error))
                errors.append(error)
                continue
            if table is not None:
                tables.append(table)
        tables.sort(key=lambda table: table.name.lower())
        return tables, errors

    def list_tables(
        self, connection: MetadataConnection, table_filter: TableFilter
    ) -> list[TableEntry]:
        """Run the table listing query and keep the wanted table types outside system schemas."""
        params = (table_filter.schema_pattern or "%", table_filter.table_pattern or "%")
        try:
            rows = connection.query(self.dialect.catalog_queries.list_tables, params)
        except Exception as error:
            raise MetadataReadError.from_exception(None, Aspect.TABLES, error) from error

        wanted = {t.upper() for t in table_filter.table_types}
        system_schemas = {s.upper() for s in self.dialect.system_schemas}
        entries: list[TableEntry] = []
        for row in rows:
            table_type = str(row.get("table_type") or "TABLE").upper()
            table_type = _TABLE_TYPE_ALIASES.get(table_type, table_type)
            schema = row.get("table_schema")
            if wanted and table_type not in wanted:
                continue
            # catalogs that do not report a catalog column are not filtered by it
            catalog = row.get("table_catalog")
            if (
                table_filter.catalog
                and catalog is not None
                and str(catalog).upper() != table_filter.catalog.upper()
            ):
                continue
            if schema is not None and str(schema).upper() in system_schemas:
                continue
            entries.append(
                TableEntry(
                    name=str(row["table_name"]),
                    schema=None if schema is None else str(schema),
                    table_type=table_type,
                    description=str(row.get("remarks") or ""),
                )
            )
        return entries

    def read_table(self, connection: MetadataConnection, entry: TableEntry) -> Table | None:
        """Read one table; None when the dialect excludes it (e.g. recycle-bin entries)."""
        if not entry.name:
            return None
        if self._attempt(entry.name, Aspect.TABLE, lambda: self.is_table_excluded(connection, entry.name)):
            LOGGER.debug("Skipping excluded table %s", entry.name)
            return None

        columns = self._attempt(
            entry.name, Aspect.COLUMNS, lambda: self.read_columns(connection, entry)
        )
        primary_key = self._attempt(
            entry.name, Aspect.PRIMARY_KEY, lambda: self.read_primary_key(connection, entry)
        )
        foreign_keys = self._attempt(
            entry.name, Aspect.FOREIGN_KEYS, lambda: self.read_foreign_keys(connection, entry)
        )
        indexes = self._attempt(
            entry.name, Aspect.INDEXES, lambda: self.read_indexes(connection, entry)
        )

        def build() -> Table:
            table = Table(
                name=entry.name,
                columns=columns,
                foreign_keys=foreign_keys,
                indexes=indexes,
                schema=entry.schema,
                description=entry.description,
            ).with_primary_key(primary_key or None)
            if self.dialect.system_indexes_returned:
                table = self.remove_system_indexes(table)
            return table

        return self._attempt(entry.name, Aspect.TABLE, build)

    def is_table_excluded(self, connection: MetadataConnection, table_name: str) -> bool:
        return self.dialect.is_table_excluded(connection, table_name)

    # ---------- aspects ----------

    def read_columns(self, connection: MetadataConnection, entry: TableEntry) -> tuple[Column, ...]:
        rows = connection.query(self.dialect.catalog_queries.list_columns, (entry.schema, entry.name))
        return tuple(self._column_from_row(entry.name, row) for row in _ordered(rows))

    def read_primary_key(self, connection: MetadataConnection, entry: TableEntry) -> tuple[str, ...]:
        rows = connection.query(self.dialect.catalog_queries.primary_key, (entry.schema, entry.name))
        return tuple(str(row["column_name"]) for row in _ordered(rows))

    def read_foreign_keys(
        self, connection: MetadataConnection, entry: TableEntry
    ) -> tuple[ForeignKey, ...]:
        rows = connection.query(self.dialect.catalog_queries.foreign_keys, (entry.schema, entry.name))
        grouped: dict[str, list[Row]] = {}
        for row in rows:
            grouped.setdefault(str(row["constraint_name"]), []).append(row)

        foreign_keys: list[ForeignKey] = []
        for constraint_name, members in grouped.items():
            members = _ordered(members)
            first = members[0]
            foreign_keys.append(
                ForeignKey(
                    foreign_table=str(first["foreign_table_name"]),
                    references=tuple(
                        Reference(str(m["column_name"]), str(m["foreign_column_name"]))
                        for m in members
                    ),
                    name=constraint_name,
                    on_delete=_cascade_action(first.get("delete_rule")),
                    on_update=_cascade_action(first.get("update_rule")),
                )
            )
        return tuple(foreign_keys)

    def read_indexes(self, connection: MetadataConnection, entry: TableEntry) -> tuple[Index, ...]:
        sql = self.dialect.catalog_queries.indexes
        if sql is None:
            return ()
        rows = connection.query(sql, (entry.schema, entry.name))
        grouped: dict[str, list[Row]] = {}
        for row in rows:
            grouped.setdefault(str(row["index_name"]), []).append(row)
        return tuple(
            Index(
                columns=tuple(str(m["column_name"]) for m in _ordered(members)),
                is_unique=not _flag(members[0].get("non_unique")),
                name=index_name,
            )
            for index_name, members in grouped.items()
        )

    def remove_system_indexes(self, table: Table) -> Table:
        """Drop indexes the database created itself to back the primary key or a foreign key."""
        primary_key = tuple(name_key(c) for c in table.primary_key_column_names)
        kept: list[Index] = []
        for index in table.indexes:
            columns = tuple(name_key(c) for c in index.columns)
            if index.is_unique and primary_key and columns == primary_key:
                LOGGER.debug("Removing primary key index %s of %s", index.name, table.name)
                continue
            if any(
                columns == tuple(name_key(c) for c in fk.local_columns)
                and fk.name is not None
                and index.name is not None
                and name_key(fk.name) == name_key(index.name)
                for fk in table.foreign_keys
            ):
                LOGGER.debug("Removing foreign key index %s of %s", index.name, table.name)
                continue
            kept.append(index)
        return table.with_indexes(kept)

    # ---------- helpers ----------

    def _column_from_row(self, table_name: str, row: Row) -> Column:
        native_type = str(row["data_type"])
        data_type = self.dialect.column_type_from_catalog(
            self.dialect.type_mapping,
            native_type,
            _optional_int(row.get("size")),
            _optional_int(row.get("precision")),
            _optional_int(row.get("scale")),
        )
        if data_type.logical_type is LogicalType.OTHER:
            LOGGER.warning(
                "Unknown native type %r for column %s.%s; using OTHER",
                native_type,
                table_name,
                row["column_name"],
            )

        default = _normalize_default(row.get("column_default"))
        is_auto_increment = _flag(row.get("is_auto_increment"))
        if default is not None and default.lower().startswith("nextval("):
            is_auto_increment, default = True, None

        return Column(
            name=str(row["column_name"]),
            data_type=data_type,
            is_nullable=_flag(row.get("is_nullable")),
            default=default,
            is_auto_increment=is_auto_increment,
            description=str(row.get("remarks") or ""),
        )

    @staticmethod
    def _attempt(table_name: str, aspect: Aspect, read: Callable[[], T]) -> T:
        try:
            return read()
        except MetadataReadError:
            raise
        except Exception as error:
            raise MetadataReadError.from_exception(table_name, aspect, error) from error

    @staticmethod
    def _drop_dangling_foreign_keys(tables: list[Table]) -> list[Table]:
        """Drop foreign keys whose target table (or target columns) was not read."""
        by_name = {name_key(table.name): table for table in tables}
        result: list[Table] = []
        for table in tables:
            kept: list[ForeignKey] = []
            for foreign_key in table.foreign_keys:
                target = by_name.get(name_key(foreign_key.foreign_table))
                if target is None or any(
                    target.find_column(c) is None for c in foreign_key.foreign_columns
                ):
                    LOGGER.warning(
                        "Dropping foreign key %s of %s: target %s was not read",
                        foreign_key.name,
                        table.name,
                        foreign_key.foreign_table,
                    )
                    continue
                kept.append(foreign_key)
            result.append(table if len(kept) == len(table.foreign_keys) else table.with_foreign_keys(kept))
        return result
