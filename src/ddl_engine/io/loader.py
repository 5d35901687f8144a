"""
Load and dump schema models as JSON documents.

Document shape
--------------
{
  "name": "shop",
  "version": "1",                      # optional
  "tables": [
    {
      "name": "USERS",
      "schema": null,                  # optional
      "description": "",               # optional
      "columns": [
        {"name": "id", "type": "INTEGER", "nullable": false,
         "primary_key": true, "auto_increment": true, "default": null}
      ],
      "primary_key": ["id"],           # optional; else flagged columns
      "foreign_keys": [
        {"name": "fk_user", "foreign_table": "USERS",
         "references": [{"local": "user_id", "foreign": "id"}],
         "on_delete": "CASCADE", "on_update": "NONE"}
      ],
      "indexes": [{"name": "idx_email", "columns": ["email"], "unique": true}]
    }
  ]
}
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from src.ddl_engine.errors import ValidationError
from src.ddl_engine.io.sources import FileSource
from src.ddl_engine.models import Column, Database, ForeignKey, Index, Reference, Table
from src.ddl_engine.types import ColumnType
from src.enums import CascadeAction
from src.logger import LOGGER

# ---------- dict → model ----------


def _cascade(value: Any) -> CascadeAction:
    if value is None or str(value).upper() == "NO ACTION":
        return CascadeAction.NONE
    try:
        return CascadeAction(str(value).upper().replace("_", " "))
    except ValueError:
        raise ValidationError(f"Unknown referential action {value!r}") from None


def column_from_dict(data: Mapping[str, Any]) -> Column:
    default = data.get("default")
    return Column(
        name=data["name"],
        data_type=ColumnType.parse(data["type"]),
        is_nullable=bool(data.get("nullable", True)),
        default=None if default is None else str(default),
        is_auto_increment=bool(data.get("auto_increment", False)),
        is_primary_key=bool(data.get("primary_key", False)),
        description=data.get("description", ""),
    )


def foreign_key_from_dict(data: Mapping[str, Any]) -> ForeignKey:
    return ForeignKey(
        foreign_table=data["foreign_table"],
        references=tuple(
            Reference(reference["local"], reference["foreign"])
            for reference in data.get("references", ())
        ),
        name=data.get("name"),
        on_delete=_cascade(data.get("on_delete")),
        on_update=_cascade(data.get("on_update")),
    )


def index_from_dict(data: Mapping[str, Any]) -> Index:
    return Index(
        columns=tuple(data["columns"]),
        is_unique=bool(data.get("unique", False)),
        name=data.get("name"),
    )


def table_from_dict(data: Mapping[str, Any]) -> Table:
    primary_key = data.get("primary_key")
    return Table(
        name=data["name"],
        columns=tuple(column_from_dict(c) for c in data.get("columns", ())),
        primary_key=None if primary_key is None else tuple(primary_key),
        foreign_keys=tuple(foreign_key_from_dict(fk) for fk in data.get("foreign_keys", ())),
        indexes=tuple(index_from_dict(i) for i in data.get("indexes", ())),
        schema=data.get("schema"),
        description=data.get("description", ""),
    )


def database_from_dict(data: Mapping[str, Any]) -> Database:
    """Build a Database from a parsed document; missing keys raise ValidationError."""
    try:
        return Database(
            name=data["name"],
            tables=tuple(table_from_dict(t) for t in data.get("tables", ())),
            version=data.get("version"),
        )
    except KeyError as error:
        raise ValidationError(f"Schema document is missing required key {error.args[0]!r}") from None


# ---------- model → dict ----------


def column_to_dict(column: Column) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": column.name,
        "type": column.data_type.format(),
        "nullable": column.is_nullable,
    }
    if column.is_primary_key:
        data["primary_key"] = True
    if column.is_auto_increment:
        data["auto_increment"] = True
    if column.default is not None:
        data["default"] = column.default
    if column.description:
        data["description"] = column.description
    return data


def table_to_dict(table: Table) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": table.name,
        "columns": [column_to_dict(c) for c in table.columns],
    }
    if table.schema:
        data["schema"] = table.schema
    if table.description:
        data["description"] = table.description
    if table.primary_key is not None:
        data["primary_key"] = list(table.primary_key)
    if table.foreign_keys:
        data["foreign_keys"] = [
            {
                "name": fk.name,
                "foreign_table": fk.foreign_table,
                "references": [
                    {"local": r.local_column, "foreign": r.foreign_column} for r in fk.references
                ],
                "on_delete": fk.on_delete.value,
                "on_update": fk.on_update.value,
            }
            for fk in table.foreign_keys
        ]
    if table.indexes:
        data["indexes"] = [
            {"name": i.name, "columns": list(i.columns), "unique": i.is_unique}
            for i in table.indexes
        ]
    return data


def database_to_dict(database: Database) -> dict[str, Any]:
    data: dict[str, Any] = {"name": database.name}
    if database.version is not None:
        data["version"] = database.version
    data["tables"] = [table_to_dict(t) for t in database.tables]
    return data


# ---------- files ----------


def load_database(path: str | Path) -> Database:
    path = Path(path)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise ValidationError(f"{path}: invalid JSON ({error.msg} at line {error.lineno})") from error
    LOGGER.debug("Loaded schema document %s", path)
    return database_from_dict(document)


def dump_database(database: Database, path: str | Path) -> None:
    Path(path).write_text(json.dumps(database_to_dict(database), indent=2) + "\n", encoding="utf-8")


def load_databases(source: FileSource) -> list[Database]:
    """Load every document the source lists, in listing order."""
    return [load_database(path) for path in source.list_files()]


def merge_databases(databases: Iterable[Database], name: str | None = None) -> Database:
    """
    Combine several documents into one model (tables in document order).
    Duplicate table names across documents raise ValidationError.
    """
    databases = list(databases)
    if not databases:
        raise ValidationError("No schema documents to merge")
    tables = tuple(table for database in databases for table in database.tables)
    return Database(name=name or databases[0].name, tables=tables, version=databases[0].version)
