"""PostgreSQL dialect."""

from __future__ import annotations

from dataclasses import replace

from src.ddl_engine.dialects.base import QuotingRules, derive, derive_templates
from src.ddl_engine.dialects.generic import GENERIC
from src.ddl_engine.state.queries import POSTGRESQL_INDEXES
from src.ddl_engine.types import LogicalType
from src.enums import DialectName

POSTGRESQL = derive(
    GENERIC,
    name=DialectName.POSTGRESQL.value,
    type_mapping=GENERIC.type_mapping.with_overrides(
        native_by_logical={
            LogicalType.BIT: "BOOLEAN",
            LogicalType.BOOLEAN: "BOOLEAN",
            LogicalType.TINYINT: "SMALLINT",
            LogicalType.DOUBLE: "DOUBLE PRECISION",
            LogicalType.FLOAT: "DOUBLE PRECISION",
            LogicalType.LONGVARCHAR: "TEXT",
            LogicalType.CLOB: "TEXT",
            LogicalType.BINARY: "BYTEA",
            LogicalType.VARBINARY: "BYTEA",
            LogicalType.LONGVARBINARY: "BYTEA",
            LogicalType.BLOB: "BYTEA",
            LogicalType.JAVA_OBJECT: "BYTEA",
            LogicalType.OTHER: "BYTEA",
        },
        logical_by_native={
            "INT2": LogicalType.SMALLINT,
            "INT4": LogicalType.INTEGER,
            "INT8": LogicalType.BIGINT,
            "BOOL": LogicalType.BOOLEAN,
            "TEXT": LogicalType.LONGVARCHAR,
            "BYTEA": LogicalType.LONGVARBINARY,
            "TIMESTAMP WITHOUT TIME ZONE": LogicalType.TIMESTAMP,
            "TIME WITHOUT TIME ZONE": LogicalType.TIME,
        },
    ),
    quoting=QuotingRules(max_identifier_length=63),
    templates=derive_templates(
        GENERIC.templates,
        alter_column="ALTER COLUMN {name} TYPE {type}",
        alter_column_nullability="ALTER COLUMN {name} {set_or_drop} NOT NULL",
        alter_column_default="ALTER COLUMN {name} {default_clause}",
    ),
    system_schemas=frozenset({"INFORMATION_SCHEMA", "PG_CATALOG", "PG_TOAST"}),
    catalog_queries=replace(GENERIC.catalog_queries, indexes=POSTGRESQL_INDEXES),
    # the index query already leaves out primary key indexes
    system_indexes_returned=False,
)
