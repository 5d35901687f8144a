"""
SapDB and MaxDB dialects.

SapDB adds primary keys without a constraint name; MaxDB names them and
drops foreign keys with DROP CONSTRAINT.
"""

from __future__ import annotations

from src.ddl_engine.dialects.base import (
    QuotingRules,
    derive,
    derive_templates,
    skip_single_auto_increment_key,
)
from src.ddl_engine.dialects.generic import GENERIC
from src.ddl_engine.state.queries import SAPDB_QUERIES
from src.ddl_engine.types import LogicalType
from src.enums import DialectName

SAPDB = derive(
    GENERIC,
    name=DialectName.SAPDB.value,
    type_mapping=GENERIC.type_mapping.with_overrides(
        native_by_logical={
            LogicalType.BIT: "BOOLEAN",
            LogicalType.TINYINT: "SMALLINT",
            LogicalType.BIGINT: "FIXED(38,0)",
            LogicalType.DOUBLE: "DOUBLE PRECISION",
            LogicalType.DECIMAL: "FIXED",
            LogicalType.NUMERIC: "FIXED",
            LogicalType.LONGVARCHAR: "LONG",
            LogicalType.CLOB: "LONG",
            LogicalType.BINARY: "CHAR",
            LogicalType.VARBINARY: "VARCHAR",
            LogicalType.LONGVARBINARY: "LONG BYTE",
            LogicalType.BLOB: "LONG BYTE",
        },
        logical_by_native={
            "FIXED": LogicalType.DECIMAL,
            "LONG": LogicalType.LONGVARCHAR,
            "LONG BYTE": LogicalType.LONGVARBINARY,
        },
    ),
    quoting=QuotingRules(max_identifier_length=32),
    templates=derive_templates(
        GENERIC.templates,
        add_primary_key="ADD PRIMARY KEY ({columns})",
        drop_primary_key="DROP PRIMARY KEY",
        drop_foreign_key="DROP FOREIGN KEY {name}",
        add_column="ADD {definition}",
        alter_column="MODIFY {definition}",
        drop_index="DROP INDEX {name} ON {table}",
        auto_increment="DEFAULT SERIAL(1)",
    ),
    primary_key_embedded=False,
    system_schemas=frozenset({"DOMAIN", "SYS", "SYSINFO", "DBADMIN"}),
    catalog_queries=SAPDB_QUERIES,
    should_generate_primary_keys=skip_single_auto_increment_key,
)

MAXDB = derive(
    SAPDB,
    name=DialectName.MAXDB.value,
    templates=derive_templates(
        SAPDB.templates,
        add_primary_key="ADD CONSTRAINT {name} PRIMARY KEY ({columns})",
        drop_foreign_key="DROP CONSTRAINT {name}",
    ),
)
