"""MySQL dialects (3.x/4.x and 5.x)."""

from __future__ import annotations

from dataclasses import replace

from src.ddl_engine.dialects.base import QuotingRules, derive, derive_templates
from src.ddl_engine.dialects.generic import GENERIC
from src.ddl_engine.state.queries import MYSQL_COLUMNS, MYSQL_INDEXES
from src.ddl_engine.types import LogicalType
from src.enums import DialectName

MYSQL = derive(
    GENERIC,
    name=DialectName.MYSQL.value,
    type_mapping=GENERIC.type_mapping.with_overrides(
        native_by_logical={
            LogicalType.BIT: "TINYINT(1)",
            LogicalType.BOOLEAN: "TINYINT(1)",
            LogicalType.TINYINT: "TINYINT",
            LogicalType.LONGVARCHAR: "MEDIUMTEXT",
            LogicalType.CLOB: "LONGTEXT",
            LogicalType.LONGVARBINARY: "MEDIUMBLOB",
            LogicalType.BLOB: "LONGBLOB",
            LogicalType.TIMESTAMP: "DATETIME",
            LogicalType.REAL: "FLOAT",
        },
        logical_by_native={
            "INT": LogicalType.INTEGER,
            "MEDIUMINT": LogicalType.INTEGER,
            "TEXT": LogicalType.LONGVARCHAR,
            "TINYTEXT": LogicalType.VARCHAR,
            "DATETIME": LogicalType.TIMESTAMP,
            "TINYBLOB": LogicalType.VARBINARY,
            "MEDIUMBLOB": LogicalType.LONGVARBINARY,
            "LONGBLOB": LogicalType.BLOB,
        },
    ),
    quoting=QuotingRules(delimiter_token="`", max_identifier_length=64),
    templates=derive_templates(
        GENERIC.templates,
        drop_primary_key="DROP PRIMARY KEY",
        drop_foreign_key="DROP FOREIGN KEY {name}",
        alter_column="MODIFY COLUMN {definition}",
        drop_index="DROP INDEX {name} ON {table}",
        auto_increment="AUTO_INCREMENT",
    ),
    system_schemas=frozenset(
        {"INFORMATION_SCHEMA", "MYSQL", "PERFORMANCE_SCHEMA", "SYS"}
    ),
    catalog_queries=replace(
        GENERIC.catalog_queries, list_columns=MYSQL_COLUMNS, indexes=MYSQL_INDEXES
    ),
)

# MySQL 5 reports the referential actions and accepts quoted names in more places;
# only the version name differs at this level.
MYSQL5 = derive(MYSQL, name=DialectName.MYSQL5.value)
