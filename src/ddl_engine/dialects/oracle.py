"""
Oracle dialects.

    oracle8 → oracle9 (real TIMESTAMP type) → oracle10 (recycle bin)

Oracle 10 keeps dropped-but-not-purged tables in its recycle bin under
generated names that the catalog still lists; the oracle10 reader excludes
every table found there.
"""

from __future__ import annotations

from src.ddl_engine.dialects.base import (
    QuotingRules,
    TypeMapping,
    derive,
    derive_templates,
)
from src.ddl_engine.dialects.generic import GENERIC
from src.ddl_engine.state.ports import MetadataConnection
from src.ddl_engine.state.queries import ORACLE_QUERIES, ORACLE_RECYCLE_BIN
from src.ddl_engine.types import ColumnType, LogicalType
from src.enums import DialectName


def oracle_column_type(
    type_mapping: TypeMapping,
    native_name: str,
    size: int | None,
    precision: int | None,
    scale: int | None,
) -> ColumnType:
    """NUMBER(p,0) comes back for every integral type; map it back by precision."""
    native = str(native_name).split("(")[0].strip().upper()
    if native == "NUMBER" and precision is not None and (scale or 0) == 0:
        if precision <= 3:
            return ColumnType(LogicalType.TINYINT)
        if precision <= 5:
            return ColumnType(LogicalType.SMALLINT)
        if precision <= 10:
            return ColumnType(LogicalType.INTEGER)
        if precision <= 19:
            return ColumnType(LogicalType.BIGINT)
    if native.startswith("TIMESTAMP"):
        return ColumnType(LogicalType.TIMESTAMP)
    logical_type = type_mapping.to_logical(native) or LogicalType.OTHER
    if logical_type.has_precision_and_scale:
        return ColumnType(logical_type, precision=precision, scale=scale)
    if logical_type.has_size:
        return ColumnType(logical_type, size=size)
    return ColumnType(logical_type)


def is_in_recycle_bin(connection: MetadataConnection, raw_table_name: str) -> bool:
    """True when the table name is an entry of the Oracle recycle bin."""
    rows = connection.query(ORACLE_RECYCLE_BIN, (raw_table_name,))
    return len(rows) > 0


ORACLE8 = derive(
    GENERIC,
    name=DialectName.ORACLE8.value,
    type_mapping=GENERIC.type_mapping.with_overrides(
        native_by_logical={
            LogicalType.BIT: "NUMBER(1)",
            LogicalType.BOOLEAN: "NUMBER(1)",
            LogicalType.TINYINT: "NUMBER(3)",
            LogicalType.SMALLINT: "NUMBER(5)",
            LogicalType.INTEGER: "NUMBER(10)",
            LogicalType.BIGINT: "NUMBER(19)",
            LogicalType.DECIMAL: "NUMBER",
            LogicalType.NUMERIC: "NUMBER",
            LogicalType.DOUBLE: "DOUBLE PRECISION",
            LogicalType.VARCHAR: "VARCHAR2",
            LogicalType.LONGVARCHAR: "CLOB",
            LogicalType.BINARY: "RAW",
            LogicalType.VARBINARY: "RAW",
            LogicalType.LONGVARBINARY: "BLOB",
            LogicalType.TIME: "DATE",
            LogicalType.TIMESTAMP: "DATE",
        },
        logical_by_native={
            "NUMBER": LogicalType.DECIMAL,
            "VARCHAR2": LogicalType.VARCHAR,
            "NVARCHAR2": LogicalType.VARCHAR,
            "NCHAR": LogicalType.CHAR,
            "NCLOB": LogicalType.CLOB,
            "RAW": LogicalType.VARBINARY,
            "LONG RAW": LogicalType.LONGVARBINARY,
            "LONG": LogicalType.LONGVARCHAR,
            "DATE": LogicalType.DATE,
        },
    ),
    quoting=QuotingRules(max_identifier_length=30),
    templates=derive_templates(
        GENERIC.templates,
        add_column="ADD {definition}",
        alter_column="MODIFY ({definition})",
        drop_table="DROP TABLE {table} CASCADE CONSTRAINTS",
        auto_increment=None,
    ),
    system_schemas=frozenset({"SYS", "SYSTEM", "OUTLN", "XDB", "MDSYS", "CTXSYS"}),
    catalog_queries=ORACLE_QUERIES,
    column_type_from_catalog=oracle_column_type,
)

ORACLE9 = derive(
    ORACLE8,
    name=DialectName.ORACLE9.value,
    type_mapping=ORACLE8.type_mapping.with_overrides(
        native_by_logical={LogicalType.TIMESTAMP: "TIMESTAMP"},
    ),
)

ORACLE10 = derive(
    ORACLE9,
    name=DialectName.ORACLE10.value,
    templates=derive_templates(
        ORACLE9.templates, drop_table="DROP TABLE {table} CASCADE CONSTRAINTS PURGE"
    ),
    is_table_excluded=is_in_recycle_bin,
)
