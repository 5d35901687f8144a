"""Generic SQL-92 dialect: the base every built-in dialect derives from."""

from __future__ import annotations

from types import MappingProxyType

from src.ddl_engine.dialects.base import Dialect, TypeMapping
from src.ddl_engine.types import LogicalType
from src.enums import DialectName

GENERIC_TYPE_MAPPING = TypeMapping(
    native_by_logical=MappingProxyType(
        {
            LogicalType.BIT: "SMALLINT",
            LogicalType.TINYINT: "SMALLINT",
            LogicalType.LONGVARCHAR: "CLOB",
            LogicalType.LONGVARBINARY: "BLOB",
            LogicalType.JAVA_OBJECT: "BLOB",
            LogicalType.OTHER: "BLOB",
        }
    ),
    logical_by_native=MappingProxyType(
        {
            "CHARACTER": LogicalType.CHAR,
            "CHARACTER VARYING": LogicalType.VARCHAR,
            "INT": LogicalType.INTEGER,
            "DOUBLE PRECISION": LogicalType.DOUBLE,
            "DEC": LogicalType.DECIMAL,
        }
    ),
)

GENERIC = Dialect(name=DialectName.GENERIC.value, type_mapping=GENERIC_TYPE_MAPPING)
