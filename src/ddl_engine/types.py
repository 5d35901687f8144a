"""
Logical (vendor-neutral) SQL types.

`LogicalType` mirrors the JDBC type codes; every column carries one plus
optional size / precision / scale. Dialects translate logical types to and
from native type names (see `dialects.base.TypeMapping`).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from src.ddl_engine.errors import ValidationError
from src.enums import TypeCategory

_TYPE_TEXT = re.compile(
    r"^\s*(?P<name>[A-Za-z_][A-Za-z0-9_ ]*?)\s*(?:\(\s*(?P<args>[0-9]+(?:\s*,\s*[0-9]+)?)\s*\))?\s*$"
)


class LogicalType(StrEnum):
    ARRAY = "ARRAY"
    BIGINT = "BIGINT"
    BINARY = "BINARY"
    BIT = "BIT"
    BLOB = "BLOB"
    BOOLEAN = "BOOLEAN"
    CHAR = "CHAR"
    CLOB = "CLOB"
    DATALINK = "DATALINK"
    DATE = "DATE"
    DECIMAL = "DECIMAL"
    DISTINCT = "DISTINCT"
    DOUBLE = "DOUBLE"
    FLOAT = "FLOAT"
    INTEGER = "INTEGER"
    JAVA_OBJECT = "JAVA_OBJECT"
    LONGVARBINARY = "LONGVARBINARY"
    LONGVARCHAR = "LONGVARCHAR"
    NULL = "NULL"
    NUMERIC = "NUMERIC"
    OTHER = "OTHER"
    REAL = "REAL"
    REF = "REF"
    SMALLINT = "SMALLINT"
    STRUCT = "STRUCT"
    TIME = "TIME"
    TIMESTAMP = "TIMESTAMP"
    TINYINT = "TINYINT"
    VARBINARY = "VARBINARY"
    VARCHAR = "VARCHAR"

    @property
    def category(self) -> TypeCategory:
        return _CATEGORY_BY_TYPE[self]

    @property
    def has_size(self) -> bool:
        """True for types rendered with a size, e.g. VARCHAR(32)."""
        return self in _SIZED_TYPES

    @property
    def has_precision_and_scale(self) -> bool:
        """True for types rendered with precision and scale, e.g. DECIMAL(10,2)."""
        return self in _PRECISION_TYPES


_CATEGORY_BY_TYPE: dict[LogicalType, TypeCategory] = {
    LogicalType.ARRAY: TypeCategory.SPECIAL,
    LogicalType.BIGINT: TypeCategory.NUMERIC,
    LogicalType.BINARY: TypeCategory.BINARY,
    LogicalType.BIT: TypeCategory.NUMERIC,
    LogicalType.BLOB: TypeCategory.BINARY,
    LogicalType.BOOLEAN: TypeCategory.NUMERIC,
    LogicalType.CHAR: TypeCategory.TEXTUAL,
    LogicalType.CLOB: TypeCategory.TEXTUAL,
    LogicalType.DATALINK: TypeCategory.SPECIAL,
    LogicalType.DATE: TypeCategory.DATETIME,
    LogicalType.DECIMAL: TypeCategory.NUMERIC,
    LogicalType.DISTINCT: TypeCategory.SPECIAL,
    LogicalType.DOUBLE: TypeCategory.NUMERIC,
    LogicalType.FLOAT: TypeCategory.NUMERIC,
    LogicalType.INTEGER: TypeCategory.NUMERIC,
    LogicalType.JAVA_OBJECT: TypeCategory.SPECIAL,
    LogicalType.LONGVARBINARY: TypeCategory.BINARY,
    LogicalType.LONGVARCHAR: TypeCategory.TEXTUAL,
    LogicalType.NULL: TypeCategory.SPECIAL,
    LogicalType.NUMERIC: TypeCategory.NUMERIC,
    LogicalType.OTHER: TypeCategory.SPECIAL,
    LogicalType.REAL: TypeCategory.NUMERIC,
    LogicalType.REF: TypeCategory.SPECIAL,
    LogicalType.SMALLINT: TypeCategory.NUMERIC,
    LogicalType.STRUCT: TypeCategory.SPECIAL,
    LogicalType.TIME: TypeCategory.DATETIME,
    LogicalType.TIMESTAMP: TypeCategory.DATETIME,
    LogicalType.TINYINT: TypeCategory.NUMERIC,
    LogicalType.VARBINARY: TypeCategory.BINARY,
    LogicalType.VARCHAR: TypeCategory.TEXTUAL,
}

_SIZED_TYPES = frozenset(
    {LogicalType.CHAR, LogicalType.VARCHAR, LogicalType.BINARY, LogicalType.VARBINARY}
)
_PRECISION_TYPES = frozenset({LogicalType.DECIMAL, LogicalType.NUMERIC})


@dataclass(frozen=True, slots=True)
class ColumnType:
    """A logical type plus its optional size, precision and scale."""

    logical_type: LogicalType
    size: int | None = None
    precision: int | None = None
    scale: int | None = None

    @classmethod
    def parse(cls, text: str) -> ColumnType:
        """
        Parse 'VARCHAR(32)', 'DECIMAL(10,2)' or 'INTEGER' into a ColumnType.

        Raises ValidationError if the name is not a known logical type.
        """
        match = _TYPE_TEXT.match(str(text))
        if match is None:
            raise ValidationError(f"Cannot parse column type {text!r}")
        logical_type = parse_logical_type(match.group("name"))
        args = match.group("args")
        if not args:
            return cls(logical_type)
        numbers = [int(part) for part in args.split(",")]
        if logical_type.has_precision_and_scale:
            scale = numbers[1] if len(numbers) > 1 else 0
            return cls(logical_type, precision=numbers[0], scale=scale)
        return cls(logical_type, size=numbers[0])

    def format(self) -> str:
        """Logical (dialect-free) text form, the inverse of `parse`."""
        if self.logical_type.has_precision_and_scale and self.precision is not None:
            return f"{self.logical_type.value}({self.precision},{self.scale or 0})"
        if self.size is not None:
            return f"{self.logical_type.value}({self.size})"
        return self.logical_type.value


def parse_logical_type(name: str) -> LogicalType:
    """Map a logical type name (any case, spaces allowed) to LogicalType."""
    key = "_".join(str(name).strip().upper().split())
    try:
        return LogicalType(key)
    except ValueError:
        raise ValidationError(f"Unknown logical type {name!r}") from None
