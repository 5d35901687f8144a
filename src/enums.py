"""Enumerations used throughout the DDL engine."""

from enum import StrEnum


class DialectName(StrEnum):
    """Names of the built-in database dialects."""

    GENERIC = "generic"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    MYSQL5 = "mysql5"
    ORACLE8 = "oracle8"
    ORACLE9 = "oracle9"
    ORACLE10 = "oracle10"
    SAPDB = "sapdb"
    MAXDB = "maxdb"


class CascadeAction(StrEnum):
    """Referential action of a foreign key on delete/update."""

    NONE = "NONE"
    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    SET_DEFAULT = "SET DEFAULT"
    RESTRICT = "RESTRICT"


class TypeCategory(StrEnum):
    """Category of a logical SQL type."""

    NUMERIC = "numeric"
    TEXTUAL = "textual"
    BINARY = "binary"
    DATETIME = "datetime"
    SPECIAL = "special"
