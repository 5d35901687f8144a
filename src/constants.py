"""Shared constant values used across the DDL engine."""

from typing import Final

DEFAULT_TABLE_TYPES: Final[tuple[str, ...]] = ("TABLE",)
DEFAULT_STATEMENT_TERMINATOR: Final[str] = ";"
DEFAULT_MAX_IDENTIFIER_LENGTH: Final[int] = 128
SCHEMA_DOCUMENT_PATTERN: Final[str] = "*.json"
