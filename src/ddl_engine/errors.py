"""
Exception taxonomy for the DDL engine.

- ValidationError: a schema model invariant is violated (fatal).
- MetadataReadError: reading one table's metadata failed; readers collect these
  per table and keep going with siblings.
- UnknownPlatformError: dialect lookup miss (fatal).
- DependencyOrderError: no valid ordering exists for a change-set.
"""

from __future__ import annotations

from collections.abc import Sequence

_MAX_MESSAGE_LENGTH = 300


class DdlEngineError(Exception):
    """Base class for all DDL engine errors."""


class ValidationError(DdlEngineError):
    """Schema model invariant violated."""


class UnknownPlatformError(DdlEngineError, LookupError):
    """No platform is registered under the requested name."""

    def __init__(self, name: str, known: Sequence[str] = ()) -> None:
        self.name = name
        self.known = tuple(known)
        suffix = f" (known: {', '.join(self.known)})" if self.known else ""
        super().__init__(f"Unknown platform {name!r}{suffix}")


class DependencyOrderError(DdlEngineError):
    """Change-set cannot be ordered, e.g. a foreign-key cycle among dropped tables."""

    def __init__(self, message: str, tables: Sequence[str] = ()) -> None:
        self.tables = tuple(tables)
        super().__init__(message)


class MetadataReadError(DdlEngineError):
    """
    Reading metadata for a single table failed.

    Attributes
    ----------
    table_name : str | None
        Which table the failure relates to (None when not table-specific).
    aspect : str
        Which slice of metadata was being read (columns, primary key, ...).
    message : str
        Short, single-line message.
    """

    def __init__(self, table_name: str | None, aspect: str, message: str) -> None:
        self.table_name = table_name
        self.aspect = aspect
        self.message = message
        where = f" for table {table_name!r}" if table_name else ""
        super().__init__(f"Failed to read {aspect}{where}: {message}")

    @classmethod
    def from_exception(
        cls, table_name: str | None, aspect: str, error: object
    ) -> MetadataReadError:
        """Build from an exception (or message-like object), keeping only its first line."""
        return cls(table_name=table_name, aspect=aspect, message=summarize_exception(error))


def summarize_exception(error: object) -> str:
    """One-line, length-bounded summary: `ExceptionType: first line of message`."""
    text = str(error).strip()
    first_line = text.splitlines()[0] if text else ""
    if isinstance(error, BaseException):
        name = type(error).__name__
        brief = f"{name}: {first_line}" if first_line else name
    else:
        brief = first_line
    return brief[:_MAX_MESSAGE_LENGTH]
