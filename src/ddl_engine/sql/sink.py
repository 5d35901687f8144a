"""
Output sinks for rendered DDL.

The builder only ever appends to a sink; it never reads it back. `SqlScript`
keeps everything in memory and additionally splits the output into single
statements at each `print_end_of_statement()`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol


class SqlSink(Protocol):
    """Append-only, print-style writer of SQL text."""

    def print(self, text: str) -> None: ...

    def println(self, text: str = "") -> None: ...

    def print_identifier(self, name: str) -> None: ...

    def println_identifier(self, name: str) -> None: ...

    def print_indent(self) -> None: ...

    def print_end_of_statement(self) -> None: ...


class SqlScript:
    """In-memory sink: full `.text` plus the list of finished `.statements` (without terminator)."""

    def __init__(
        self,
        quote_identifier: Callable[[str], str] = str,
        terminator: str = ";",
        indent: str = "    ",
    ) -> None:
        self._quote_identifier = quote_identifier
        self._terminator = terminator
        self._indent = indent
        self._parts: list[str] = []
        self._current: list[str] = []
        self._statements: list[str] = []

    def print(self, text: str) -> None:
        self._parts.append(text)
        self._current.append(text)

    def println(self, text: str = "") -> None:
        self.print(f"{text}\n")

    def print_identifier(self, name: str) -> None:
        self.print(self._quote_identifier(name))

    def println_identifier(self, name: str) -> None:
        self.println(self._quote_identifier(name))

    def print_indent(self) -> None:
        self.print(self._indent)

    def print_end_of_statement(self) -> None:
        self._parts.append(f"{self._terminator}\n\n")
        statement = "".join(self._current).strip()
        if statement:
            self._statements.append(statement)
        self._current.clear()

    @property
    def text(self) -> str:
        return "".join(self._parts)

    @property
    def statements(self) -> tuple[str, ...]:
        return tuple(self._statements)
