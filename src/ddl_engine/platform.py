"""
Platform: a dialect bound to its reader and builder.

A Platform is built eagerly from a `Dialect`: the `ModelReader` is created at
construction and builders are created per rendering pass, bound to the
platform so they can ask for quoting style and identifier limits.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src import settings
from src.ddl_engine.dialects.base import Dialect
from src.ddl_engine.identifiers import quote_identifier
from src.ddl_engine.sql.builder import SqlBuilder
from src.ddl_engine.sql.sink import SqlScript, SqlSink
from src.ddl_engine.state.reader import ModelReader


@dataclass(frozen=True)
class Platform:
    """One addressable dialect: reader + builder factory + quoting configuration."""

    dialect: Dialect
    delimited_identifiers: bool = settings.DELIMITED_IDENTIFIERS
    reader: ModelReader = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "reader", ModelReader(self.dialect))

    @property
    def name(self) -> str:
        return self.dialect.name

    @property
    def max_identifier_length(self) -> int:
        return self.dialect.quoting.max_identifier_length

    def quote_identifier(self, name: str) -> str:
        """Delimit the identifier when delimited identifiers are on, else return it unchanged."""
        if not self.delimited_identifiers:
            return name
        return quote_identifier(name, self.dialect.quoting.delimiter_token)

    def new_script(self) -> SqlScript:
        return SqlScript(
            quote_identifier=self.quote_identifier,
            terminator=self.dialect.statement_terminator,
        )

    def create_builder(self, sink: SqlSink | None = None) -> SqlBuilder:
        """New builder writing to `sink` (a fresh `SqlScript` by default)."""
        return SqlBuilder(self, sink if sink is not None else self.new_script())
