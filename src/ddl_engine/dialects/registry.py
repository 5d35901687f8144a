"""
Explicit registry of platforms, keyed by case-insensitive dialect name.

The registry is an immutable value built once and passed to callers;
`register` returns a new registry instead of mutating shared state.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from functools import cache
from types import MappingProxyType

from src.ddl_engine.dialects.base import Dialect
from src.ddl_engine.dialects.generic import GENERIC
from src.ddl_engine.dialects.mysql import MYSQL, MYSQL5
from src.ddl_engine.dialects.oracle import ORACLE8, ORACLE9, ORACLE10
from src.ddl_engine.dialects.postgresql import POSTGRESQL
from src.ddl_engine.dialects.sapdb import MAXDB, SAPDB
from src.ddl_engine.errors import UnknownPlatformError
from src.ddl_engine.platform import Platform

BUILTIN_DIALECTS: tuple[Dialect, ...] = (
    GENERIC,
    POSTGRESQL,
    MYSQL,
    MYSQL5,
    ORACLE8,
    ORACLE9,
    ORACLE10,
    SAPDB,
    MAXDB,
)


@dataclass(frozen=True)
class DialectRegistry:
    """Name → Platform lookup."""

    platforms: Mapping[str, Platform] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        normalized = {name.lower(): platform for name, platform in self.platforms.items()}
        object.__setattr__(self, "platforms", MappingProxyType(normalized))

    @classmethod
    def from_platforms(cls, platforms: Iterable[Platform]) -> DialectRegistry:
        return cls({platform.name: platform for platform in platforms})

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self.platforms))

    def get(self, name: str) -> Platform:
        """Return the platform registered under `name`; raise UnknownPlatformError otherwise."""
        platform = self.platforms.get(str(name).lower())
        if platform is None:
            raise UnknownPlatformError(name, self.names)
        return platform

    def register(self, platform: Platform) -> DialectRegistry:
        """Return a new registry that also contains (or replaces) `platform`."""
        return DialectRegistry({**self.platforms, platform.name: platform})

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self.platforms


@cache
def default_registry(delimited_identifiers: bool = False) -> DialectRegistry:
    """Registry with every built-in dialect (built once per quoting mode)."""
    return DialectRegistry.from_platforms(
        Platform(dialect, delimited_identifiers=delimited_identifiers)
        for dialect in BUILTIN_DIALECTS
    )
