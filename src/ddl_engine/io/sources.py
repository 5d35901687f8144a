"""
Inbound collaborators for schema definitions.

- FileSource: lists schema definition documents (how they are found is the caller's business)
- ClassContext: loads a named Python object (module attribute)
- discover_databases: walk a package and collect module-level `Database` objects
"""

from __future__ import annotations

import importlib
import pkgutil
from collections.abc import Iterable, Sequence
from pathlib import Path
from types import ModuleType
from typing import Any, Protocol

from src.constants import SCHEMA_DOCUMENT_PATTERN
from src.ddl_engine.models import Database


class FileSource(Protocol):
    """Supplies schema definition files."""

    def list_files(self) -> Sequence[Path]: ...


class ClassContext(Protocol):
    """Loads an object by dotted name, e.g. 'schemas.shop:SHOP'."""

    def load(self, name: str) -> Any: ...


class DirectoryFileSource:
    """All files under `root` matching `pattern`, in sorted order."""

    def __init__(
        self, root: str | Path, pattern: str = SCHEMA_DOCUMENT_PATTERN, recursive: bool = True
    ) -> None:
        self.root = Path(root)
        self.pattern = pattern
        self.recursive = recursive

    def list_files(self) -> Sequence[Path]:
        matches = self.root.rglob(self.pattern) if self.recursive else self.root.glob(self.pattern)
        return sorted(path for path in matches if path.is_file())


class ImportlibClassContext:
    """
    Resolve 'package.module:attribute' (or 'package.module.attribute') via importlib.
    """

    def load(self, name: str) -> Any:
        if ":" in name:
            module_name, _, attribute = name.partition(":")
        else:
            module_name, _, attribute = name.rpartition(".")
        if not module_name or not attribute:
            raise ValueError(f"Expected 'module:attribute', got {name!r}")
        module = importlib.import_module(module_name)
        try:
            return getattr(module, attribute)
        except AttributeError:
            raise LookupError(f"Module {module_name!r} has no attribute {attribute!r}") from None


def discover_databases(package: ModuleType, recurse: bool = True) -> list[Database]:
    """Find all top-level variables that are instances of models.Database."""
    databases: list[Database] = []
    for module in _walk_package(package, recurse=recurse):
        for name in dir(module):
            obj = getattr(module, name, None)
            if isinstance(obj, Database) and obj not in databases:
                databases.append(obj)
    return databases


def _walk_package(package: ModuleType, recurse: bool) -> Iterable[ModuleType]:
    yield package
    for _, name, is_pkg in pkgutil.iter_modules(getattr(package, "__path__", [])):
        module = importlib.import_module(f"{package.__name__}.{name}")
        yield module
        if is_pkg and recurse:
            yield from _walk_package(module, recurse=True)
