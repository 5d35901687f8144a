"""
Identifier utilities for the DDL engine.

This module defines:
- Helpers to quote identifiers and escape SQL literals for a given delimiter.
- Deterministic builders for generated constraint and index names.

Conventions:
- Verbs: quote_*, escape_*, build_*.
- Generated names are lowercased and limited to [a-z0-9_].
- A generated name encodes the full identity of what it names (kind, table,
  columns, referenced table and columns) so that distinct constraints get
  distinct names.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Sequence

from src.constants import DEFAULT_MAX_IDENTIFIER_LENGTH

_INVALID_CHARACTER = re.compile(r"[^A-Za-z0-9_]+")
_MULTI_UNDERSCORES = re.compile(r"_+")


# -----------------------------
# Quoting helpers
# -----------------------------


def quote_identifier(identifier: str, delimiter: str = '"') -> str:
    """Quote a single SQL identifier, doubling any embedded delimiter characters."""
    text = str(identifier)
    if not delimiter:
        return text
    return f"{delimiter}{text.replace(delimiter, delimiter * 2)}{delimiter}"


def escape_sql_literal(value: str | None, quote: str = "'") -> str:
    """
    Escape a Python string for use inside a quoted SQL literal.
    Doubles the quote character per SQL rules. None → empty string.
    """
    return (value or "").replace(quote, quote * 2)


def quote_sql_literal(value: str | None, quote: str = "'") -> str:
    """Return `value` as a complete quoted SQL literal."""
    return f"{quote}{escape_sql_literal(value, quote)}{quote}"


# -----------------------------
# Generated names
# -----------------------------


def _short_hash(*parts: str) -> str:
    """
    Deterministic 8-char hex hash for disambiguation.
    Uses BLAKE2b. The input is joined with '|' to keep boundaries.
    """
    joined = "|".join(parts).encode("utf-8")
    return hashlib.blake2b(joined, digest_size=4).hexdigest()


def _sanitize_component(text: str | None) -> str:
    """
    Map arbitrary text to an identifier-safe component using only [a-z0-9_].
    None or empty returns empty string.
    """
    if text is None:
        return ""
    s = _INVALID_CHARACTER.sub("_", str(text))
    s = _MULTI_UNDERSCORES.sub("_", s)
    return s.strip("_").lower()


def _truncate_with_hash(base: str, max_len: int = DEFAULT_MAX_IDENTIFIER_LENGTH) -> str:
    """
    Truncate a long identifier to `max_len`, appending a suffix of the form '_hhhhhhhh'.
    The returned string length is <= `max_len` even for very small limits.
    """
    if len(base) <= max_len:
        return base

    digest = _short_hash(base)
    if max_len <= len(digest):
        return digest[:max_len]

    sep = "_"
    keep = max_len - len(sep) - len(digest)
    if keep <= 0:
        return base[: max_len - len(digest)] + digest

    return f"{base[:keep]}{sep}{digest}"


def build_constraint_name(
    prefix: str | None,
    table_name: str,
    constraint_type: str | None,
    suffix: str | Sequence[str] | None = None,
    max_length: int = DEFAULT_MAX_IDENTIFIER_LENGTH,
) -> str:
    """
    Build a deterministic constraint name.

    Pattern (before truncation):
        <prefix>_<table>_<type>__<suffix1>__<suffix2>...

    Rules:
    - Empty parts are skipped; the rest are sanitized to [a-z0-9_].
    - A sequence suffix is joined with '__'. Sanitized components never contain
      '__', so different column lists never produce the same name.
    - When sanitizing changed any part (e.g. 'a-b' vs 'a_b'), a hash of the raw
      parts is appended so that different inputs never map to the same name.
    - The result is truncated with a stable hash suffix to stay within `max_length`.
    """
    head_raw = [part for part in (prefix, table_name, constraint_type) if part]
    if isinstance(suffix, str):
        tail_raw = [suffix] if suffix else []
    else:
        tail_raw = [part for part in suffix or () if part]
    raw_parts = [*head_raw, *tail_raw]
    if not raw_parts:
        raise ValueError("Cannot build a constraint name from empty parts.")

    head = "_".join(clean for clean in map(_sanitize_component, head_raw) if clean)
    tail = "__".join(clean for clean in map(_sanitize_component, tail_raw) if clean)
    base = f"{head}__{tail}" if head and tail else head or tail

    lossy = any(_sanitize_component(raw) != str(raw).lower() for raw in raw_parts)
    if lossy or not base:
        digest = _short_hash(*(str(part) for part in raw_parts))
        base = f"{base}_{digest}" if base else digest

    return _truncate_with_hash(base, max_length)


def build_primary_key_name(
    table_name: str, max_length: int = DEFAULT_MAX_IDENTIFIER_LENGTH
) -> str:
    """Primary key name: `<table>_pk` (one primary key per table)."""
    return build_constraint_name(None, table_name, "pk", None, max_length)


def build_foreign_key_name(
    table_name: str,
    local_columns: Sequence[str],
    foreign_table_name: str,
    foreign_columns: Sequence[str] = (),
    max_length: int = DEFAULT_MAX_IDENTIFIER_LENGTH,
) -> str:
    """
    Foreign key name:
        `<table>_fk__<col1>__<col2>...__<foreign table>__<fcol1>__<fcol2>...`
    Column order is preserved and thus significant.

    Raises:
        ValueError: if `local_columns` is empty.
    """
    if not local_columns:
        raise ValueError("Cannot build foreign key name with no columns.")
    return build_constraint_name(
        None,
        table_name,
        "fk",
        [*local_columns, foreign_table_name, *foreign_columns],
        max_length,
    )


def build_ordinal_name(
    base_name: str, ordinal: int, max_length: int = DEFAULT_MAX_IDENTIFIER_LENGTH
) -> str:
    """`<base>__<ordinal>`, used when the generated `base_name` is already taken within a table."""
    return _truncate_with_hash(f"{base_name}__{ordinal}", max_length)


def build_index_name(
    table_name: str,
    columns: Sequence[str],
    is_unique: bool,
    max_length: int = DEFAULT_MAX_IDENTIFIER_LENGTH,
) -> str:
    """
    Index name: `<table>_uq__<cols>` for unique indexes, `<table>_ix__<cols>` otherwise.

    Raises:
        ValueError: if `columns` is empty.
    """
    if not columns:
        raise ValueError("Cannot build index name with no columns.")
    kind = "uq" if is_unique else "ix"
    return build_constraint_name(None, table_name, kind, list(columns), max_length)
