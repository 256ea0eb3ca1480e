"""
Conversion of raw external values into SQL literals for a profiled column.
"""

from __future__ import annotations

from typing import Any

from schema_scout.models import Affinity, ColumnProfile
from schema_scout.profiling.affinity import (
    BOOL_FALSE,
    BOOL_TRUE,
    INT_RE,
    REAL_RE,
    is_empty,
    normalize_value,
)

NULL = "NULL"


def quote_identifier(name: str) -> str:
    """Double-quote an identifier, doubling any embedded double quotes."""
    return '"' + str(name).replace('"', '""') + '"'


def quote_text(value: str) -> str:
    """Single-quote a string literal, doubling any embedded single quotes."""
    return "'" + value.replace("'", "''") + "'"


def to_sql_literal(raw: Any, column: ColumnProfile) -> str:
    """
    Convert a raw value into a storage-ready SQL literal.

    - empty -> NULL
    - boolean columns: true tokens -> 1, false tokens -> 0, anything else -> NULL
    - INTEGER columns pass integer-shaped values through unquoted
    - REAL columns pass integer- or decimal-shaped values through unquoted
    - everything else is quoted as text

    Date-like values are stored as text; no normalisation is applied.
    """
    if is_empty(raw):
        return NULL

    value = normalize_value(raw)

    if column.is_boolean:
        lower = value.lower()
        if lower in BOOL_TRUE:
            return "1"
        if lower in BOOL_FALSE:
            return "0"
        return NULL

    if column.affinity == Affinity.INTEGER and INT_RE.match(value):
        return value
    if column.affinity == Affinity.REAL and (INT_RE.match(value) or REAL_RE.match(value)):
        return value

    return quote_text(value)
