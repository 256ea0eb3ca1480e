"""
Single-column primary-key selection.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Sequence

from schema_scout.models import Affinity, ColumnProfile

logger = logging.getLogger(__name__)

_KEY_AFFINITIES = (Affinity.INTEGER, Affinity.TEXT)


def snake_case(name: str) -> str:
    """Convert a table name to snake_case ("OrderItems" -> "order_items")."""
    s = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name.strip())
    s = re.sub(r"[^0-9A-Za-z]+", "_", s)
    return s.strip("_").lower()


def is_key_eligible(column: ColumnProfile) -> bool:
    """A key column must be not-null, unique and INTEGER or TEXT."""
    return column.not_null and column.unique and column.affinity in _KEY_AFFINITIES


def select_primary_key(
    table: str,
    columns: Sequence[ColumnProfile],
    declared_primary_key: Optional[str] = None,
) -> Optional[str]:
    """
    Pick at most one primary-key column for a table.

    A key declared in the store's metadata wins when its values are
    not-null and unique. Otherwise, in priority order, a column named
    exactly ``id`` and then ``<table>_id`` is accepted when it is
    key-eligible.

    Args:
        table: Table name
        columns: Column profiles in table order
        declared_primary_key: Single-column key declared by the store, if any

    Returns:
        Column name or None
    """
    if declared_primary_key:
        for col in columns:
            if col.name.lower() == declared_primary_key.lower():
                if col.not_null and col.unique:
                    return col.name
                logger.warning(
                    f"Declared primary key {table}.{col.name} holds empty or duplicate values"
                )
                break
        else:
            logger.warning(f"Declared primary key {declared_primary_key} not found in {table}")

    candidates = ["id", f"{snake_case(table)}_id"]
    for wanted in candidates:
        for col in columns:
            if col.name.lower() == wanted and is_key_eligible(col):
                logger.debug(f"Selected primary key {table}.{col.name}")
                return col.name
    return None
