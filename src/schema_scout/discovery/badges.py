"""
Name-only foreign-key hints.

Unlike RelationshipInferrer this never touches the store: a column is flagged
purely because its ``<base>_id`` name resembles some table name. Useful as a
cheap default for highlighting likely keys before coverage is verified.
"""

from __future__ import annotations

import re
from typing import Dict, Sequence, Set

from schema_scout.models import TableProfile
from schema_scout.discovery.naming import dice_similarity, normalize_name

_ID_SUFFIX_RE = re.compile(r"^(.+)_id$")


def build_name_based_badges(
    tables: Sequence[TableProfile],
    min_score: float = 0.8,
) -> Dict[str, Set[str]]:
    """
    Flag ``<base>_id`` columns whose base resembles any table name.

    Args:
        tables: Table profiles (only names and column names are used)
        min_score: Minimum Dice score against a normalized table name

    Returns:
        Dict of table name -> set of flagged column names (every table present)
    """
    table_names = [normalize_name(t.name) for t in tables]

    badges: Dict[str, Set[str]] = {}
    for table in tables:
        flagged: Set[str] = set()
        for col in table.columns:
            match = _ID_SUFFIX_RE.match(col.name.lower())
            if not match:
                continue
            base = normalize_name(match.group(1))
            if base == "id":
                continue
            if any(dice_similarity(base, name) >= min_score for name in table_names):
                flagged.add(col.name)
        badges[table.name] = flagged
    return badges
