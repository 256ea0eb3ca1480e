"""
Null-rate, not-null and uniqueness profiling over column values.
"""

from __future__ import annotations

from typing import Any, Iterable, Set

from schema_scout.models import ConstraintProfile
from schema_scout.profiling.affinity import is_empty, normalize_value


def profile_constraints(values: Iterable[Any]) -> ConstraintProfile:
    """
    Compute null rate, not-null and uniqueness for a column.

    Scans every value supplied. Whether that is a sample or the full data
    set is the caller's decision. Distinct values are compared by their
    trimmed text form.
    """
    total = 0
    empty = 0
    seen: Set[str] = set()

    for value in values:
        total += 1
        if is_empty(value):
            empty += 1
            continue
        seen.add(normalize_value(value))

    non_empty = total - empty
    return ConstraintProfile(
        null_rate=empty / total if total else 0.0,
        not_null=empty == 0,
        unique=non_empty > 0 and len(seen) == non_empty,
    )
