"""
Table profiling from in-memory rows.

Runs affinity inference, constraint profiling and primary-key selection
over freshly parsed rows (a list of mappings or a pandas DataFrame).

The affinity sampling boundary is explicit: ``affinity_sample_limit``
restricts affinity inference to the first N rows, while null and
uniqueness profiling always scan every row supplied.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from schema_scout.models import ColumnProfile, TableProfile
from schema_scout.profiling.affinity import infer_affinity
from schema_scout.profiling.constraints import profile_constraints
from schema_scout.profiling.primary_key import select_primary_key

logger = logging.getLogger(__name__)


def profile_column(
    name: str,
    values: Sequence[Any],
    affinity_sample_limit: Optional[int] = None,
) -> ColumnProfile:
    """Build a ColumnProfile from all values of one column."""
    sample = values if affinity_sample_limit is None else values[:affinity_sample_limit]
    affinity = infer_affinity(sample)
    constraints = profile_constraints(values)
    return ColumnProfile(
        name=name,
        affinity=affinity.affinity,
        not_null=constraints.not_null,
        unique=constraints.unique,
        is_boolean=affinity.is_boolean,
        is_date_like=affinity.is_date_like,
        null_rate=constraints.null_rate,
    )


def _headers_from_rows(rows: Sequence[Mapping[str, Any]]) -> List[str]:
    headers: Dict[str, None] = {}
    for row in rows:
        for key in row.keys():
            headers.setdefault(key, None)
    return list(headers)


def infer_table_profile(
    table: str,
    rows: Sequence[Mapping[str, Any]],
    headers: Optional[Sequence[str]] = None,
    affinity_sample_limit: Optional[int] = None,
) -> TableProfile:
    """
    Infer a TableProfile from parsed rows.

    Args:
        table: Table name (used for the <table>_id key heuristic)
        rows: Rows as mappings of header -> raw value; missing keys are empty
        headers: Column order; defaults to first-seen key order across rows
        affinity_sample_limit: Rows used for affinity inference (None = all)

    Returns:
        TableProfile with primary key and unique not-null columns
    """
    if headers is None:
        headers = _headers_from_rows(rows)

    columns: List[ColumnProfile] = []
    for header in headers:
        values = [row.get(header) for row in rows]
        columns.append(profile_column(header, values, affinity_sample_limit))

    unique_columns = {c.name for c in columns if c.unique and c.not_null}
    primary_key = select_primary_key(table, columns)

    logger.debug(
        f"Profiled {table}: {len(columns)} columns, {len(rows)} rows, "
        f"primary key {primary_key or '-'}"
    )

    return TableProfile(
        name=table,
        columns=columns,
        primary_key=primary_key,
        unique_columns=unique_columns,
        row_count=len(rows),
    )


def profile_frame(
    table: str,
    df: pd.DataFrame,
    affinity_sample_limit: Optional[int] = None,
) -> TableProfile:
    """Infer a TableProfile from a pandas DataFrame."""
    headers = [str(c) for c in df.columns]
    rows = df.rename(columns=str).to_dict(orient="records")
    return infer_table_profile(table, rows, headers, affinity_sample_limit)
