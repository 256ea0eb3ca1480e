"""
Loads parsed rows into a new store table.

Infers the table schema from the rows, creates the table with the inferred
affinities and constraints, and inserts the rows in multi-row batches, all
inside a single transaction. Parsing the source file is left to the caller.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from schema_scout.config import ProfilingSettings
from schema_scout.errors import SchemaInferenceError, wrap_error
from schema_scout.models import Affinity, ColumnProfile, TableProfile
from schema_scout.profiling.literal import quote_identifier as q
from schema_scout.profiling.literal import NULL, to_sql_literal
from schema_scout.profiling.primary_key import select_primary_key
from schema_scout.profiling.schema import infer_table_profile
from schema_scout.store.sqlite import SqliteStore

logger = logging.getLogger(__name__)

MAX_TABLE_NAME_LENGTH = 63


@dataclass
class IngestResult:
    """Outcome of loading one set of rows."""
    table_name: str
    profile: TableProfile
    inserted: int

    def to_dict(self):
        return {
            "table_name": self.table_name,
            "profile": self.profile.to_dict(),
            "inserted": self.inserted,
        }


def safe_table_name(file_name: str) -> str:
    """
    Derive a safe table name from a file name.

    Examples:
        "Sales Report (2024).csv" -> "sales_report_2024_"
        "2024_orders.csv" -> "_orders"
        "2024.csv" -> "table"
    """
    base = re.sub(r"\.[^.]+$", "", Path(file_name).name)
    text = unicodedata.normalize("NFKD", base)
    text = re.sub(r"[^\w]+", "_", text, flags=re.ASCII)
    text = re.sub(r"^[^A-Za-z_]+", "", text)
    if not text:
        text = "table"
    return text[:MAX_TABLE_NAME_LENGTH].lower()


def ensure_unique_table_name(base: str, existing: Iterable[str]) -> str:
    """Return ``base`` or the first free ``base_2``, ``base_3``, ... (case-insensitive)."""
    taken = {name.lower() for name in existing}
    if base.lower() not in taken:
        return base
    i = 2
    while f"{base}_{i}".lower() in taken:
        i += 1
    return f"{base}_{i}"


def build_create_table(profile: TableProfile) -> str:
    """Render CREATE TABLE DDL for a profile."""
    parts = []
    for col in profile.columns:
        definition = f"{q(col.name)} {col.affinity.value}"
        if col.not_null:
            definition += " NOT NULL"
        parts.append(definition)

    if profile.primary_key:
        parts.append(f"PRIMARY KEY ({q(profile.primary_key)})")
    for name in profile.column_names:
        if name in profile.unique_columns and name != profile.primary_key:
            parts.append(f"UNIQUE ({q(name)})")

    return f"CREATE TABLE {q(profile.name)} ({', '.join(parts)})"


def _stored_value(literal: str, column: ColumnProfile) -> Any:
    """Value a literal becomes once stored, as far as equality goes."""
    if literal == NULL:
        return None
    if literal.startswith("'"):
        return literal
    if column.affinity == Affinity.REAL:
        return float(literal)
    return int(literal)


def _unique_when_stored(column: ColumnProfile, rows: Sequence[Mapping[str, Any]]) -> bool:
    seen = set()
    for row in rows:
        value = _stored_value(to_sql_literal(row.get(column.name), column), column)
        if value is None:
            continue
        if value in seen:
            return False
        seen.add(value)
    return True


def align_keys_with_storage(profile: TableProfile, rows: Sequence[Mapping[str, Any]]) -> TableProfile:
    """
    Drop uniqueness that would not survive literal coercion.

    Text forms such as "1" and "1.0" in a REAL column, or "1" and "01" in an
    INTEGER column, are distinct when profiled but equal once stored. Such
    columns lose their UNIQUE flag, and the primary key is chosen again
    without them.
    """
    colliding = [
        col for col in profile.columns
        if col.name in profile.unique_columns and not _unique_when_stored(col, rows)
    ]
    if not colliding:
        return profile

    for col in colliding:
        col.unique = False
        profile.unique_columns.discard(col.name)
        logger.warning(f"Column {profile.name}.{col.name} is not unique once coerced")

    if profile.primary_key in {c.name for c in colliding}:
        profile.primary_key = select_primary_key(profile.name, profile.columns)
    return profile


def build_insert(profile: TableProfile, rows: Sequence[Mapping[str, Any]]) -> str:
    """Render one multi-row INSERT with every value coerced to a literal."""
    values = []
    for row in rows:
        literals = [to_sql_literal(row.get(col.name), col) for col in profile.columns]
        values.append(f"({', '.join(literals)})")
    column_list = ", ".join(q(name) for name in profile.column_names)
    return f"INSERT INTO {q(profile.name)} ({column_list}) VALUES {', '.join(values)}"


async def ingest_rows(
    store: SqliteStore,
    table_name: str,
    rows: Sequence[Mapping[str, Any]],
    headers: Optional[Sequence[str]] = None,
    settings: Optional[ProfilingSettings] = None,
    on_batch: Optional[Callable[[int, int], None]] = None,
) -> IngestResult:
    """
    Create a table for the rows and insert them.

    Args:
        store: Target store
        table_name: Desired table name; suffixed with _2, _3, ... if taken
        rows: Parsed rows (header -> raw value)
        headers: Column order; defaults to first-seen key order
        settings: Profiling settings (sample limit, batch size)
        on_batch: Called with (inserted so far, total) after each batch

    Returns:
        IngestResult

    Raises:
        SchemaInferenceError: If creation or any insert fails; nothing is kept
    """
    settings = settings or ProfilingSettings()
    final_name = ensure_unique_table_name(table_name, await store.list_tables())

    profile = infer_table_profile(
        final_name, rows, headers, affinity_sample_limit=settings.affinity_sample_limit
    )
    align_keys_with_storage(profile, rows)
    if not profile.columns:
        raise ValueError(f"No columns to create for table {final_name}")

    ddl = build_create_table(profile)
    batch_size = settings.ingest_batch_size
    inserted = 0

    try:
        async with store.transaction() as tx:
            await tx.execute(ddl)
            for offset in range(0, len(rows), batch_size):
                batch = rows[offset:offset + batch_size]
                await tx.execute(build_insert(profile, batch))
                inserted += len(batch)
                if on_batch:
                    on_batch(inserted, len(rows))
    except SchemaInferenceError as e:
        raise e.with_context(stage="ingest", table=final_name) from e
    except Exception as e:
        raise wrap_error(e, "Ingestion failed", stage="ingest", table=final_name) from e

    logger.info(f"Ingested {inserted} rows into {final_name}")
    return IngestResult(table_name=final_name, profile=profile, inserted=inserted)


async def ingest_frame(
    store: SqliteStore,
    table_name: str,
    df: pd.DataFrame,
    settings: Optional[ProfilingSettings] = None,
) -> IngestResult:
    """Create a table for a DataFrame and insert its rows."""
    frame = df.rename(columns=str)
    rows: List[Mapping[str, Any]] = frame.to_dict(orient="records")
    return await ingest_rows(store, table_name, rows, list(frame.columns), settings)
