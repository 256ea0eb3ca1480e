"""
Profiles tables that already live in a store.

Combines catalog metadata (declared primary key, NOT NULL, unique indexes)
with the values actually stored to build TableProfiles.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from schema_scout.config import ProfilingSettings
from schema_scout.errors import SchemaInferenceError, wrap_error
from schema_scout.models import ColumnProfile, TableProfile
from schema_scout.profiling.affinity import is_empty
from schema_scout.profiling.literal import quote_identifier as q
from schema_scout.profiling.primary_key import select_primary_key
from schema_scout.profiling.schema import profile_column
from schema_scout.store.base import Store

logger = logging.getLogger(__name__)


def _has_values(values) -> bool:
    return any(not is_empty(v) for v in values)


class SchemaIntrospector:
    """
    Builds TableProfiles for existing store tables.

    Observed values drive affinity and constraint inference; null rate and
    not-null always agree with the stored data. A unique index or declared
    primary key marks a column unique only when it holds no values yet, since
    SQLite lets a non-INTEGER primary key hold NULLs and the store compares
    untrimmed values. A declared single-column primary key wins over the
    naming heuristic when the data shows it not-null and unique.
    """

    def __init__(self, store: Store, settings: Optional[ProfilingSettings] = None):
        self.store = store
        self.settings = settings or ProfilingSettings()

    async def profile_table(self, table: str) -> TableProfile:
        """
        Profile one table.

        Args:
            table: Table name

        Returns:
            TableProfile

        Raises:
            SchemaInferenceError: If any store query fails
        """
        try:
            return await self._profile_table(table)
        except SchemaInferenceError as e:
            raise e.with_context(stage="profile", table=table) from e
        except Exception as e:
            raise wrap_error(e, "Profiling failed", stage="profile", table=table) from e

    async def _profile_table(self, table: str) -> TableProfile:
        store_columns = await self.store.get_columns(table)
        unique_index = await self.store.get_unique_index_columns(table)

        select_list = ", ".join(q(c.name) for c in store_columns)
        rows = await self.store.query(f"SELECT {select_list} FROM {q(table)}")

        pk_columns = [c.name for c in store_columns if c.is_primary_key]
        declared_pk = pk_columns[0] if len(pk_columns) == 1 else None

        columns: List[ColumnProfile] = []
        for store_col in store_columns:
            values = [row.get(store_col.name) for row in rows]
            profile = profile_column(
                store_col.name, values, self.settings.affinity_sample_limit
            )
            # Catalog uniqueness only fills in for columns with no stored values
            declared_unique = store_col.name in unique_index or store_col.name == declared_pk
            if declared_unique and not profile.unique and not _has_values(values):
                profile.unique = True
            columns.append(profile)

        primary_key = select_primary_key(table, columns, declared_primary_key=declared_pk)
        unique_columns = {c.name for c in columns if c.unique and c.not_null}

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

    async def profile_all(self) -> List[TableProfile]:
        """Profile every table in the store, in the store's table order."""
        tables = await self.store.list_tables()
        profiles = []
        for table in tables:
            profiles.append(await self.profile_table(table))
        logger.info(f"Profiled {len(profiles)} tables")
        return profiles
