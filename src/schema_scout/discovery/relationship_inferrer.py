"""
Relationship Inferrer - Discovers foreign-key relationships between tables.

Combines two sources of evidence:
1. Column naming conventions (<base>_id / <base>Id paired with similarly
   named tables)
2. Value overlap, verified with a coverage query against the store

Only pairs whose coverage meets the configured minimum are returned. The
store is read without locks; if it is written to during a pass the result
is a best-effort snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from schema_scout.errors import wrap_error
from schema_scout.models import InferenceOptions, RelationshipCandidate, TableProfile
from schema_scout.discovery.naming import dice_similarity, fk_base, is_fk_candidate, normalize_name
from schema_scout.store.base import Store

logger = logging.getLogger(__name__)


class RelationshipInferrer:
    """
    Infers child -> parent column relationships for a set of profiled tables.

    For every foreign-key-shaped column the inferrer:

    1. Finds candidate parent tables whose normalized name is similar enough
       (Dice score over character bigrams) to the column's base name
    2. Resolves each candidate's key column (declared or profiled primary key,
       a column named ``id``, a single-column unique index, or a column whose
       distinct count equals the row count)
    3. Measures how many non-null child values exist among the parent keys
    4. Keeps the parent with the highest coverage at or above ``min_coverage``

    Columns are verified concurrently through a bounded task pool; the
    coverage checks of one column run in sequence and all finish before its
    best parent is chosen.
    """

    def __init__(self, store: Store, options: Optional[InferenceOptions] = None):
        """
        Initialize the inferrer.

        Args:
            store: Store holding the profiled tables
            options: Thresholds and switches (defaults if omitted)
        """
        self.store = store
        self.options = options or InferenceOptions()

        # Parent keys resolved during the current pass
        self._key_cache: Dict[str, Optional[str]] = {}
        self._key_locks: Dict[str, asyncio.Lock] = {}

    def find_name_candidates(
        self,
        child: TableProfile,
        column: str,
        profiles: Sequence[TableProfile],
    ) -> List[Tuple[TableProfile, float]]:
        """
        Return (parent profile, Dice score) pairs that pass the name threshold.

        Parents keep the order of ``profiles``.
        """
        if not is_fk_candidate(column, self.options.exclude_bare_id):
            return []
        base = fk_base(column)

        candidates = []
        for parent in profiles:
            if parent.name == child.name and not self.options.allow_self_reference:
                continue
            score = dice_similarity(base, normalize_name(parent.name))
            if score >= self.options.name_similarity_min_score:
                candidates.append((parent, score))
        return candidates

    async def resolve_parent_key(self, parent: TableProfile) -> Optional[str]:
        """Return the key column of a parent table, resolving it once per pass."""
        lock = self._key_locks.setdefault(parent.name, asyncio.Lock())
        async with lock:
            if parent.name not in self._key_cache:
                try:
                    self._key_cache[parent.name] = await self._find_parent_key(parent)
                except Exception as e:
                    raise wrap_error(
                        e, "Parent key resolution failed", stage="parent_key", table=parent.name
                    ) from e
            return self._key_cache[parent.name]

    async def _find_parent_key(self, parent: TableProfile) -> Optional[str]:
        if parent.primary_key:
            return parent.primary_key

        id_column = parent.get_column("id")
        if id_column:
            return id_column.name

        unique_index = await self.store.get_unique_index_columns(parent.name)
        for col in parent.columns:
            if col.name in unique_index:
                return col.name

        rows = await self.store.count_rows(parent.name)
        if rows > 0:
            for col in parent.columns:
                distinct = await self.store.count_distinct_non_null(parent.name, col.name)
                if distinct == rows:
                    return col.name

        logger.debug(f"No key column found for {parent.name}")
        return None

    async def verify_column(
        self,
        child: TableProfile,
        column: str,
        parents: Sequence[Tuple[TableProfile, float]],
    ) -> Optional[RelationshipCandidate]:
        """Check coverage against every name-matched parent and keep the best."""
        best: Optional[RelationshipCandidate] = None

        for parent, score in parents:
            key = await self.resolve_parent_key(parent)
            if key is None:
                continue

            try:
                counts = await self.store.count_matching_keys(child.name, column, parent.name, key)
            except Exception as e:
                raise wrap_error(
                    e, "Coverage query failed", stage="coverage", table=child.name, column=column
                ) from e

            candidate = RelationshipCandidate(
                from_table=child.name,
                from_column=column,
                to_table=parent.name,
                to_column=key,
                coverage=counts.coverage,
                matched=counts.matched,
                total=counts.total,
                name_score=score,
            )
            logger.debug(
                f"{child.name}.{column} -> {parent.name}.{key}: "
                f"{counts.matched}/{counts.total} ({counts.coverage:.0%})"
            )

            if not candidate.is_accepted(self.options.min_coverage):
                continue
            # Strictly greater keeps the first parent seen on ties
            if best is None or candidate.coverage > best.coverage:
                best = candidate

        return best

    async def infer(self, profiles: Sequence[TableProfile]) -> List[RelationshipCandidate]:
        """
        Run a full inference pass.

        Args:
            profiles: Table profiles in the order used for tie-breaking

        Returns:
            Accepted relationships in table order, then column order

        Raises:
            SchemaInferenceError: If any store query fails; no partial result
        """
        self._key_cache = {}
        self._key_locks = {}

        jobs = []
        for child in profiles:
            for col in child.columns:
                parents = self.find_name_candidates(child, col.name, profiles)
                if parents:
                    jobs.append((child, col.name, parents))

        logger.info(
            f"Verifying {len(jobs)} candidate columns across {len(profiles)} tables "
            f"(concurrency {self.options.max_concurrency})"
        )

        semaphore = asyncio.Semaphore(self.options.max_concurrency)

        async def run(child: TableProfile, column: str, parents):
            async with semaphore:
                return await self.verify_column(child, column, parents)

        tasks = [asyncio.ensure_future(run(*job)) for job in jobs]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        relationships = [r for r in results if r is not None]
        logger.info(f"Accepted {len(relationships)} relationships from {len(jobs)} candidates")
        return relationships


def rank_relationships(relationships: Sequence[RelationshipCandidate]) -> List[RelationshipCandidate]:
    """Order relationships by coverage, then matched count, highest first."""
    return sorted(relationships, key=lambda r: (r.coverage, r.matched), reverse=True)


async def infer_relationships(
    store: Store,
    profiles: Optional[Sequence[TableProfile]] = None,
    options: Optional[InferenceOptions] = None,
    settings=None,
) -> List[RelationshipCandidate]:
    """
    Convenience function to profile a store (if needed) and infer relationships.

    Args:
        store: Store to read
        profiles: Table profiles; built from the store when omitted
        options: Inference options
        settings: ProfilingSettings used when building profiles

    Returns:
        Accepted relationships
    """
    if profiles is None:
        from schema_scout.metadata.introspector import SchemaIntrospector

        profiles = await SchemaIntrospector(store, settings).profile_all()

    inferrer = RelationshipInferrer(store, options)
    return await inferrer.infer(profiles)
