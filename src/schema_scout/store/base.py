"""
Read-only interface the inference engine needs from a relational store.

Implementations perform I/O, so every method is a coroutine. The engine
takes no locks: if the store is written to while a pass runs, results are
a best-effort snapshot that may mix states across queries.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Set

from schema_scout.models import CoverageCount, StoreColumn


class Store(ABC):
    """Queryable relational store consumed by profiling and inference."""

    @abstractmethod
    async def list_tables(self) -> List[str]:
        """Return user table names."""

    @abstractmethod
    async def get_columns(self, table: str) -> List[StoreColumn]:
        """Return column definitions of a table in declaration order."""

    @abstractmethod
    async def get_unique_index_columns(self, table: str) -> Set[str]:
        """Return columns covered by single-column uniqueness constraints."""

    @abstractmethod
    async def count_rows(self, table: str) -> int:
        """Return the number of rows in a table."""

    @abstractmethod
    async def count_distinct_non_null(self, table: str, column: str) -> int:
        """Return the number of distinct non-null values of a column."""

    @abstractmethod
    async def count_matching_keys(
        self,
        child_table: str,
        child_column: str,
        parent_table: str,
        parent_key: str,
    ) -> CoverageCount:
        """
        Count non-null child values that equal some parent key value.

        Values are compared in text form. ``total`` is the number of
        non-null child values.
        """

    @abstractmethod
    async def query(
        self,
        sql: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """Run a parameterized read query and return rows as dictionaries."""
