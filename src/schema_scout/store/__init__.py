"""
Store access for profiling and relationship inference.
"""

from schema_scout.store.base import Store
from schema_scout.store.sqlite import SqliteStore, StoreTransaction

__all__ = ["Store", "SqliteStore", "StoreTransaction"]
