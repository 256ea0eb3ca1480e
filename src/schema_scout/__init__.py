"""
Schema Scout - Schema and Relationship Inference for Relational Tables

Infers column affinities, constraints and primary keys from tabular data,
and discovers foreign-key relationships between stored tables.

Features:
- Affinity, null-rate and uniqueness profiling of raw values
- Single-column primary-key selection
- SQL literal coercion for loading rows into a store
- Relationship discovery from naming conventions verified by value coverage
"""

__version__ = "0.1.0"

from schema_scout.models import (
    Affinity,
    AffinityResult,
    ColumnProfile,
    ConstraintProfile,
    InferenceOptions,
    RelationshipCandidate,
    TableProfile,
)
from schema_scout.errors import ErrorKind, SchemaInferenceError

from schema_scout.profiling import (
    infer_affinity,
    infer_table_profile,
    profile_constraints,
    select_primary_key,
    to_sql_literal,
)

from schema_scout.discovery import (
    RelationshipInferrer,
    build_name_based_badges,
    infer_relationships,
)

from schema_scout.store import SqliteStore, Store

__all__ = [
    # Core models
    "Affinity",
    "AffinityResult",
    "ColumnProfile",
    "ConstraintProfile",
    "InferenceOptions",
    "RelationshipCandidate",
    "TableProfile",
    # Errors
    "ErrorKind",
    "SchemaInferenceError",
    # Profiling
    "infer_affinity",
    "infer_table_profile",
    "profile_constraints",
    "select_primary_key",
    "to_sql_literal",
    # Discovery
    "RelationshipInferrer",
    "build_name_based_badges",
    "infer_relationships",
    # Store
    "Store",
    "SqliteStore",
]
