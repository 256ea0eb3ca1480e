"""
Column and table profiling.

Infers affinity, null rate, not-null, uniqueness and primary-key candidates
from observed values, and converts raw values into SQL literals.
"""

from schema_scout.profiling.affinity import infer_affinity, map_declared_affinity
from schema_scout.profiling.constraints import profile_constraints
from schema_scout.profiling.literal import quote_identifier, to_sql_literal
from schema_scout.profiling.primary_key import select_primary_key
from schema_scout.profiling.schema import infer_table_profile, profile_column, profile_frame

__all__ = [
    "infer_affinity",
    "map_declared_affinity",
    "profile_constraints",
    "select_primary_key",
    "to_sql_literal",
    "quote_identifier",
    "infer_table_profile",
    "profile_column",
    "profile_frame",
]
