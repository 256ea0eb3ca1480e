"""
Relationship discovery for profiled tables.

Pairs foreign-key-shaped columns with similarly named tables and keeps the
pairs whose values are covered by the parent's key column.

Usage:
    from schema_scout.discovery import infer_relationships

    relationships = await infer_relationships(store)
"""

from schema_scout.discovery.badges import build_name_based_badges
from schema_scout.discovery.naming import bigrams, dice_similarity, fk_base, normalize_name
from schema_scout.discovery.relationship_inferrer import (
    RelationshipInferrer,
    infer_relationships,
    rank_relationships,
)

__all__ = [
    "RelationshipInferrer",
    "infer_relationships",
    "rank_relationships",
    "build_name_based_badges",
    "normalize_name",
    "bigrams",
    "dice_similarity",
    "fk_base",
]
