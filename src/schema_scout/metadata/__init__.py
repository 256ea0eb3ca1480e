"""
Metadata introspection for tables that already live in a store.

Combines catalog constraints with observed values to build table profiles.
"""

from schema_scout.metadata.introspector import SchemaIntrospector

__all__ = [
    "SchemaIntrospector",
]
