"""
Core data models for the schema_scout package.

Defines the plain-data structures produced by profiling and relationship
inference. Everything here is a disposable snapshot derived from the store;
nothing is persisted by the engine itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set


class Affinity(str, Enum):
    """Coarse storage affinity assigned to a column."""
    INTEGER = "INTEGER"
    REAL = "REAL"
    NUMERIC = "NUMERIC"
    TEXT = "TEXT"


@dataclass(frozen=True)
class AffinityResult:
    """Outcome of affinity inference for one column."""
    affinity: Affinity
    is_boolean: bool = False
    is_date_like: bool = False


@dataclass(frozen=True)
class ConstraintProfile:
    """Null and uniqueness profile of one column."""
    null_rate: float
    not_null: bool
    unique: bool


@dataclass
class ColumnProfile:
    """Inferred profile of a single column."""
    name: str
    affinity: Affinity = Affinity.TEXT
    not_null: bool = False
    unique: bool = False
    is_boolean: bool = False
    is_date_like: bool = False
    null_rate: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "affinity": self.affinity.value,
            "not_null": self.not_null,
            "unique": self.unique,
            "is_boolean": self.is_boolean,
            "is_date_like": self.is_date_like,
            "null_rate": self.null_rate,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ColumnProfile:
        """Create from dictionary."""
        return cls(
            name=data["name"],
            affinity=Affinity(data.get("affinity", "TEXT")),
            not_null=data.get("not_null", False),
            unique=data.get("unique", False),
            is_boolean=data.get("is_boolean", False),
            is_date_like=data.get("is_date_like", False),
            null_rate=data.get("null_rate", 0.0),
        )


@dataclass
class TableProfile:
    """Inferred profile of a table: ordered columns plus key information."""
    name: str
    columns: List[ColumnProfile] = field(default_factory=list)
    primary_key: Optional[str] = None
    unique_columns: Set[str] = field(default_factory=set)
    row_count: Optional[int] = None

    @property
    def column_names(self) -> List[str]:
        """Return list of column names."""
        return [c.name for c in self.columns]

    def get_column(self, name: str) -> Optional[ColumnProfile]:
        """Get column by name (case-insensitive)."""
        name_lower = name.lower()
        for col in self.columns:
            if col.name.lower() == name_lower:
                return col
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "columns": [c.to_dict() for c in self.columns],
            "primary_key": self.primary_key,
            "unique_columns": sorted(self.unique_columns),
            "row_count": self.row_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TableProfile:
        """Create from dictionary."""
        return cls(
            name=data["name"],
            columns=[ColumnProfile.from_dict(c) for c in data.get("columns", [])],
            primary_key=data.get("primary_key"),
            unique_columns=set(data.get("unique_columns", [])),
            row_count=data.get("row_count"),
        )


@dataclass
class RelationshipCandidate:
    """
    A child -> parent column pairing verified against stored data.

    The candidate is an accepted relationship only when its coverage meets
    the configured minimum (see ``is_accepted``).
    """
    from_table: str
    from_column: str
    to_table: str
    to_column: str
    coverage: float = 0.0
    matched: int = 0
    total: int = 0
    name_score: float = 0.0

    @property
    def name(self) -> str:
        return f"fk_{self.from_table.lower()}_{self.from_column.lower()}"

    def is_accepted(self, min_coverage: float) -> bool:
        return self.total > 0 and self.coverage >= min_coverage

    def join_example(self) -> str:
        """Render an example join of the child and parent tables."""
        from schema_scout.profiling.literal import quote_identifier as q

        return (
            f"SELECT *\n"
            f"  FROM {q(self.from_table)} c\n"
            f"  JOIN {q(self.to_table)} p\n"
            f"    ON c.{q(self.from_column)} = p.{q(self.to_column)};"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "from_table": self.from_table,
            "from_column": self.from_column,
            "to_table": self.to_table,
            "to_column": self.to_column,
            "coverage": self.coverage,
            "matched": self.matched,
            "total": self.total,
            "name_score": self.name_score,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RelationshipCandidate:
        """Create from dictionary."""
        return cls(
            from_table=data["from_table"],
            from_column=data["from_column"],
            to_table=data["to_table"],
            to_column=data["to_column"],
            coverage=data.get("coverage", 0.0),
            matched=data.get("matched", 0),
            total=data.get("total", 0),
            name_score=data.get("name_score", 0.0),
        )


@dataclass
class InferenceOptions:
    """Thresholds and switches for relationship inference."""
    name_similarity_min_score: float = 0.8
    exclude_bare_id: bool = True
    allow_self_reference: bool = False
    min_coverage: float = 0.8

    # Size of the bounded task pool used to verify columns concurrently
    max_concurrency: int = 4

    def __post_init__(self):
        for attr in ("name_similarity_min_score", "min_coverage"):
            value = getattr(self, attr)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{attr} must be within [0, 1], got {value}")
        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be positive, got {self.max_concurrency}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name_similarity_min_score": self.name_similarity_min_score,
            "exclude_bare_id": self.exclude_bare_id,
            "allow_self_reference": self.allow_self_reference,
            "min_coverage": self.min_coverage,
            "max_concurrency": self.max_concurrency,
        }


@dataclass(frozen=True)
class StoreColumn:
    """A column definition as reported by the store's catalog."""
    name: str
    declared_type: str = ""
    not_null: bool = False
    is_primary_key: bool = False


@dataclass(frozen=True)
class CoverageCount:
    """Result of a child/parent key match count."""
    matched: int
    total: int

    @property
    def coverage(self) -> float:
        return self.matched / self.total if self.total else 0.0
