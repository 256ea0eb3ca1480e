"""
Configuration for profiling and relationship inference.

Settings are read from a YAML file of the form:

    inference:
      name_similarity_min_score: 0.8
      exclude_bare_id: true
      allow_self_reference: false
      min_coverage: 0.8
      max_concurrency: 4
    profiling:
      affinity_sample_limit: null
      ingest_batch_size: 1000
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from schema_scout.models import InferenceOptions

logger = logging.getLogger(__name__)


@dataclass
class ProfilingSettings:
    """Settings for profiling and ingestion."""
    # Rows used for affinity inference; None scans every row
    affinity_sample_limit: Optional[int] = None
    ingest_batch_size: int = 1000

    def __post_init__(self):
        if self.affinity_sample_limit is not None and self.affinity_sample_limit < 1:
            raise ValueError(
                f"affinity_sample_limit must be positive or null, got {self.affinity_sample_limit}"
            )
        if self.ingest_batch_size < 1:
            raise ValueError(f"ingest_batch_size must be positive, got {self.ingest_batch_size}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "affinity_sample_limit": self.affinity_sample_limit,
            "ingest_batch_size": self.ingest_batch_size,
        }


@dataclass
class ScoutConfig:
    """Complete configuration."""
    inference: InferenceOptions = field(default_factory=InferenceOptions)
    profiling: ProfilingSettings = field(default_factory=ProfilingSettings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "inference": self.inference.to_dict(),
            "profiling": self.profiling.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ScoutConfig:
        """Create from dictionary, ignoring unknown keys with a warning."""
        for key in data:
            if key not in ("inference", "profiling"):
                logger.warning(f"Ignoring unknown config section: {key}")
        return cls(
            inference=InferenceOptions(**_known_keys(InferenceOptions, data.get("inference") or {})),
            profiling=ProfilingSettings(**_known_keys(ProfilingSettings, data.get("profiling") or {})),
        )


def _known_keys(cls, section: Dict[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    known = {}
    for key, value in section.items():
        if key in names:
            known[key] = value
        else:
            logger.warning(f"Ignoring unknown {cls.__name__} key: {key}")
    return known


def load_config(path: Union[str, Path, None]) -> ScoutConfig:
    """
    Load configuration from a YAML file.

    A missing file yields the defaults. Invalid values raise ValueError.
    """
    if path is None:
        return ScoutConfig()

    path = Path(path)
    if not path.exists():
        logger.warning(f"Config file not found: {path}, using defaults")
        return ScoutConfig()

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    config = ScoutConfig.from_dict(data)
    logger.info(f"Loaded config from {path}")
    return config


def dump_config(config: ScoutConfig, path: Union[str, Path]) -> Path:
    """Write configuration to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
    return path
