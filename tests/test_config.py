"""
Tests for YAML configuration loading.
"""

import logging

import pytest
import yaml

from schema_scout.config import ProfilingSettings, ScoutConfig, dump_config, load_config
from schema_scout.models import InferenceOptions


def _write(path, text):
    path.write_text(text)
    return path


class TestLoadConfig:
    """Tests for load_config."""

    def test_none_gives_defaults(self):
        config = load_config(None)
        assert config.inference == InferenceOptions()
        assert config.profiling == ProfilingSettings()

    def test_missing_file_gives_defaults(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            config = load_config(tmp_path / "nope.yaml")
        assert config.inference.min_coverage == 0.8
        assert "Config file not found" in caplog.text

    def test_values(self, tmp_path):
        path = _write(
            tmp_path / "scout.yaml",
            """
inference:
  name_similarity_min_score: 0.7
  allow_self_reference: true
  min_coverage: 0.95
  max_concurrency: 2
profiling:
  affinity_sample_limit: 500
  ingest_batch_size: 50
""",
        )
        config = load_config(path)

        assert config.inference.name_similarity_min_score == 0.7
        assert config.inference.allow_self_reference is True
        assert config.inference.exclude_bare_id is True
        assert config.inference.min_coverage == 0.95
        assert config.inference.max_concurrency == 2
        assert config.profiling.affinity_sample_limit == 500
        assert config.profiling.ingest_batch_size == 50

    def test_empty_file(self, tmp_path):
        config = load_config(_write(tmp_path / "empty.yaml", ""))
        assert config.to_dict() == ScoutConfig().to_dict()

    def test_unknown_keys_ignored(self, tmp_path, caplog):
        path = _write(
            tmp_path / "scout.yaml",
            "inference:\n  min_coverage: 0.5\n  fuzzy: true\nextras:\n  a: 1\n",
        )
        with caplog.at_level(logging.WARNING):
            config = load_config(path)

        assert config.inference.min_coverage == 0.5
        assert "fuzzy" in caplog.text
        assert "extras" in caplog.text

    @pytest.mark.parametrize(
        "text",
        [
            "inference:\n  min_coverage: 1.5\n",
            "inference:\n  max_concurrency: 0\n",
            "profiling:\n  ingest_batch_size: 0\n",
            "profiling:\n  affinity_sample_limit: -1\n",
            "- just\n- a list\n",
        ],
    )
    def test_invalid(self, tmp_path, text):
        with pytest.raises(ValueError):
            load_config(_write(tmp_path / "bad.yaml", text))


class TestDumpConfig:
    """Tests for dump_config."""

    def test_round_trip(self, tmp_path):
        config = ScoutConfig(
            inference=InferenceOptions(min_coverage=0.9, max_concurrency=8),
            profiling=ProfilingSettings(affinity_sample_limit=100),
        )
        path = dump_config(config, tmp_path / "nested" / "scout.yaml")

        assert load_config(path).to_dict() == config.to_dict()

    def test_section_order(self, tmp_path):
        path = dump_config(ScoutConfig(), tmp_path / "scout.yaml")
        data = yaml.safe_load(path.read_text())
        assert list(data) == ["inference", "profiling"]
        assert list(data["inference"])[0] == "name_similarity_min_score"
