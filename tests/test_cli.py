"""
Tests for the command-line interface.
"""

from unittest.mock import AsyncMock, patch

import pytest
import yaml
from click.testing import CliRunner

from schema_scout import __version__
from schema_scout.cli import cli
from schema_scout.config import load_config
from schema_scout.errors import ErrorKind, SchemaInferenceError


@pytest.fixture
def runner():
    return CliRunner()


class TestCli:
    """Tests for cli commands against a small shop database."""

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_profile(self, runner, shop_db):
        result = runner.invoke(cli, ["profile", str(shop_db)])
        assert result.exit_code == 0, result.output
        assert "orders" in result.output
        assert "customers" in result.output

    def test_profile_table(self, runner, shop_db):
        result = runner.invoke(cli, ["profile", str(shop_db), "--table", "orders"])
        assert result.exit_code == 0, result.output
        assert "placed_at" in result.output
        assert "NUMERIC" in result.output

    def test_profile_unknown_table(self, runner, shop_db):
        result = runner.invoke(cli, ["profile", str(shop_db), "--table", "ghost"])
        assert result.exit_code == 1

    def test_missing_database(self, runner, tmp_path):
        result = runner.invoke(cli, ["profile", str(tmp_path / "nope.db")])
        assert result.exit_code == 2

    def test_relations_output(self, runner, shop_db, tmp_path):
        output = tmp_path / "relations.yaml"
        result = runner.invoke(cli, ["relations", str(shop_db), "--output", str(output)])
        assert result.exit_code == 0, result.output

        data = yaml.safe_load(output.read_text())
        assert data["options"]["min_coverage"] == 0.8
        assert len(data["relationships"]) == 1

        rel = data["relationships"][0]
        assert (rel["from_table"], rel["from_column"]) == ("orders", "customer_id")
        assert (rel["to_table"], rel["to_column"]) == ("customers", "id")
        assert rel["coverage"] == 1.0
        assert 'JOIN "customers" p' in rel["join_example"]

    def test_relations_self_reference(self, runner, shop_db, tmp_path):
        output = tmp_path / "relations.yaml"
        result = runner.invoke(
            cli,
            ["relations", str(shop_db), "--allow_self_reference", "--output", str(output)],
        )
        assert result.exit_code == 0, result.output

        data = yaml.safe_load(output.read_text())
        pairs = {(r["from_table"], r["to_table"]) for r in data["relationships"]}
        assert pairs == {("orders", "customers"), ("categories", "categories")}

    def test_relations_with_config(self, runner, shop_db, tmp_path):
        config = tmp_path / "scout.yaml"
        config.write_text("inference:\n  min_coverage: 0.5\n  max_concurrency: 1\n")
        output = tmp_path / "relations.yaml"

        result = runner.invoke(
            cli,
            ["relations", str(shop_db), "--config", str(config), "--output", str(output)],
        )
        assert result.exit_code == 0, result.output
        data = yaml.safe_load(output.read_text())
        assert data["options"]["min_coverage"] == 0.5
        assert data["options"]["max_concurrency"] == 1

    def test_relations_invalid_option(self, runner, shop_db):
        result = runner.invoke(cli, ["relations", str(shop_db), "--min_coverage", "1.5"])
        assert result.exit_code == 2

    def test_relations_failure_exits_non_zero(self, runner, shop_db):
        error = SchemaInferenceError(ErrorKind.QUERY_FAILED, "boom", stage="coverage")
        with patch("schema_scout.cli._infer_store", AsyncMock(side_effect=error)):
            result = runner.invoke(cli, ["relations", str(shop_db)])

        assert result.exit_code == 1
        assert "query_failed" in result.output

    def test_badges(self, runner, shop_db):
        result = runner.invoke(cli, ["badges", str(shop_db)])
        assert result.exit_code == 0, result.output
        assert "customer_id" in result.output

    def test_quality(self, runner, shop_db, tmp_path):
        out_dir = tmp_path / "out"
        result = runner.invoke(cli, ["quality", str(shop_db), "--output_dir", str(out_dir)])
        assert result.exit_code == 0, result.output
        assert (out_dir / "report" / "quality.json").exists()
        assert (out_dir / "report" / "quality.md").exists()

    def test_quality_without_relationships(self, runner, shop_db):
        result = runner.invoke(cli, ["quality", str(shop_db), "--no_relationships"])
        assert result.exit_code == 0, result.output

    def test_init_config(self, runner, tmp_path):
        path = tmp_path / "scout.yaml"
        result = runner.invoke(cli, ["init-config", str(path)])
        assert result.exit_code == 0, result.output
        assert load_config(path).inference.min_coverage == 0.8
