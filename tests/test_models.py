"""Tests for core data models."""

import pytest

from schema_scout.models import (
    Affinity,
    ColumnProfile,
    CoverageCount,
    InferenceOptions,
    RelationshipCandidate,
    TableProfile,
)


class TestColumnProfile:
    """Tests for ColumnProfile."""

    def test_defaults(self):
        col = ColumnProfile(name="notes")
        assert col.affinity == Affinity.TEXT
        assert col.not_null is False
        assert col.unique is False
        assert col.null_rate == 0.0

    def test_serialization(self):
        col = ColumnProfile(
            name="active",
            affinity=Affinity.INTEGER,
            not_null=True,
            is_boolean=True,
            null_rate=0.0,
        )
        data = col.to_dict()
        assert data["affinity"] == "INTEGER"

        restored = ColumnProfile.from_dict(data)
        assert restored == col


class TestTableProfile:
    """Tests for TableProfile."""

    def test_basic_table(self):
        table = TableProfile(
            name="users",
            columns=[
                ColumnProfile(name="id", affinity=Affinity.INTEGER, not_null=True, unique=True),
                ColumnProfile(name="email", not_null=True, unique=True),
                ColumnProfile(name="role_id", affinity=Affinity.INTEGER),
            ],
            primary_key="id",
            unique_columns={"id", "email"},
            row_count=10,
        )
        assert table.column_names == ["id", "email", "role_id"]
        assert table.primary_key == "id"

    def test_case_insensitive_column_lookup(self):
        table = TableProfile(name="users", columns=[ColumnProfile(name="Role_ID")])
        assert table.get_column("role_id") is not None
        assert table.get_column("ROLE_ID").name == "Role_ID"
        assert table.get_column("missing") is None

    def test_serialization_sorts_unique_columns(self):
        table = TableProfile(
            name="users",
            columns=[ColumnProfile(name="id"), ColumnProfile(name="email")],
            unique_columns={"id", "email"},
        )
        data = table.to_dict()
        assert data["unique_columns"] == ["email", "id"]

        restored = TableProfile.from_dict(data)
        assert restored.unique_columns == {"id", "email"}
        assert restored.column_names == ["id", "email"]


class TestRelationshipCandidate:
    """Tests for RelationshipCandidate."""

    def test_name(self):
        rel = RelationshipCandidate("Users", "Role_ID", "roles", "id")
        assert rel.name == "fk_users_role_id"

    def test_is_accepted(self):
        rel = RelationshipCandidate("users", "role_id", "roles", "id", coverage=0.8, matched=4, total=5)
        assert rel.is_accepted(0.8)
        assert not rel.is_accepted(0.81)

    def test_empty_child_never_accepted(self):
        rel = RelationshipCandidate("users", "role_id", "roles", "id", coverage=0.0, matched=0, total=0)
        assert not rel.is_accepted(0.0)

    def test_join_example(self):
        rel = RelationshipCandidate("order items", "order_id", "orders", "id")
        sql = rel.join_example()
        assert 'FROM "order items" c' in sql
        assert 'JOIN "orders" p' in sql
        assert 'ON c."order_id" = p."id"' in sql

    def test_serialization(self):
        rel = RelationshipCandidate(
            "users", "role_id", "roles", "id", coverage=1.0, matched=4, total=4, name_score=1.0
        )
        assert RelationshipCandidate.from_dict(rel.to_dict()) == rel


class TestInferenceOptions:
    """Tests for InferenceOptions."""

    def test_defaults(self):
        options = InferenceOptions()
        assert options.name_similarity_min_score == 0.8
        assert options.exclude_bare_id is True
        assert options.allow_self_reference is False
        assert options.min_coverage == 0.8

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"min_coverage": 1.5},
            {"min_coverage": -0.1},
            {"name_similarity_min_score": 2},
            {"max_concurrency": 0},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            InferenceOptions(**kwargs)


class TestCoverageCount:
    """Tests for CoverageCount."""

    def test_coverage(self):
        assert CoverageCount(matched=3, total=4).coverage == 0.75

    def test_zero_total(self):
        assert CoverageCount(matched=0, total=0).coverage == 0.0
