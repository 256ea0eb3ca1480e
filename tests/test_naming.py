"""Tests for name normalization and Dice similarity."""

import pytest

from schema_scout.discovery.naming import (
    bigrams,
    dice_similarity,
    fk_base,
    is_fk_candidate,
    normalize_name,
)


class TestNormalizeName:
    """Tests for normalize_name."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Categories", "category"),
            ("Boxes", "box"),
            ("churches", "church"),
            ("users", "user"),
            ("order_items", "orderitem"),
            ("Role", "role"),
            ("Address-Book", "addressbook"),
        ],
    )
    def test_normalize(self, name, expected):
        assert normalize_name(name) == expected


class TestDice:
    """Tests for bigrams and Dice similarity."""

    def test_bigrams(self):
        assert bigrams("role") == {"ro", "ol", "le"}
        assert bigrams("aaa") == {"aa"}

    def test_short_strings_are_single_element_sets(self):
        assert bigrams("a") == {"a"}
        assert bigrams("") == {""}

    def test_identical(self):
        assert dice_similarity("role", "role") == 1.0
        assert dice_similarity("a", "a") == 1.0

    def test_disjoint(self):
        assert dice_similarity("role", "user") == 0.0
        assert dice_similarity("a", "b") == 0.0

    def test_partial(self):
        # customer: 7 bigrams, customers: 8 bigrams, 7 shared
        assert dice_similarity("customer", "customers") == pytest.approx(14 / 15)

    @pytest.mark.parametrize(
        "a, b",
        [("role", "roles"), ("x", "xy"), ("", "abc"), ("category", "catalog"), ("ab", "ba")],
    )
    def test_symmetric(self, a, b):
        assert dice_similarity(a, b) == dice_similarity(b, a)


class TestForeignKeyNames:
    """Tests for foreign-key column name detection."""

    @pytest.mark.parametrize(
        "column, expected",
        [
            ("role_id", "role"),
            ("ROLE_ID", "role"),
            ("Role_Id", "role"),
            ("customerId", "customer"),
            ("customerID", "customer"),
            ("categories_id", "category"),
            ("order_item_id", "orderitem"),
        ],
    )
    def test_base(self, column, expected):
        assert fk_base(column) == expected

    @pytest.mark.parametrize("column", ["category", "id", "paid", "AID", "_id", "identity"])
    def test_not_fk_shaped(self, column):
        assert fk_base(column) is None

    def test_bare_id_excluded(self):
        assert not is_fk_candidate("id")
        assert not is_fk_candidate("ID")
        assert not is_fk_candidate("id_id")

    def test_id_base_allowed_without_exclusion(self):
        assert is_fk_candidate("id_id", exclude_bare_id=False)

    def test_candidate(self):
        assert is_fk_candidate("role_id")
        assert not is_fk_candidate("category")
