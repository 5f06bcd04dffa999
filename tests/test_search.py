"""Tests for typo-tolerant product search."""

import pytest

from storefront.services.search import (
    fuzzy_match,
    levenshtein_distance,
    search_products,
    search_suggestions,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def products(make_product):
    return [
        make_product(
            "rebozo",
            name="Rebozo de Seda",
            category="Textiles y Ropa",
            state="Oaxaca",
            materials=["seda"],
        ),
        make_product(
            "jarron",
            name="Jarrón de Barro Negro",
            category="Cerámica y Alfarería",
            state="Oaxaca",
            materials=["barro"],
            verified=True,
            featured=True,
        ),
        make_product(
            "collar",
            name="Collar de Plata",
            category="Joyería",
            state="Chiapas",
            materials=["plata", "ámbar"],
            in_stock=False,
        ),
    ]


@pytest.mark.parametrize(
    ("left", "right", "distance"),
    [("", "abc", 3), ("barro", "barro", 0), ("barro", "baro", 1), ("kitten", "sitting", 3)],
)
def test_levenshtein_distance(left, right, distance):
    assert levenshtein_distance(left, right) == distance


def test_fuzzy_match_ranks_exact_over_contains_over_prefix():
    exact = fuzzy_match("Plata", "plata")
    contains = fuzzy_match("Collar de Plata", "plata")
    prefix = fuzzy_match("Collar de Plata", "col pla")
    assert exact == 1.0
    assert 0.8 <= contains <= 0.9
    assert prefix == 0.7
    assert fuzzy_match("", "plata") == 0.0


def test_fuzzy_match_tolerates_typos():
    assert fuzzy_match("Rebozo de Seda", "rebozzo") > 0
    assert fuzzy_match("Rebozo de Seda", "xyzxyz") == 0.0


def test_search_ranks_name_matches_first(products):
    hits = search_products(products, "barro")
    assert hits[0].product.id == "jarron"
    assert "name" in hits[0].matched_fields
    assert "materials" in hits[0].matched_fields


def test_search_with_typo_still_finds_product(products):
    hits = search_products(products, "rebozzo", min_score=0.05)
    assert [hit.product.id for hit in hits] == ["rebozo"]


def test_blank_query_returns_nothing(products):
    assert search_products(products, "   ") == []


def test_search_respects_limit_and_boosts(products):
    hits = search_products(products, "oaxaca", limit=1, min_score=0.1)
    assert [hit.product.id for hit in hits] == ["jarron"]


def test_weak_matches_fall_below_default_threshold(products):
    assert search_products(products, "oaxaca") == []


def test_suggestions_prefer_prefix_matches(products):
    suggestions = search_suggestions(products, "pla")
    assert suggestions[0] == "plata"
    assert "Collar de Plata" in suggestions


def test_suggestions_need_two_characters(products):
    assert search_suggestions(products, "p") == []
