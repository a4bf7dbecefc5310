"""Tests for search, URL lookup and pagination."""
import pytest

from filmwaiver.parse.models import DiscountRecord
from filmwaiver.query.search import (
    festival_slug,
    lookup_by_urls,
    paginate,
    search_discounts,
)
from filmwaiver.store.fixtures import STATIC_DISCOUNTS

SUNDANCE = STATIC_DISCOUNTS[0]
TRIBECA = STATIC_DISCOUNTS[1]


def test_fixture_set_is_well_formed():
    """Test fixtures: ten records, unique codes, all valid."""
    assert len(STATIC_DISCOUNTS) == 10
    assert len({r.code for r in STATIC_DISCOUNTS}) == 10
    assert all(r.is_valid() for r in STATIC_DISCOUNTS)
    assert SUNDANCE.code == "SUNDANCE25"


def test_empty_query_returns_everything():
    """Test that an empty query matches all records in order."""
    assert search_discounts(STATIC_DISCOUNTS, "") == list(STATIC_DISCOUNTS)
    assert search_discounts(STATIC_DISCOUNTS, None) == list(STATIC_DISCOUNTS)


def test_whitespace_in_query_is_significant():
    """Test that the query is matched as given, spaces included."""
    assert search_discounts(STATIC_DISCOUNTS, " 25% ") == [SUNDANCE]
    assert search_discounts(STATIC_DISCOUNTS, "sundance25 ") == []
    assert search_discounts(STATIC_DISCOUNTS, "   ") == []


@pytest.mark.parametrize("query", ["sundance", "25%", "SUNDANCE25", "Sundance FILM"])
def test_search_finds_sundance(query):
    """Test matching on name, offer and code, case-insensitively."""
    assert SUNDANCE in search_discounts(STATIC_DISCOUNTS, query)


def test_search_excludes_non_matching():
    """Test that unrelated queries do not match."""
    assert SUNDANCE not in search_discounts(STATIC_DISCOUNTS, "cannes")


def test_search_preserves_order():
    """Test that results keep the record set order."""
    result = search_discounts(STATIC_DISCOUNTS, "festival")
    expected = [r for r in STATIC_DISCOUNTS if "festival" in r.search_text()]
    assert result == expected
    assert len(result) == 9


def test_paginate_ten_fixtures():
    """Test page 0 holds all ten and page 1 is empty."""
    first = paginate(STATIC_DISCOUNTS, page=0, size=10)
    assert len(first.items) == 10
    assert first.has_more is False

    second = paginate(STATIC_DISCOUNTS, page=1, size=10)
    assert second.items == []
    assert second.has_more is False
    assert second.total == 10


def test_paginate_small_pages():
    """Test has_more on partial pages."""
    page0 = paginate(STATIC_DISCOUNTS, page=0, size=3)
    assert len(page0.items) == 3
    assert page0.has_more is True

    page3 = paginate(STATIC_DISCOUNTS, page=3, size=3)
    assert page3.items == [STATIC_DISCOUNTS[9]]
    assert page3.has_more is False


def test_paginate_without_page_returns_all():
    """Test that pagination is optional."""
    result = paginate(STATIC_DISCOUNTS)
    assert len(result.items) == 10
    assert result.page is None
    assert result.has_more is False


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://filmfreeway.com/SundanceFilmFestival", "sundancefilmfestival"),
        ("https://filmfreeway.com/Tribeca-Film-Festival/", "tribecafilmfestival"),
        ("filmfreeway.com/sxsw?utm_source=x", "sxsw"),
        ("https://filmfreeway.com/festivals/12345", "12345"),
        ("https://filmfreeway.com/", ""),
        ("", ""),
    ],
)
def test_festival_slug(url, expected):
    """Test identifier derivation from URL paths."""
    assert festival_slug(url) == expected


def test_lookup_exact_slug():
    """Test lookup with the fixture's own festival URL."""
    result = lookup_by_urls(STATIC_DISCOUNTS, ["https://filmfreeway.com/sundancefilmfestival"])
    assert result == [SUNDANCE]


def test_lookup_substring_both_ways():
    """Test containment in either direction."""
    shorter = lookup_by_urls(STATIC_DISCOUNTS, ["https://filmfreeway.com/sundance"])
    longer = lookup_by_urls(STATIC_DISCOUNTS, ["https://filmfreeway.com/SundanceFilmFestival2026"])
    assert shorter == [SUNDANCE]
    assert longer == [SUNDANCE]


def test_lookup_matches_on_name_when_url_missing():
    """Test the normalized-name match."""
    record = DiscountRecord(festival_name="Raindance Film Festival", code="RAIN2025")
    assert lookup_by_urls([record], ["https://filmfreeway.com/raindance"]) == [record]


def test_lookup_unions_and_dedupes():
    """Test several URLs, including repeats, in record order."""
    urls = [
        "https://filmfreeway.com/tribecafilmfestival",
        "https://filmfreeway.com/sundancefilmfestival",
        "https://filmfreeway.com/SundanceFilmFestival",
    ]
    assert lookup_by_urls(STATIC_DISCOUNTS, urls) == [SUNDANCE, TRIBECA]


def test_lookup_with_empty_slug_matches_nothing():
    """Test that a bare domain does not match every record."""
    assert lookup_by_urls(STATIC_DISCOUNTS, ["https://filmfreeway.com/"]) == []
