"""Tests for similarity / category result filtering."""

import pytest

from visual_matcher.filters import clamp_similarity, filter_matches
from visual_matcher.models import ScoredItem

from conftest import make_item


@pytest.fixture
def ranked():
    return [
        ScoredItem(make_item(1, "a", category="shoes"), 92),
        ScoredItem(make_item(2, "b", category="bags"), 75),
        ScoredItem(make_item(3, "c", category="shoes"), 75),
        ScoredItem(make_item(4, "d", category="hats"), 40),
        ScoredItem(make_item(5, "e", category="bags"), 0),
    ]


class TestFilterMatches:

    def test_no_filters_returns_input(self, ranked):
        assert filter_matches(ranked, 0, "") == ranked

    def test_none_category_keeps_all(self, ranked):
        assert filter_matches(ranked, 0, None) == ranked

    def test_threshold_is_inclusive(self, ranked):
        result = filter_matches(ranked, 75, "")
        assert [x.id for x in result] == ["1", "2", "3"]

    def test_category_only(self, ranked):
        result = filter_matches(ranked, 0, "bags")
        assert [x.id for x in result] == ["2", "5"]

    def test_threshold_and_category(self, ranked):
        result = filter_matches(ranked, 50, "bags")
        assert [x.id for x in result] == ["2"]

    def test_unknown_category_empty(self, ranked):
        assert filter_matches(ranked, 0, "jackets") == []

    def test_never_grows_and_preserves_order(self, ranked):
        for threshold in (0, 10, 40, 75, 100):
            for category in ("", "shoes", "bags", "hats"):
                result = filter_matches(ranked, threshold, category)
                assert len(result) <= len(ranked)
                positions = [ranked.index(x) for x in result]
                assert positions == sorted(positions)
                assert all(x.similarity >= threshold for x in result)
                assert all(not category or x.category == category for x in result)

    def test_does_not_mutate_input(self, ranked):
        snapshot = list(ranked)
        filter_matches(ranked, 80, "shoes")
        assert ranked == snapshot


class TestClampSimilarity:

    @pytest.mark.parametrize("value,expected", [
        (50, 50), (-5, 0), (150, 100), ("30", 30), (42.6, 43),
        (None, 0), ("abc", 0), (float("nan"), 0), (float("inf"), 0),
    ])
    def test_clamp(self, value, expected):
        assert clamp_similarity(value) == expected
