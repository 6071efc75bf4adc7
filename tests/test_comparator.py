"""Tests for version ordering."""

import pytest

from versioning.comparator import compare_versions, parse_items, version_sort_key


class TestCompareVersions:
    """Release-aware comparison of version strings."""

    @pytest.mark.parametrize("lower,higher", [
        ("1.2.0", "1.10.0"),
        ("1.0-rc1", "1.0"),
        ("1.0.0-dev", "1.0"),
        ("1.0-alpha", "1.0-beta"),
        ("1.0-beta2", "1.0-rc1"),
        ("1.0-rc1", "1.0-rc2"),
        ("1.0-SNAPSHOT", "1.0"),
        ("1.0", "1.0-sp1"),
        ("1.0", "1.0.1"),
        ("1.0-rc1", "1.0.1"),
        ("1.9", "2"),
        ("2.0-foo", "2.0"),
    ])
    def test_ordering(self, lower, higher):
        assert compare_versions(lower, higher) == -1
        assert compare_versions(higher, lower) == 1

    @pytest.mark.parametrize("left,right", [
        ("1.0", "1.0.0"),
        ("1.0", "1.0-final"),
        ("1.0.0", "1.0-GA"),
        ("1.0-RC1", "1.0-rc1"),
        ("1.0a1", "1.0-alpha-1"),
    ])
    def test_equal(self, left, right):
        assert compare_versions(left, right) == 0

    def test_numeric_segments_are_not_lexical(self):
        assert compare_versions("1.10.0", "1.9.0") == 1

    def test_sorting_latest_first(self):
        tags = ["1.0-rc1", "1.10.0", "1.2.0", "1.0"]
        assert sorted(tags, key=version_sort_key, reverse=True) == ["1.10.0", "1.2.0", "1.0", "1.0-rc1"]


class TestParseItems:
    """Splitting versions into items."""

    def test_separators_and_transitions(self):
        assert parse_items("1.2-rc3") == [1, 2, "rc", 3]
        assert parse_items("1.2rc3") == [1, 2, "rc", 3]

    def test_trailing_null_items_are_trimmed(self):
        assert parse_items("1.0.0") == [1]
        assert parse_items("2.0-final") == [2]
