"""Tests for bounded ascending and descending key scans."""

import itertools

import pytest

from logkv_shell.scan import ascending_keys, descending_keys, seek_at_or_before

BOUNDS = [None, b"", b"0", b"a", b"aa", b"b", b"bb", b"c", b"d", b"e"]


def up(store, start=None, end=None):
    with store.iterator() as cursor:
        return list(ascending_keys(cursor, start, end))


def down(store, start=None, end=None):
    with store.iterator() as cursor:
        return list(descending_keys(cursor, start, end))


class TestAscending:
    """Test the ascending scan."""

    def test_unbounded(self, abcd_store):
        """Test that no bounds lists every key."""
        assert up(abcd_store) == [b"a", b"b", b"c", b"d"]

    def test_inclusive_bounds(self, abcd_store):
        """Test that both bounds are inclusive."""
        assert up(abcd_store, b"b", b"c") == [b"b", b"c"]

    def test_bounds_between_keys(self, abcd_store):
        """Test bounds that are not keys themselves."""
        assert up(abcd_store, b"aa", b"bb") == [b"b"]

    def test_start_only(self, abcd_store):
        """Test that a missing end runs to the last key."""
        assert up(abcd_store, b"c") == [b"c", b"d"]

    def test_empty_store(self, store):
        """Test that an empty store yields nothing."""
        assert up(store) == []


class TestDescending:
    """Test the descending scan."""

    def test_unbounded(self, abcd_store):
        """Test that no bounds lists every key in reverse."""
        assert down(abcd_store) == [b"d", b"c", b"b", b"a"]

    def test_inclusive_bounds(self, abcd_store):
        """Test that the scan walks from its upper bound down to its lower."""
        assert down(abcd_store, b"c", b"b") == [b"c", b"b"]

    def test_start_between_keys(self, abcd_store):
        """Test that a start between two keys begins at the smaller one."""
        assert down(abcd_store, b"bb") == [b"b", b"a"]

    def test_start_past_last_key(self, abcd_store):
        """Test that a start beyond every key begins at the last key."""
        assert down(abcd_store, b"z") == [b"d", b"c", b"b", b"a"]

    def test_start_before_first_key(self, abcd_store):
        """Test that a start below every key yields nothing."""
        assert down(abcd_store, b"0") == []

    def test_empty_store(self, store):
        """Test that an empty store yields nothing."""
        assert down(store) == []
        assert down(store, b"a") == []


class TestSeekAtOrBefore:
    """Test the reverse seek adjustment."""

    @pytest.mark.parametrize(
        "target,expected",
        [(b"a", b"a"), (b"aa", b"a"), (b"c", b"c"), (b"cz", b"c"), (b"zz", b"d")],
    )
    def test_lands_on_largest_key_not_above(self, abcd_store, target, expected):
        """Test that the cursor lands on the largest key <= target."""
        with abcd_store.iterator() as cursor:
            seek_at_or_before(cursor, target)
            assert cursor.key() == expected

    def test_invalid_when_all_keys_larger(self, abcd_store):
        """Test that no key <= target leaves the cursor invalid."""
        with abcd_store.iterator() as cursor:
            seek_at_or_before(cursor, b"0")
            assert not cursor.valid()


def test_scans_visit_same_keys_in_opposite_order(abcd_store):
    """Every inclusive range yields the same keys both ways."""
    abcd_store.put(b"aa", b"")
    abcd_store.put(b"ab", b"")
    for low, high in itertools.product(BOUNDS, repeat=2):
        if low is not None and high is not None and low > high:
            continue
        forward = up(abcd_store, low, high)
        backward = down(abcd_store, high, low)
        assert backward == forward[::-1], (low, high)
