"""Tests for the deduplicating string table."""

import pytest

from romdat.core.errors import StringTableFull
from romdat.core.string_table import MAX_CAPACITY, StringTable


class TestStringTable:
    """Test interning, lookup and capacity."""

    def test_indices_start_at_one(self, string_table):
        assert string_table.intern("first") == 1
        assert string_table.intern("second") == 2
        assert len(string_table) == 2

    def test_identical_values_share_slot(self, string_table):
        first = string_table.intern("D0 01", used_by="Game A")
        again = string_table.intern("D0 01", used_by="Game B")
        other = string_table.intern("D0 02", used_by="Game C")

        assert first == again == 1
        assert other == 2
        entries = list(string_table)
        assert entries[0].used_by == ["Game A", "Game B"]
        assert entries[1].used_by == ["Game C"]

    def test_match_is_exact(self, string_table):
        assert string_table.intern("abc") != string_table.intern("abc ")

    def test_lookup(self, string_table):
        string_table.intern("value")
        assert string_table.lookup(0) is None
        assert string_table.lookup(1) == "value"
        with pytest.raises(IndexError):
            string_table.lookup(2)

    def test_values_reserve_slot_zero(self, string_table):
        string_table.intern("a")
        string_table.intern("b")
        assert string_table.values() == ["", "a", "b"]
        assert "a" in string_table
        assert "c" not in string_table

    def test_capacity_exceeded(self):
        table = StringTable()
        for n in range(MAX_CAPACITY):
            table.intern(f"cheat {n}")

        # Existing values are still found when the table is full
        assert table.intern("cheat 0") == 1
        with pytest.raises(StringTableFull) as exc_info:
            table.intern("one too many", line=99)
        assert exc_info.value.capacity == MAX_CAPACITY
        assert exc_info.value.line == 99
        assert len(table) == MAX_CAPACITY

    @pytest.mark.parametrize("capacity", [0, 32])
    def test_invalid_capacity(self, capacity):
        with pytest.raises(ValueError):
            StringTable(capacity=capacity)

    def test_compact_renumbers_in_first_seen_order(self, string_table):
        for value in ("a", "b", "c", "d"):
            string_table.intern(value)

        remap = string_table.compact([4, 2])

        assert remap == {2: 1, 4: 2}
        assert string_table.values() == ["", "b", "d"]
        assert "a" not in string_table
        # Released slots are reused by new values
        assert string_table.intern("e") == 3
        assert string_table.intern("d") == 2
