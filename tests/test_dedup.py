"""Tests for the deduplicator."""

import pytest

from romdat.core.dedup import collapse_hash_runs, deduplicate, is_elidable
from romdat.core.entries import DirectConfig, Entry, ReferenceConfig, SaveKind
from romdat.core.errors import UnresolvedReference
from romdat.core.resolver import resolve_references
from romdat.core.sorter import sort_entries

from conftest import md5

CUSTOM = DirectConfig(save_kind=SaveKind.SRAM, player_count=2)


def prepare(entries):
    return sort_entries(resolve_references(entries))


class TestHashCollisionCollapse:
    """Test the first pass."""

    def test_reference_duplicate_collapses(self):
        entries = prepare([
            Entry(md5(1), content_hash=0x10, config=CUSTOM),
            Entry(md5(2), content_hash=0x10, reference_identity_key=md5(1)),
        ])
        result = deduplicate(entries)

        assert [e.identity_key for e in result.entries] == [md5(1)]
        assert result.entries[0].config == CUSTOM
        assert result.duplicates_dropped == 1

    def test_distinct_items_sharing_checksum_survive(self):
        entries = prepare([
            Entry(md5(1), content_hash=0x10, config=CUSTOM),
            Entry(md5(2), content_hash=0x10),
        ])
        assert len(deduplicate(entries).entries) == 2

    def test_first_of_run_is_kept_even_if_reference(self):
        entries = [
            Entry(md5(1), content_hash=0x10, reference_identity_key=md5(3)),
            Entry(md5(2), content_hash=0x10, reference_identity_key=md5(3)),
        ]
        assert [e.identity_key for e in collapse_hash_runs(entries)] == [md5(1)]


class TestDefaultElision:
    """Test the second pass and linking."""

    def test_default_reference_becomes_reference_record(self):
        entries = prepare([
            Entry(md5(1), content_hash=0x20, config=CUSTOM),
            Entry(md5(2), content_hash=0x10, reference_identity_key=md5(1)),
        ])
        result = deduplicate(entries)

        ref, target = result.entries
        assert ref.config == ReferenceConfig(target_index=1)
        assert target.identity_key == md5(1)
        assert target.is_direct
        assert result.elided == 1

    def test_reference_with_overrides_stays_direct(self):
        entries = prepare([
            Entry(md5(1), content_hash=0x20, config=CUSTOM),
            Entry(md5(2), content_hash=0x10, config=DirectConfig(status=3),
                  reference_identity_key=md5(1)),
        ])
        result = deduplicate(entries)

        assert result.entries[0].config == DirectConfig(status=3)
        assert result.elided == 0

    def test_reference_with_cheat_stays_direct(self):
        entry = Entry(md5(2), config=DirectConfig(string_ref=1),
                      reference_identity_key=md5(1), target_key=md5(1))
        assert not is_elidable(entry)

    def test_default_non_reference_stays_direct(self):
        entries = prepare([Entry(md5(1), content_hash=0x10)])
        result = deduplicate(entries)
        assert result.entries[0].config == DirectConfig()

    def test_chained_references_point_at_direct_entry(self):
        entries = prepare([
            Entry(md5(1), content_hash=0x30, config=CUSTOM),
            Entry(md5(2), content_hash=0x20, reference_identity_key=md5(1)),
            Entry(md5(3), content_hash=0x10, reference_identity_key=md5(2)),
        ])
        result = deduplicate(entries)

        assert [e.config for e in result.entries] == [
            ReferenceConfig(target_index=2),
            ReferenceConfig(target_index=2),
            CUSTOM,
        ]

    def test_collapsed_target_falls_back_to_checksum(self):
        entries = prepare([
            Entry(md5(1), content_hash=0x30, config=CUSTOM),
            # Same checksum as md5(1), dropped by the first pass
            Entry(md5(2), content_hash=0x30, reference_identity_key=md5(1)),
            Entry(md5(3), content_hash=0x10, reference_identity_key=md5(2)),
        ])
        result = deduplicate(entries)

        assert [e.identity_key for e in result.entries] == [md5(3), md5(1)]
        assert result.entries[0].config == ReferenceConfig(target_index=1)


class TestOrphans:
    """Test references that cannot be linked."""

    def test_unresolved_reference_is_dropped(self):
        entries = prepare([
            Entry(md5(1), content_hash=0x10),
            Entry(md5(2), content_hash=0x20, config=CUSTOM, reference_identity_key=md5(9)),
        ])
        result = deduplicate(entries)

        assert [e.identity_key for e in result.entries] == [md5(1)]
        assert result.unresolved_dropped == 1

    def test_unresolved_reference_strict(self):
        entries = prepare([Entry(md5(2), content_hash=0x20, reference_identity_key=md5(9))])
        with pytest.raises(UnresolvedReference):
            deduplicate(entries, strict=True)

    def test_reference_cycle_is_dropped(self):
        entries = prepare([
            Entry(md5(1), content_hash=0x10, reference_identity_key=md5(2)),
            Entry(md5(2), content_hash=0x20, reference_identity_key=md5(1)),
            Entry(md5(3), content_hash=0x30),
        ])
        result = deduplicate(entries)

        assert [e.identity_key for e in result.entries] == [md5(3)]
        assert result.unresolved_dropped == 2


class TestIdempotence:
    """Test that deduplicating twice changes nothing."""

    def test_second_run_is_noop(self, sample_catalogue):
        from romdat.core.parser import parse_catalogue

        entries = prepare(parse_catalogue(sample_catalogue))
        once = deduplicate(entries)
        twice = deduplicate(once.entries)

        assert twice.entries == once.entries
        assert twice.duplicates_dropped == 0
        assert twice.unresolved_dropped == 0
        assert twice.elided == 0
