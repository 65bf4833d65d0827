"""Tests for reference resolution and ordering."""

import logging

import pytest

from romdat.core.entries import Entry
from romdat.core.errors import UnresolvedReference
from romdat.core.resolver import resolve_references
from romdat.core.sorter import sort_entries

from conftest import md5


class TestResolveReferences:
    """Test linking RefMD5 declarations to targets."""

    def test_resolves_by_identity_key(self):
        target = Entry(md5(1), content_hash=0xAAAA)
        ref = Entry(md5(2), content_hash=0xBBBB, reference_identity_key=md5(1))

        resolved = resolve_references([target, ref])

        assert resolved[1].target_key == md5(1)
        assert resolved[1].resolved_hash == 0xAAAA
        assert resolved[1].is_resolved
        assert resolved[0] is target

    def test_input_is_not_modified(self):
        ref = Entry(md5(2), reference_identity_key=md5(1))
        resolve_references([Entry(md5(1)), ref])
        assert ref.target_key is None

    def test_unresolved_reference_is_kept(self, caplog):
        ref = Entry(md5(2), display_name="Hack", reference_identity_key=md5(9))
        with caplog.at_level(logging.WARNING, logger="romdat.core.resolver"):
            resolved = resolve_references([ref])

        assert len(resolved) == 1
        assert not resolved[0].is_resolved
        assert md5(9) in caplog.text

    def test_self_reference_is_unresolved(self):
        ref = Entry(md5(2), reference_identity_key=md5(2))
        assert not resolve_references([ref])[0].is_resolved

    def test_strict_mode_raises(self):
        ref = Entry(md5(2), line=12, reference_identity_key=md5(9))
        with pytest.raises(UnresolvedReference) as exc_info:
            resolve_references([ref], strict=True)
        assert exc_info.value.reference_key == md5(9)
        assert exc_info.value.line == 12


class TestSortEntries:
    """Test deterministic ordering."""

    def test_orders_by_hash(self):
        entries = [Entry(md5(n), content_hash=h) for n, h in enumerate([30, 10, 20])]
        assert [e.content_hash for e in sort_entries(entries)] == [10, 20, 30]

    def test_direct_before_reference_on_equal_hash(self):
        ref = Entry(md5(1), content_hash=5, reference_identity_key=md5(3))
        direct = Entry(md5(2), content_hash=5)
        ordered = sort_entries([ref, direct])
        assert ordered == [direct, ref]

    def test_sort_is_stable(self):
        first = Entry(md5(1), content_hash=5)
        second = Entry(md5(2), content_hash=5)
        assert sort_entries([first, second]) == [first, second]
        assert sort_entries([second, first]) == [second, first]
