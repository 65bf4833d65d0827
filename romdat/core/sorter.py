"""Deterministic ordering of catalogue entries."""

from typing import List, Tuple

from .entries import Entry


def sort_key(entry: Entry) -> Tuple[int, bool]:
    # Direct entries precede references sharing the same checksum
    return (entry.content_hash, entry.is_reference)


def sort_entries(entries: List[Entry]) -> List[Entry]:
    """Return entries ordered by content hash, then reference flag (stable)."""
    return sorted(entries, key=sort_key)
