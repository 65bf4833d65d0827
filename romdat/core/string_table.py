"""Deduplicating store for shared free-text values (cheat codes)."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional

from .errors import StringTableFull

# string_ref is a 5-bit field and slot 0 means "no value"
MAX_CAPACITY = 31


@dataclass
class StringTableEntry:
    """An interned value and the entries that presented it."""
    value: str
    index: int
    used_by: List[str] = field(default_factory=list)


class StringTable:
    """
    Interned string values indexed from 1.

    Index 0 is never allocated; it is the sentinel for "no value".
    """

    def __init__(self, capacity: int = MAX_CAPACITY):
        if not 1 <= capacity <= MAX_CAPACITY:
            raise ValueError(f"capacity must be between 1 and {MAX_CAPACITY}, got {capacity}")
        self.capacity = capacity
        self._entries: List[StringTableEntry] = []
        self._by_value: Dict[str, StringTableEntry] = {}

    def intern(self, text: str, used_by: Optional[str] = None,
               line: Optional[int] = None) -> int:
        """
        Return the index for text, allocating a new slot on first sight.

        Args:
            text: Value to store, compared exactly
            used_by: Display name of the entry presenting the value
            line: Catalogue line, reported if the table is full

        Returns:
            Index in 1..capacity

        Raises:
            StringTableFull: if text is new and every slot is taken
        """
        existing = self._by_value.get(text)
        if existing is not None:
            if used_by is not None:
                existing.used_by.append(used_by)
            return existing.index

        if len(self._entries) >= self.capacity:
            raise StringTableFull(
                f"String table is full ({self.capacity} values)",
                capacity=self.capacity,
                line=line,
                key="Cheat0"
            )

        entry = StringTableEntry(value=text, index=len(self._entries) + 1)
        if used_by is not None:
            entry.used_by.append(used_by)
        self._entries.append(entry)
        self._by_value[text] = entry
        return entry.index

    def lookup(self, index: int) -> Optional[str]:
        """Value stored at index, or None for 0."""
        if index == 0:
            return None
        if not 1 <= index <= len(self._entries):
            raise IndexError(f"String table index {index} is not allocated")
        return self._entries[index - 1].value

    def compact(self, keep: Iterable[int]) -> Dict[int, int]:
        """
        Release every slot not listed in keep and renumber the rest.

        Surviving values keep their relative order, so indices stay in
        first-seen order.

        Returns:
            Mapping of old index to new index for the kept slots
        """
        wanted = set(keep)
        kept = [e for e in self._entries if e.index in wanted]
        remap: Dict[int, int] = {}
        for new_index, entry in enumerate(kept, start=1):
            remap[entry.index] = new_index
            entry.index = new_index

        self._entries = kept
        self._by_value = {e.value: e for e in kept}
        return remap

    def values(self) -> List[str]:
        """All values in index order, with slot 0 as the empty string."""
        return [""] + [e.value for e in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[StringTableEntry]:
        return iter(self._entries)

    def __contains__(self, text: object) -> bool:
        return text in self._by_value
