"""
Deduplication of sorted catalogue entries.

Works in two filtering passes over the sorted sequence, each building a new
list:

1. Hash-collision collapse. Within a run of equal checksums the first entry
   survives (Direct-shape by sort order) together with every later entry
   that is not a reference.
2. Default elision. A resolved reference whose own fields are all defaults
   adds nothing but its checksum, so it becomes a ReferenceConfig pointing
   at the final position of its target.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from .entries import Entry, ReferenceConfig
from .errors import UnresolvedReference

logger = logging.getLogger(__name__)


@dataclass
class DedupResult:
    """Surviving entries and what happened to the rest."""
    entries: List[Entry] = field(default_factory=list)
    duplicates_dropped: int = 0
    unresolved_dropped: int = 0
    elided: int = 0

    @property
    def count(self) -> int:
        return len(self.entries)


def collapse_hash_runs(entries: List[Entry]) -> List[Entry]:
    """First pass: drop reference entries repeating an earlier checksum."""
    kept: List[Entry] = []
    run_hash: Optional[int] = None

    for entry in entries:
        if entry.content_hash != run_hash:
            run_hash = entry.content_hash
            kept.append(entry)
        elif not entry.is_reference:
            kept.append(entry)
        else:
            logger.debug("Dropping duplicate reference [%s] (%s)",
                         entry.identity_key, entry.display_name)
    return kept


def is_elidable(entry: Entry) -> bool:
    """Whether an entry is stored as a pure reference to its target."""
    if not (entry.is_reference and entry.is_resolved):
        return False
    if isinstance(entry.config, ReferenceConfig):
        return True
    return entry.config.is_default()


class TargetLinker:
    """Finds the surviving targets of resolved references."""

    def __init__(self, entries: List[Entry]):
        self.entries = entries
        self.by_key: Dict[str, int] = {}
        self.by_hash: Dict[int, int] = {}
        for index, entry in enumerate(entries):
            self.by_key.setdefault(entry.identity_key, index)
            self.by_hash.setdefault(entry.content_hash, index)

    def survivor_of(self, entry: Entry) -> Optional[int]:
        """Position of the entry a reference names, one step only."""
        target = self.by_key.get(entry.target_key)
        if target is None and entry.resolved_hash is not None:
            # Target was collapsed away; use the survivor of its checksum run
            target = self.by_hash.get(entry.resolved_hash)
        return target

    def target_of(self, index: int) -> Optional[int]:
        """Position of the Direct-shape entry at the end of a reference chain."""
        visited: Set[int] = {index}
        current = self.entries[index]

        while True:
            target = self.survivor_of(current)
            if target is None or target in visited:
                return None
            candidate = self.entries[target]
            if not is_elidable(candidate):
                return target
            visited.add(target)
            current = candidate


def deduplicate(entries: List[Entry], strict: bool = False) -> DedupResult:
    """
    Deduplicate a sorted entry list.

    Args:
        entries: Entries ordered by sort_entries, already resolved
        strict: Raise UnresolvedReference instead of dropping orphans

    Returns:
        DedupResult whose entries are the final record order
    """
    result = DedupResult()

    collapsed = collapse_hash_runs(entries)
    result.duplicates_dropped = len(entries) - len(collapsed)

    survivors: List[Entry] = []
    for entry in collapsed:
        if entry.is_reference and not entry.is_resolved:
            _orphan(entry, strict, "has no target")
            result.unresolved_dropped += 1
            continue
        survivors.append(entry)

    # Dropping an entry shifts indices, so repeat until every chain links
    while True:
        linker = TargetLinker(survivors)
        targets: Dict[int, int] = {}
        broken: List[int] = []
        for index, entry in enumerate(survivors):
            if not is_elidable(entry):
                continue
            target = linker.target_of(index)
            if target is None:
                broken.append(index)
            else:
                targets[index] = target

        if not broken:
            break
        for index in broken:
            _orphan(survivors[index], strict, "does not lead to a direct entry")
        result.unresolved_dropped += len(broken)
        dropped = set(broken)
        survivors = [e for i, e in enumerate(survivors) if i not in dropped]

    for index, entry in enumerate(survivors):
        if index in targets:
            if not isinstance(entry.config, ReferenceConfig):
                result.elided += 1
            entry = entry.copy(config=ReferenceConfig(target_index=targets[index]))
        result.entries.append(entry)

    logger.debug("Dedup kept %d entries (%d duplicates, %d orphans, %d elided)",
                 result.count, result.duplicates_dropped,
                 result.unresolved_dropped, result.elided)
    return result


def _orphan(entry: Entry, strict: bool, reason: str) -> None:
    if strict:
        raise UnresolvedReference(
            f"Reference {reason}",
            reference_key=entry.reference_identity_key,
            line=entry.line,
            section=entry.identity_key,
            key="RefMD5"
        )
    logger.warning("Dropping reference [%s] (%s): %s",
                   entry.identity_key, entry.display_name, reason)
