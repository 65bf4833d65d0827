"""Pipeline driver: catalogue text in, records and string table out."""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config import Config
from .dedup import deduplicate
from .emitter import EmittedCatalogue, emit
from .entries import Entry
from .parser import CatalogueParser
from .resolver import resolve_references
from .sorter import sort_entries
from .string_table import StringTable

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Everything produced by one conversion run."""
    entries: List[Entry]
    string_table: StringTable
    emitted: EmittedCatalogue
    stats: Dict[str, Any] = field(default_factory=dict)


def release_unused_strings(entries: List[Entry], string_table: StringTable) -> List[Entry]:
    """
    Drop string table values no surviving entry uses and renumber string_ref.

    Values interned by entries the deduplicator removed would otherwise
    occupy slots and shift the indices seen when the output is re-parsed.
    """
    used = [e.direct.string_ref for e in entries if e.is_direct and e.direct.string_ref]
    before = len(string_table)
    remap = string_table.compact(used)
    if len(string_table) < before:
        logger.info("Released %d unused string table value(s)", before - len(string_table))

    renumbered: List[Entry] = []
    for entry in entries:
        if entry.is_direct and entry.direct.string_ref:
            new_ref = remap[entry.direct.string_ref]
            if new_ref != entry.direct.string_ref:
                entry = entry.copy(config=entry.direct.with_changes(string_ref=new_ref))
        renumbered.append(entry)
    return renumbered


def build_catalogue(text: str, config: Optional[Config] = None) -> BuildResult:
    """
    Convert catalogue text in one batch.

    The string table is created here and shared by the parser and emitter.
    Any CatalogueError aborts the run before anything is emitted.

    Args:
        text: Whole catalogue contents
        config: Settings; defaults are used when omitted

    Returns:
        BuildResult with the final entries and encoded output
    """
    config = config or Config()
    start_time = time.time()

    string_table = StringTable(capacity=config.get("string_table.capacity", 31))
    parser = CatalogueParser(string_table,
                             strict=config.get("parser.strict_unknown_keys", False))
    strict_refs = config.get("references.strict", False)

    parsed = parser.parse(text)
    logger.info("Parsed %d entries", len(parsed))

    resolved = resolve_references(parsed, strict=strict_refs)
    ordered = sort_entries(resolved)
    dedup = deduplicate(ordered, strict=strict_refs)
    interned = len(string_table)
    entries = release_unused_strings(dedup.entries, string_table)
    emitted = emit(entries, string_table)

    stats = {
        "parsed": len(parsed),
        "references": sum(1 for e in parsed if e.is_reference),
        "duplicates_dropped": dedup.duplicates_dropped,
        "unresolved_dropped": dedup.unresolved_dropped,
        "elided": dedup.elided,
        "emitted": len(emitted.records),
        "strings": len(string_table),
        "strings_released": interned - len(string_table),
        "unknown_keys": dict(parser.unknown_keys),
        "elapsed": time.time() - start_time,
    }
    logger.info("Emitted %d records and %d strings in %.2fs",
                stats["emitted"], stats["strings"], stats["elapsed"])

    return BuildResult(
        entries=entries,
        string_table=string_table,
        emitted=emitted,
        stats=stats,
    )
