"""
Re-serialization of entries back to catalogue text.

Writes only what the parser needs to rebuild each entry: the header,
GoodName, CRC, RefMD5 when present, and the fields that differ from the
defaults. The output is meant for checking a conversion by re-parsing it.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

from .dedup import TargetLinker
from .entries import SAVE_KIND_TOKENS, Entry, ReferenceConfig, SaveKind
from .string_table import StringTable


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


# field -> (catalogue key, formatter)
FIELD_KEYS: Dict[str, Tuple[str, Callable[[Any], str]]] = {
    "save_kind": ("SaveType", lambda v: SAVE_KIND_TOKENS[SaveKind(v)]),
    "status": ("Status", str),
    "player_count": ("Players", str),
    "rumble": ("Rumble", _yes_no),
    "transfer_pak": ("Transferpak", _yes_no),
    "memory_pak": ("Mempak", _yes_no),
    "bio_pak": ("Biopak", _yes_no),
    "count_per_op": ("CountPerOp", str),
    "disable_extra_mem": ("DisableExtraMem", lambda v: "1" if v else "0"),
    "timing_variant": ("SiDmaDuration", lambda v: "1"),
}


def serialize_entry(entry: Entry, string_table: StringTable,
                    reference_key: Optional[str] = None) -> List[str]:
    """
    Catalogue lines for one entry, without the trailing blank line.

    reference_key overrides the RefMD5 the entry was parsed with, for
    references whose original target did not survive deduplication.
    """
    lines = [
        f"[{entry.identity_key}]",
        f"GoodName={entry.display_name}",
        f"CRC={entry.crc_text()}",
    ]
    if entry.is_reference:
        lines.append(f"RefMD5={reference_key or entry.reference_identity_key}")

    if entry.is_direct:
        for name, value in entry.direct.changed_fields().items():
            if name == "string_ref":
                lines.append(f"Cheat0={string_table.lookup(value)}")
                continue
            key, formatter = FIELD_KEYS[name]
            lines.append(f"{key}={formatter(value)}")
    return lines


def reference_keys(entries: List[Entry]) -> Dict[int, str]:
    """Identity key of the surviving target for each reference, by position."""
    linker = TargetLinker(entries)
    keys: Dict[int, str] = {}
    for index, entry in enumerate(entries):
        if not entry.is_reference:
            continue
        if isinstance(entry.config, ReferenceConfig):
            target: Optional[int] = entry.config.target_index
        else:
            target = linker.survivor_of(entry)
        if target is not None:
            keys[index] = entries[target].identity_key
    return keys


def serialize_catalogue(entries: List[Entry], string_table: StringTable) -> str:
    """Render entries as catalogue text, one section each."""
    targets = reference_keys(entries)
    out: List[str] = []
    for index, entry in enumerate(entries):
        out.extend(serialize_entry(entry, string_table, targets.get(index)))
        out.append("")
    return "\n".join(out)
