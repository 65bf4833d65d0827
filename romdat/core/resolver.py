"""Resolution of RefMD5 declarations to the entries they name."""

import logging
from typing import Dict, List

from .entries import Entry
from .errors import UnresolvedReference

logger = logging.getLogger(__name__)


def resolve_references(entries: List[Entry], strict: bool = False) -> List[Entry]:
    """
    Link every reference entry to its target by identity key.

    Resolved entries get target_key and a copy of the target's content hash
    in resolved_hash. Entries without a target are returned unresolved and
    are dropped later by the deduplicator.

    Args:
        entries: Parsed entries
        strict: Raise UnresolvedReference instead of leaving the entry unresolved

    Returns:
        A new list; the input entries are not modified
    """
    by_key: Dict[str, Entry] = {e.identity_key: e for e in entries}
    resolved: List[Entry] = []
    unresolved = 0

    for entry in entries:
        if not entry.is_reference:
            resolved.append(entry)
            continue

        target = by_key.get(entry.reference_identity_key)
        if target is None or target is entry:
            if strict:
                raise UnresolvedReference(
                    f"RefMD5 {entry.reference_identity_key} does not name another section",
                    reference_key=entry.reference_identity_key,
                    line=entry.line,
                    section=entry.identity_key,
                    key="RefMD5"
                )
            unresolved += 1
            logger.warning("Section [%s] (%s) references unknown section [%s]",
                           entry.identity_key, entry.display_name,
                           entry.reference_identity_key)
            resolved.append(entry.copy(target_key=None, resolved_hash=None))
            continue

        resolved.append(entry.copy(target_key=target.identity_key,
                                   resolved_hash=target.content_hash))

    if unresolved:
        logger.info("%d reference(s) could not be resolved", unresolved)
    return resolved
