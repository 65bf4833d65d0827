"""
Core conversion pipeline.

scanner -> parser (+ string_table) -> resolver -> sorter -> dedup -> emitter
"""

from .entries import (
    DEFAULT_DIRECT_CONFIG,
    ConfigRecord,
    DirectConfig,
    Entry,
    ReferenceConfig,
    SaveKind,
)
from .errors import (
    CatalogueError,
    DuplicateIdentityKey,
    InvalidEnumValue,
    MalformedLine,
    OutOfRangeValue,
    StringTableFull,
    UnknownKey,
    UnresolvedReference,
)
from .scanner import LineKind, ScannedLine, scan_lines
from .string_table import StringTable, StringTableEntry
from .parser import CatalogueParser, parse_catalogue
from .resolver import resolve_references
from .sorter import sort_entries
from .dedup import DedupResult, deduplicate
from .emitter import EmittedCatalogue, decode_record, emit, read_blob
from .serializer import serialize_catalogue

__all__ = [
    "DEFAULT_DIRECT_CONFIG",
    "ConfigRecord",
    "DirectConfig",
    "Entry",
    "ReferenceConfig",
    "SaveKind",
    "CatalogueError",
    "DuplicateIdentityKey",
    "InvalidEnumValue",
    "MalformedLine",
    "OutOfRangeValue",
    "StringTableFull",
    "UnknownKey",
    "UnresolvedReference",
    "LineKind",
    "ScannedLine",
    "scan_lines",
    "StringTable",
    "StringTableEntry",
    "CatalogueParser",
    "parse_catalogue",
    "resolve_references",
    "sort_entries",
    "DedupResult",
    "deduplicate",
    "EmittedCatalogue",
    "decode_record",
    "emit",
    "read_blob",
    "serialize_catalogue",
]
