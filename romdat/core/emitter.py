"""
Binary emitter for deduplicated entries.

Each entry becomes a 12-byte little-endian record: the u64 checksum followed
by a u32 configuration word. The word uses the bit positions a GCC bit-field
union assigns on little-endian targets, so the host program can overlay
its struct directly:

    bit  0      discriminant (0 = direct, 1 = reference)
    bits 1-3    save_kind
    bits 4-6    player_count
    bit  7      rumble
    bit  8      transfer_pak
    bits 9-11   status
    bits 12-14  count_per_op
    bit  15     disable_extra_mem
    bits 16-20  string_ref
    bit  21     memory_pak
    bit  22     bio_pak
    bit  23     timing_variant

A reference word sets bit 0 and stores target_index in bits 16-31.
"""

import struct
from dataclasses import dataclass, field
from typing import List, Tuple

from .entries import ConfigRecord, DirectConfig, Entry, ReferenceConfig, SaveKind
from .errors import CatalogueError, OutOfRangeValue
from .string_table import MAX_CAPACITY, StringTable

RECORD_STRUCT = struct.Struct("<QI")
RECORD_SIZE = RECORD_STRUCT.size

BLOB_MAGIC = b"RDAT"
BLOB_VERSION = 1
BLOB_HEADER = struct.Struct("<4sHHII")

# (field, shift, width)
DIRECT_LAYOUT: Tuple[Tuple[str, int, int], ...] = (
    ("save_kind", 1, 3),
    ("player_count", 4, 3),
    ("rumble", 7, 1),
    ("transfer_pak", 8, 1),
    ("status", 9, 3),
    ("count_per_op", 12, 3),
    ("disable_extra_mem", 15, 1),
    ("string_ref", 16, 5),
    ("memory_pak", 21, 1),
    ("bio_pak", 22, 1),
    ("timing_variant", 23, 1),
)

REFERENCE_FLAG = 0x1
TARGET_SHIFT = 16
MAX_TARGET_INDEX = 0xFFFF


def pack_config(config: ConfigRecord) -> int:
    """
    Encode a configuration as a 32-bit word.

    Raises:
        OutOfRangeValue: if a field does not fit its bit width
    """
    if isinstance(config, ReferenceConfig):
        if not 0 <= config.target_index <= MAX_TARGET_INDEX:
            raise OutOfRangeValue(
                f"Reference target {config.target_index} does not fit 16 bits",
                value=str(config.target_index),
                minimum=0,
                maximum=MAX_TARGET_INDEX
            )
        return REFERENCE_FLAG | (config.target_index << TARGET_SHIFT)

    word = 0
    for name, shift, width in DIRECT_LAYOUT:
        value = int(getattr(config, name))
        if not 0 <= value < (1 << width):
            raise OutOfRangeValue(
                f"{name}={value} does not fit {width} bit(s)",
                value=str(value),
                minimum=0,
                maximum=(1 << width) - 1
            )
        word |= value << shift
    return word


def unpack_config(word: int) -> ConfigRecord:
    """Decode a 32-bit configuration word."""
    if word & REFERENCE_FLAG:
        return ReferenceConfig(target_index=word >> TARGET_SHIFT)

    values = {}
    for name, shift, width in DIRECT_LAYOUT:
        values[name] = (word >> shift) & ((1 << width) - 1)
    return DirectConfig(
        save_kind=SaveKind(values["save_kind"]),
        player_count=values["player_count"],
        rumble=bool(values["rumble"]),
        transfer_pak=bool(values["transfer_pak"]),
        status=values["status"],
        count_per_op=values["count_per_op"],
        disable_extra_mem=bool(values["disable_extra_mem"]),
        string_ref=values["string_ref"],
        memory_pak=bool(values["memory_pak"]),
        bio_pak=bool(values["bio_pak"]),
        timing_variant=bool(values["timing_variant"]),
    )


def decode_record(record: bytes) -> Tuple[int, ConfigRecord]:
    """Split a record into its checksum and configuration."""
    content_hash, word = RECORD_STRUCT.unpack(record)
    return content_hash, unpack_config(word)


@dataclass
class EmittedCatalogue:
    """Final record stream and string table."""
    records: List[bytes] = field(default_factory=list)
    hashes: List[int] = field(default_factory=list)
    words: List[int] = field(default_factory=list)
    strings: List[str] = field(default_factory=lambda: [""])

    def payload(self) -> bytes:
        """Concatenated records."""
        return b"".join(self.records)

    def to_blob(self) -> bytes:
        """
        Serialize records and strings into a single container.

        Layout: header (magic, version, record size, record count, string
        count), the records, then strings 1..n each NUL-terminated UTF-8.
        """
        header = BLOB_HEADER.pack(BLOB_MAGIC, BLOB_VERSION, RECORD_SIZE,
                                  len(self.records), len(self.strings) - 1)
        strings = b"".join(s.encode("utf-8") + b"\0" for s in self.strings[1:])
        return header + self.payload() + strings


def read_blob(blob: bytes) -> EmittedCatalogue:
    """
    Read a container written by EmittedCatalogue.to_blob.

    Raises:
        CatalogueError: if the header or sizes are inconsistent
    """
    if len(blob) < BLOB_HEADER.size:
        raise CatalogueError("Blob is shorter than its header")
    magic, version, record_size, count, string_count = BLOB_HEADER.unpack_from(blob)
    if magic != BLOB_MAGIC:
        raise CatalogueError(f"Bad blob magic {magic!r}")
    if version != BLOB_VERSION or record_size != RECORD_SIZE:
        raise CatalogueError(
            f"Unsupported blob version {version} with record size {record_size}",
            details={'version': version, 'record_size': record_size}
        )

    offset = BLOB_HEADER.size
    end = offset + count * RECORD_SIZE
    if len(blob) < end:
        raise CatalogueError(f"Blob truncated: expected {count} records")

    emitted = EmittedCatalogue()
    for start in range(offset, end, RECORD_SIZE):
        record = blob[start:start + RECORD_SIZE]
        content_hash, word = RECORD_STRUCT.unpack(record)
        emitted.records.append(record)
        emitted.hashes.append(content_hash)
        emitted.words.append(word)

    strings = blob[end:].split(b"\0")
    if len(strings) - 1 != string_count:
        raise CatalogueError(f"Blob string table holds {len(strings) - 1} values, "
                             f"header says {string_count}")
    emitted.strings.extend(s.decode("utf-8") for s in strings[:-1])
    return emitted


def emit(entries: List[Entry], string_table: StringTable) -> EmittedCatalogue:
    """
    Encode the final entries and string table.

    The output depends only on the order and content of the inputs.

    Raises:
        CatalogueError: if a reference is out of range or not direct, or a
            string_ref is not allocated
    """
    emitted = EmittedCatalogue(strings=string_table.values())

    for position, entry in enumerate(entries):
        config = entry.config
        if isinstance(config, ReferenceConfig):
            target = config.target_index
            if not 0 <= target < len(entries) or not entries[target].is_direct:
                raise CatalogueError(
                    f"Reference target {target} is not a direct entry",
                    line=entry.line,
                    section=entry.identity_key,
                    details={'position': position}
                )
        elif not 0 <= config.string_ref <= min(len(string_table), MAX_CAPACITY):
            raise CatalogueError(
                f"string_ref {config.string_ref} is not allocated",
                line=entry.line,
                section=entry.identity_key,
                key="Cheat0"
            )

        word = pack_config(config)
        emitted.records.append(RECORD_STRUCT.pack(entry.content_hash, word))
        emitted.hashes.append(entry.content_hash)
        emitted.words.append(word)

    return emitted
