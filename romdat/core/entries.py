"""Catalogue entry data structures."""

from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from enum import IntEnum
from typing import Dict, Optional, Union, Any


class SaveKind(IntEnum):
    """Cartridge save media. Values are the encoded 3-bit field."""
    EEPROM_4KB = 0
    EEPROM_16KB = 1
    SRAM = 2
    FLASH_RAM = 3
    CONTROLLER_PACK = 4
    NONE = 5


# Token written back by the serializer for each save kind
SAVE_KIND_TOKENS: Dict[SaveKind, str] = {
    SaveKind.EEPROM_4KB: "Eeprom 4KB",
    SaveKind.EEPROM_16KB: "Eeprom 16KB",
    SaveKind.SRAM: "SRAM",
    SaveKind.FLASH_RAM: "Flash RAM",
    SaveKind.CONTROLLER_PACK: "Controller Pack",
    SaveKind.NONE: "None",
}

MAX_DISPLAY_NAME_BYTES = 63
IDENTITY_KEY_LENGTH = 32


@dataclass(frozen=True)
class DirectConfig:
    """
    Full per-entry configuration.

    The defaults are the values a section receives before any key is read
    and again whenever a CRC key is seen.
    """

    save_kind: SaveKind = SaveKind.NONE
    player_count: int = 4
    rumble: bool = True
    transfer_pak: bool = False
    status: int = 0
    count_per_op: int = 2
    disable_extra_mem: bool = False
    string_ref: int = 0
    memory_pak: bool = True
    bio_pak: bool = False
    timing_variant: bool = False

    def is_default(self) -> bool:
        """Check whether every field holds its default value."""
        return self == DEFAULT_DIRECT_CONFIG

    def changed_fields(self) -> Dict[str, Any]:
        """Fields that differ from the defaults, in declaration order."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) != getattr(DEFAULT_DIRECT_CONFIG, f.name)
        }

    def with_changes(self, **changes: Any) -> DirectConfig:
        return replace(self, **changes)


DEFAULT_DIRECT_CONFIG = DirectConfig()


@dataclass(frozen=True)
class ReferenceConfig:
    """Configuration borrowed from the entry at target_index."""

    target_index: int = 0


ConfigRecord = Union[DirectConfig, ReferenceConfig]


@dataclass
class Entry:
    """One catalogue section."""

    identity_key: str
    content_hash: int = 0
    config: ConfigRecord = field(default_factory=DirectConfig)
    display_name: str = ""
    reference_identity_key: Optional[str] = None
    line: int = 0  # Line of the section header

    # Filled in by the resolver
    resolved_hash: Optional[int] = None
    target_key: Optional[str] = None

    @property
    def is_reference(self) -> bool:
        """Whether the section declared RefMD5."""
        return self.reference_identity_key is not None

    @property
    def is_resolved(self) -> bool:
        return self.target_key is not None

    @property
    def is_direct(self) -> bool:
        return isinstance(self.config, DirectConfig)

    @property
    def direct(self) -> DirectConfig:
        """The Direct-shape configuration; fails for Reference-shape entries."""
        if not isinstance(self.config, DirectConfig):
            raise TypeError(f"Entry [{self.identity_key}] has a reference configuration")
        return self.config

    def copy(self, **changes: Any) -> Entry:
        return replace(self, **changes)

    def crc_text(self) -> str:
        """Checksum pair in catalogue notation."""
        return f"{self.content_hash >> 32:08X} {self.content_hash & 0xFFFFFFFF:08X}"


def truncate_display_name(name: str) -> str:
    """Cut a name to MAX_DISPLAY_NAME_BYTES of UTF-8 without splitting a character."""
    encoded = name.encode("utf-8")
    if len(encoded) <= MAX_DISPLAY_NAME_BYTES:
        return name
    return encoded[:MAX_DISPLAY_NAME_BYTES].decode("utf-8", errors="ignore")
