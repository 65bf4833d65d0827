"""
Entry builder for the ROM catalogue.

Folds the classified lines from the scanner into a list of Entry objects.
A section header opens a new entry; each key line mutates exactly one field
of the open entry through the handler table below.
"""

import logging
import re
from typing import Callable, Dict, List, Optional

from .entries import (
    DEFAULT_DIRECT_CONFIG,
    IDENTITY_KEY_LENGTH,
    DirectConfig,
    Entry,
    SaveKind,
    truncate_display_name,
)
from .errors import (
    DuplicateIdentityKey,
    InvalidEnumValue,
    MalformedLine,
    OutOfRangeValue,
    StringTableFull,
    UnknownKey,
)
from .scanner import LineKind, ScannedLine, scan_lines
from .string_table import StringTable

logger = logging.getLogger(__name__)

CRC_PATTERN = re.compile(r"^([0-9A-Fa-f]{8}) ([0-9A-Fa-f]{8})$")

# Offset of the size digit in "Eeprom 4KB" / "Eeprom 16KB"
_EEPROM_SIZE_OFFSET = len("Eeprom ")


class EntryBuilder:
    """Accumulator for the section currently being read."""

    def __init__(self, identity_key: str, line: int):
        self.identity_key = identity_key
        self.line = line
        self.content_hash: Optional[int] = None
        self.config: DirectConfig = DEFAULT_DIRECT_CONFIG
        self.display_name = ""
        self.reference_identity_key: Optional[str] = None

    def update(self, **changes) -> None:
        self.config = self.config.with_changes(**changes)

    def build(self) -> Entry:
        """
        Freeze the accumulated state into an Entry.

        Raises:
            MalformedLine: if the section never supplied a CRC
        """
        if self.content_hash is None:
            raise MalformedLine(
                "Section has no CRC key",
                line=self.line,
                section=self.identity_key,
                key="CRC"
            )
        return Entry(
            identity_key=self.identity_key,
            content_hash=self.content_hash,
            config=self.config,
            display_name=self.display_name,
            reference_identity_key=self.reference_identity_key,
            line=self.line,
        )


Handler = Callable[[EntryBuilder, str, int], None]


class CatalogueParser:
    """
    Parser turning catalogue text into entries.

    Cheat strings are interned into the supplied string table while parsing,
    so the table must be owned by the caller for the whole run.
    """

    def __init__(self, string_table: StringTable, strict: bool = False):
        """
        Initialize the parser.

        Args:
            string_table: Table receiving Cheat0 values
            strict: Raise UnknownKey instead of warning on unrecognized keys
        """
        self.string_table = string_table
        self.strict = strict
        self.unknown_keys: Dict[str, int] = {}

        self._handlers: Dict[str, Handler] = {
            "CRC": self._handle_crc,
            "RefMD5": self._handle_ref_md5,
            "SaveType": self._handle_save_type,
            "Status": self._int_handler("Status", "status", 0, 5),
            "Players": self._int_handler("Players", "player_count", 0, 7),
            "CountPerOp": self._int_handler("CountPerOp", "count_per_op", 1, 4),
            "Rumble": self._yes_handler("rumble"),
            "Transferpak": self._yes_handler("transfer_pak"),
            "Mempak": self._yes_handler("memory_pak"),
            "Biopak": self._yes_handler("bio_pak"),
            "DisableExtraMem": self._handle_disable_extra_mem,
            "SiDmaDuration": self._handle_si_dma_duration,
            "Cheat0": self._handle_cheat,
            "GoodName": self._handle_good_name,
        }

    def parse(self, text: str) -> List[Entry]:
        """
        Parse the whole catalogue.

        Returns:
            Entries in catalogue order

        Raises:
            CatalogueError: on any grammar or value error; nothing is returned
        """
        entries: List[Entry] = []
        seen: Dict[str, int] = {}
        current: Optional[EntryBuilder] = None

        for scanned in scan_lines(text):
            if scanned.kind in (LineKind.BLANK, LineKind.COMMENT):
                continue

            if scanned.kind is LineKind.SECTION:
                if current is not None:
                    entries.append(current.build())
                identity_key = scanned.key
                if identity_key in seen:
                    raise DuplicateIdentityKey(
                        f"Identity key already used by the section at line {seen[identity_key]}",
                        first_line=seen[identity_key],
                        line=scanned.number,
                        section=identity_key
                    )
                seen[identity_key] = scanned.number
                current = EntryBuilder(identity_key, scanned.number)
                continue

            if current is None:
                raise MalformedLine(
                    "Key appears before any section header",
                    line=scanned.number,
                    key=scanned.key
                )
            self._apply(current, scanned)

        if current is not None:
            entries.append(current.build())

        logger.debug("Parsed %d entries, %d interned strings",
                     len(entries), len(self.string_table))
        return entries

    def _apply(self, builder: EntryBuilder, scanned: ScannedLine) -> None:
        handler = self._handlers.get(scanned.key)
        if handler is not None:
            handler(builder, scanned.value, scanned.number)
            return

        if self.strict:
            raise UnknownKey(
                f"Unknown key {scanned.key!r}",
                line=scanned.number,
                section=builder.identity_key,
                key=scanned.key
            )
        self.unknown_keys[scanned.key] = self.unknown_keys.get(scanned.key, 0) + 1
        logger.warning("Unknown key %s at line %d in section [%s], skipping",
                       scanned.key, scanned.number, builder.identity_key)

    # Key handlers

    def _handle_crc(self, builder: EntryBuilder, value: str, line: int) -> None:
        match = CRC_PATTERN.match(value.strip())
        if match is None:
            raise MalformedLine(
                f"CRC must be two 8-digit hex fields separated by a space, got {value!r}",
                line=line,
                section=builder.identity_key,
                key="CRC"
            )
        builder.content_hash = (int(match.group(1), 16) << 32) | int(match.group(2), 16)
        # A CRC line starts the configuration over from the defaults
        builder.config = DirectConfig(string_ref=builder.config.string_ref)

    def _handle_ref_md5(self, builder: EntryBuilder, value: str, line: int) -> None:
        value = value.strip()
        if len(value) != IDENTITY_KEY_LENGTH:
            raise MalformedLine(
                f"RefMD5 must be exactly {IDENTITY_KEY_LENGTH} characters, got {len(value)}",
                line=line,
                section=builder.identity_key,
                key="RefMD5"
            )
        builder.reference_identity_key = value

    def _handle_save_type(self, builder: EntryBuilder, value: str, line: int) -> None:
        token = value.strip()
        first = token[:1]
        kind: Optional[SaveKind] = None

        if first == "E":
            size = token[_EEPROM_SIZE_OFFSET:_EEPROM_SIZE_OFFSET + 1]
            if size == "4":
                kind = SaveKind.EEPROM_4KB
            elif size == "1":
                kind = SaveKind.EEPROM_16KB
        elif first == "S":
            kind = SaveKind.SRAM
        elif first == "F":
            kind = SaveKind.FLASH_RAM
        elif first == "C":
            kind = SaveKind.CONTROLLER_PACK
        elif first == "N":
            kind = SaveKind.NONE

        if kind is None:
            raise InvalidEnumValue(
                f"Unrecognized save type {token!r}",
                value=token,
                line=line,
                section=builder.identity_key,
                key="SaveType"
            )
        builder.update(save_kind=kind)

    def _int_handler(self, key: str, field_name: str,
                     minimum: int, maximum: int) -> Handler:
        def handle(builder: EntryBuilder, value: str, line: int) -> None:
            text = value.strip()
            try:
                number = int(text, 10)
            except ValueError:
                number = None
            if number is None or not minimum <= number <= maximum:
                raise OutOfRangeValue(
                    f"{key} must be an integer between {minimum} and {maximum}, got {text!r}",
                    value=text,
                    minimum=minimum,
                    maximum=maximum,
                    line=line,
                    section=builder.identity_key,
                    key=key
                )
            builder.update(**{field_name: number})
        return handle

    @staticmethod
    def _yes_handler(field_name: str) -> Handler:
        def handle(builder: EntryBuilder, value: str, line: int) -> None:
            builder.update(**{field_name: value.startswith("Y")})
        return handle

    def _handle_disable_extra_mem(self, builder: EntryBuilder, value: str, line: int) -> None:
        builder.update(disable_extra_mem=value.startswith("1"))

    def _handle_si_dma_duration(self, builder: EntryBuilder, value: str, line: int) -> None:
        if not value.startswith("1"):
            raise OutOfRangeValue(
                f"SiDmaDuration only supports the value 1, got {value.strip()!r}",
                value=value.strip(),
                minimum=1,
                maximum=1,
                line=line,
                section=builder.identity_key,
                key="SiDmaDuration"
            )
        builder.update(timing_variant=True)

    def _handle_cheat(self, builder: EntryBuilder, value: str, line: int) -> None:
        try:
            index = self.string_table.intern(value, used_by=builder.display_name, line=line)
        except StringTableFull as error:
            error.section = builder.identity_key
            error.details['section'] = builder.identity_key
            raise
        builder.update(string_ref=index)

    def _handle_good_name(self, builder: EntryBuilder, value: str, line: int) -> None:
        builder.display_name = truncate_display_name(value)


def parse_catalogue(text: str, string_table: Optional[StringTable] = None,
                    strict: bool = False) -> List[Entry]:
    """Parse catalogue text with a fresh parser."""
    if string_table is None:
        string_table = StringTable()
    return CatalogueParser(string_table, strict=strict).parse(text)
