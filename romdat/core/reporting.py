"""
Reporting for conversion results.

Renders the C header embedding the record array and string table, and a
rich summary table for the terminal. Comments in the header are
provenance only; the values come from the encoded words so the header and
the binary payload always agree.
"""

from datetime import datetime
from typing import List, Optional

from rich.table import Table

from .emitter import unpack_config
from .entries import SaveKind, ReferenceConfig
from .pipeline import BuildResult

HEADER_STRUCT = """struct rom_entry_s
{
\tunion
\t{
\t\tstruct
\t\t{
\t\t\tunsigned char do_not_use : 1;
\t\t\tunsigned char save_type : 3;
\t\t\tunsigned char players : 3;
\t\t\tunsigned char rumble : 1;
\t\t\tunsigned char transferpak : 1;
\t\t\tunsigned char status : 3;
\t\t\tunsigned char count_per_op : 3;
\t\t\tunsigned char disable_extra_mem : 1;
\t\t\tunsigned char cheat_lut : 5;
\t\t\tunsigned char mempak : 1;
\t\t\tunsigned char biopak : 1;
\t\t\tunsigned char si_dma_duration : 1;
\t\t};
\t\tstruct
\t\t{
\t\t\tunsigned char reference : 1;
\t\t\tuint16_t reference_entry;
\t\t};
\t};
};
"""

CRC_PER_LINE = 3


def c_string(value: str) -> str:
    """Quote a value as a C string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def c_comment(value: str) -> str:
    # A name containing '*/' would end the comment early
    return value.replace("*/", "* /")


def _save_enum() -> List[str]:
    lines = ["enum save_types_e", "{"]
    members = [f"\tSAVE_{kind.name}" for kind in SaveKind]
    members[0] += " = 0"
    lines.append(",\n".join(members))
    lines.append("};")
    return lines


def _crc_array(hashes: List[int]) -> List[str]:
    lines = [f"const uint64_t rom_crc[{len(hashes)}] = {{"]
    for start in range(0, len(hashes), CRC_PER_LINE):
        chunk = hashes[start:start + CRC_PER_LINE]
        last = start + CRC_PER_LINE >= len(hashes)
        values = ", ".join(f"0x{h:016X}" for h in chunk)
        lines.append(f"\t{values}{'' if last else ','}")
    lines.append("};")
    return lines


def _entry_array(result: BuildResult) -> List[str]:
    entries = result.entries
    lines = [f"const struct rom_entry_s rom_dat[{len(entries)}] = {{"]

    for position, (entry, word) in enumerate(zip(entries, result.emitted.words)):
        config = unpack_config(word)
        lines.append(f"\t/* {c_comment(entry.display_name)}")
        lines.append(f"\t * CRC: {entry.crc_text()}")
        lines.append(f"\t * Entry: {position} */")
        lines.append("\t{")
        if isinstance(config, ReferenceConfig):
            lines.append("\t\t.reference = 1,")
            lines.append(f"\t\t.reference_entry = {config.target_index}")
        else:
            lines.extend([
                f"\t\t.status = {config.status},",
                f"\t\t.save_type = SAVE_{config.save_kind.name},",
                f"\t\t.players = {config.player_count},",
                f"\t\t.rumble = {int(config.rumble)},",
                f"\t\t.transferpak = {int(config.transfer_pak)},",
                f"\t\t.mempak = {int(config.memory_pak)},",
                f"\t\t.biopak = {int(config.bio_pak)},",
                f"\t\t.count_per_op = {config.count_per_op},",
                f"\t\t.disable_extra_mem = {int(config.disable_extra_mem)},",
                f"\t\t.si_dma_duration = {int(config.timing_variant)},",
                f"\t\t.cheat_lut = {config.string_ref}",
            ])
        lines.append(f"\t}}{'' if position == len(entries) - 1 else ','}")

    lines.append("};")
    return lines


def _cheat_array(result: BuildResult) -> List[str]:
    table = list(result.string_table)
    lines = [f"const char *const cheats[{len(table) + 1}] = {{"]
    lines.append(f"\tNULL{',' if table else ''}")

    for position, item in enumerate(table):
        if item.used_by:
            lines.append("")
            lines.append("\t/**")
            lines.extend(f"\t * {c_comment(name)}" for name in item.used_by)
            lines.append("\t */")
        last = position == len(table) - 1
        lines.append(f"\t{c_string(item.value)}{'' if last else ','}")

    lines.append("};")
    return lines


def render_c_header(result: BuildResult, generated_at: Optional[datetime] = None) -> str:
    """
    Render the conversion result as a C header.

    Args:
        result: Output of build_catalogue
        generated_at: Timestamp for the banner comment; omitted when None

    Returns:
        Header text ending with a newline
    """
    lines: List[str] = []
    if generated_at is not None:
        lines.append(f"/* Generated at {generated_at.strftime('%c')} using romdat */")
        lines.append("")

    lines.extend(["#pragma once", "#include <stdint.h>", ""])
    lines.append(HEADER_STRUCT)
    lines.extend(_save_enum())
    lines.append("")
    lines.extend(_crc_array(result.emitted.hashes))
    lines.append("")
    lines.extend(_entry_array(result))
    lines.append("")
    lines.extend(_cheat_array(result))
    return "\n".join(lines) + "\n"


def summary_table(result: BuildResult) -> Table:
    """Build a rich table describing one run."""
    stats = result.stats
    table = Table(title="Catalogue conversion")
    table.add_column("Stage", style="cyan")
    table.add_column("Count", justify="right", style="magenta")

    table.add_row("Sections parsed", str(stats.get("parsed", 0)))
    table.add_row("References declared", str(stats.get("references", 0)))
    table.add_row("Duplicates dropped", str(stats.get("duplicates_dropped", 0)))
    table.add_row("Orphaned references dropped", str(stats.get("unresolved_dropped", 0)))
    table.add_row("Elided to references", str(stats.get("elided", 0)))
    table.add_row("Records emitted", str(stats.get("emitted", 0)))
    table.add_row("Strings", str(stats.get("strings", 0)))
    if stats.get("strings_released"):
        table.add_row("Unused strings released", str(stats["strings_released"]))

    unknown = stats.get("unknown_keys") or {}
    if unknown:
        table.add_row("Unknown keys skipped",
                      ", ".join(f"{k} ({n})" for k, n in sorted(unknown.items())),
                      style="yellow")
    return table
