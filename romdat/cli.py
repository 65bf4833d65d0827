"""Command-line interface for the ROM catalogue converter."""

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import Config
from .core.emitter import read_blob, unpack_config
from .core.entries import ReferenceConfig
from .core.errors import CatalogueError
from .core.pipeline import build_catalogue
from .core.reporting import render_c_header, summary_table
from .core.serializer import serialize_catalogue
from .utils.logging_setup import get_logger, log_operation, setup_logging

console = Console()
logger = get_logger(__name__)


@click.group()
@click.version_option(__version__, prog_name="romdat")
def main():
    """Convert a Mupen64Plus ROM catalogue into compact embedded records."""
    pass


def read_catalogue(path: Path) -> str:
    """Read catalogue text, warning when bytes are not valid UTF-8."""
    data = path.read_bytes()
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.warning(f"{path} is not valid UTF-8 (first bad byte at offset {e.start}); "
                       "invalid sequences in GoodName and Cheat0 are replaced with U+FFFD")
        return data.decode("utf-8", errors="replace")


@main.command(name="build")
@click.argument("catalogue", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output-dir", "-o", type=click.Path(file_okay=False, path_type=Path),
              default=".", show_default=True, help="Directory for generated files")
@click.option("--header/--no-header", default=None, help="Write the C header")
@click.option("--blob/--no-blob", default=None, help="Write the binary container")
@click.option("--filtered-ini/--no-filtered-ini", default=None,
              help="Write the surviving entries back as catalogue text")
@click.option("--strict", is_flag=True,
              help="Treat unknown keys and orphaned references as errors")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, path_type=Path),
              help="Path to configuration file")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def build(catalogue: Path, output_dir: Path, header: Optional[bool], blob: Optional[bool],
          filtered_ini: Optional[bool], strict: bool, config_path: Optional[Path],
          verbose: bool):
    """Convert CATALOGUE (mupen64plus.ini) into records and a string table."""
    if config_path:
        config = Config.from_file(config_path)
    else:
        config = Config.find_and_load(catalogue.parent)

    # Override config with CLI arguments
    if header is not None:
        config.set("output.header", header)
    if blob is not None:
        config.set("output.blob", blob)
    if filtered_ini is not None:
        config.set("output.filtered_ini", filtered_ini)
    if strict:
        config.set("parser.strict_unknown_keys", True)
        config.set("references.strict", True)
    if verbose:
        config.set("logging.level", "DEBUG")

    problems = config.validate()
    if problems:
        for problem in problems:
            console.print(f"[red]✗ {escape(problem)}[/red]")
        sys.exit(1)

    setup_logging(
        level=config.get("logging.level"),
        log_dir=config.get("logging.log_dir"),
        file=config.get("logging.file", False),
        json_format=config.get("logging.json_format", True)
    )
    log_operation(logger, "build", catalogue=str(catalogue))

    text = read_catalogue(catalogue)
    try:
        result = build_catalogue(text, config)
    except CatalogueError as e:
        logger.error(f"Conversion failed: {e}")
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)

    output_dir.mkdir(parents=True, exist_ok=True)
    written = []

    if config.get("output.header"):
        path = output_dir / config.get("output.header_name")
        path.write_text(render_c_header(result, generated_at=datetime.now()), encoding="utf-8")
        written.append(path)

    if config.get("output.blob"):
        path = output_dir / config.get("output.blob_name")
        path.write_bytes(result.emitted.to_blob())
        written.append(path)

    if config.get("output.filtered_ini"):
        path = output_dir / config.get("output.filtered_ini_name")
        path.write_text(serialize_catalogue(result.entries, result.string_table), encoding="utf-8")
        written.append(path)

    console.print(summary_table(result))
    for path in written:
        console.print(f"[green]✓ Wrote {escape(str(path))}[/green]")


@main.command(name="inspect")
@click.argument("blob_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--limit", "-n", type=int, default=None, help="Show at most N records")
def inspect(blob_path: Path, limit: Optional[int]):
    """Show the records and strings stored in a .rdat container."""
    try:
        emitted = read_blob(blob_path.read_bytes())
    except CatalogueError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)

    table = Table(title=f"{blob_path.name}: {len(emitted.records)} records")
    table.add_column("#", justify="right")
    table.add_column("CRC", style="cyan", no_wrap=True)
    table.add_column("Shape", no_wrap=True)
    table.add_column("Configuration")

    rows = list(zip(emitted.hashes, emitted.words))
    if limit is not None:
        rows = rows[:limit]
    for position, (content_hash, word) in enumerate(rows):
        config = unpack_config(word)
        crc = f"{content_hash >> 32:08X} {content_hash & 0xFFFFFFFF:08X}"
        if isinstance(config, ReferenceConfig):
            table.add_row(str(position), crc, "reference", f"-> {config.target_index}")
        else:
            details = (f"save={config.save_kind.name} players={config.player_count} "
                       f"status={config.status} cpo={config.count_per_op} "
                       f"cheat={config.string_ref}")
            table.add_row(str(position), crc, "direct", details)
    console.print(table)

    if len(emitted.strings) > 1:
        strings = Table(title="Strings")
        strings.add_column("#", justify="right")
        strings.add_column("Value")
        for index, value in enumerate(emitted.strings[1:], start=1):
            strings.add_row(str(index), escape(value))
        console.print(strings)


@main.command(name="init-config")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path),
                default=".romdat.yml")
def init_config(path: Path):
    """Write the default configuration to PATH."""
    if path.exists():
        if not click.confirm(f"Config file {path} already exists. Overwrite?"):
            console.print("[yellow]Aborted[/yellow]")
            return

    Config().save(path)
    console.print(f"[green]✓ Created config file at {escape(str(path))}[/green]")


if __name__ == "__main__":
    main()
