"""
gcovtrace CLI.

Commands:
- capture: Decode a notes/data pair and write a tracefile
- inspect: List the functions of a notes file (and their raw counters);
  the Fake column counts arcs added for calls that may not return
- config: init | validate | dump
- version: Show version information

Every decode or consistency error exits with the status of its error code.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .. import __version__
from ..config import GcovTraceConfig, load_config, generate_default_config
from ..core.coverage import CoverageModel
from ..core.errors import GcovTraceError
from ..decoders import decode_data, decode_notes
from ..formats.file_header import FileHeader
from ..pipeline import capture as capture_files, write_tracefile


app = typer.Typer(
    name="gcovtrace",
    help="Line and function coverage from gcov notes/data files",
    add_completion=False,
)
console = Console(stderr=True)


def _setup_logging(level: str, verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _fail(error: GcovTraceError):
    console.print(f"[red]Error {error.code.value}:[/] {escape(str(error))}")
    raise typer.Exit(error.exit_status)


def _print_summary(coverage: CoverageModel):
    """Print summary table."""
    totals = coverage.summary()

    table = Table(title="Summary")
    table.add_column("Metric")
    table.add_column("Found", justify="right")
    table.add_column("Hit", justify="right")
    table.add_column("Rate", justify="right")

    for label, found, hit in (
        ("Lines", totals['lines_found'], totals['lines_hit']),
        ("Functions", totals['functions_found'], totals['functions_hit']),
    ):
        rate = f"{hit / found:.1%}" if found else "-"
        table.add_row(label, str(found), str(hit), rate)

    console.print(table)
    console.print(f"Source files: {totals['files']}")


# === CAPTURE COMMAND ===

@app.command()
def capture(
    notes_file: Path = typer.Argument(..., help="Notes file (.gcno)"),
    data_file: Path = typer.Argument(..., help="Data file (.gcda)"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Tracefile path (default: stdout)"),
    test_name: Optional[str] = typer.Option(None, "-t", "--test-name", help="Value of the TN: line"),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config"),
    no_checksum: bool = typer.Option(False, "--no-checksum", help="Warn instead of failing on checksum mismatch"),
    quiet: bool = typer.Option(False, "-q", "--quiet"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
):
    """Decode a notes/data pair and write a tracefile."""
    try:
        cfg = load_config(config_path)
    except (GcovTraceError, FileNotFoundError) as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)

    _setup_logging(cfg.logging.level, verbose)

    if test_name is not None:
        cfg.report.test_name = test_name
    if no_checksum:
        cfg.checks.verify_checksums = False

    if not quiet:
        console.print(f"[bold blue]gcovtrace v{__version__}[/]")
        console.print(f"Notes: {notes_file}")
        console.print(f"Data:  {data_file}")

    try:
        result = capture_files(notes_file, data_file, cfg)
    except GcovTraceError as e:
        _fail(e)

    try:
        write_tracefile(result.coverage, output or sys.stdout, cfg)
    except OSError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)
    if output and not quiet:
        console.print(f"[green]Written to:[/] {output}")

    if not quiet:
        _print_summary(result.coverage)


# === INSPECT COMMAND ===

@app.command()
def inspect(
    notes_file: Path = typer.Argument(..., help="Notes file (.gcno)"),
    data_file: Optional[Path] = typer.Option(None, "-d", "--data", help="Data file (.gcda)"),
):
    """List decoded functions with their block and arc counts."""
    try:
        notes = decode_notes(notes_file.read_bytes(), source=str(notes_file))
        data = decode_data(data_file.read_bytes(), source=str(data_file)) if data_file else None
    except GcovTraceError as e:
        _fail(e)
    except OSError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)

    out = Console()
    version_string = FileHeader(version=notes.version).version_string
    out.print(f"Version: {version_string!r}, stamp 0x{notes.stamp:08x}")

    table = Table(title=str(notes_file))
    table.add_column("Id", justify="right")
    table.add_column("Function")
    table.add_column("Source")
    table.add_column("Line", justify="right")
    table.add_column("Blocks", justify="right")
    table.add_column("Arcs", justify="right")
    table.add_column("Counted", justify="right")
    table.add_column("Fake", justify="right")
    if data is not None:
        table.add_column("Counters")

    for function in notes:
        row = [
            str(function.identifier),
            function.name,
            function.source_path,
            str(function.start_line),
            str(len(function.blocks)),
            str(len(function.arcs)),
            str(len(function.instrumented_arcs)),
            str(sum(1 for arc in function.arcs if arc.is_fake)),
        ]
        if data is not None:
            counts = data.get(function.identifier)
            row.append(' '.join(str(c) for c in counts.counts) if counts else '-')
        table.add_row(*row)

    out.print(table)


# === CONFIG COMMAND ===

@app.command("config")
def config_cmd(
    action: str = typer.Argument(..., help="Action: init|validate|dump"),
    path: Optional[Path] = typer.Argument(None, help="Config file path"),
):
    """Configuration management."""
    out = Console()

    if action == "init":
        out.print(generate_default_config(), markup=False)

    elif action == "validate":
        if not path:
            console.print("[red]Path required for validate[/]")
            raise typer.Exit(1)
        try:
            cfg = GcovTraceConfig.load(path)
        except (GcovTraceError, FileNotFoundError) as e:
            console.print(f"[red]Error:[/] {escape(str(e))}")
            raise typer.Exit(1)
        errors = cfg.validate()
        if errors:
            console.print("[red]Invalid configuration:[/]")
            for e in errors:
                console.print(f"  - {escape(e)}")
            raise typer.Exit(1)
        out.print(f"[green]Valid:[/] {path}")

    elif action == "dump":
        try:
            cfg = load_config(path)
        except (GcovTraceError, FileNotFoundError) as e:
            console.print(f"[red]Error:[/] {escape(str(e))}")
            raise typer.Exit(1)
        out.print(cfg.to_yaml(), markup=False)

    else:
        console.print(f"[red]Unknown action:[/] {action}")
        console.print("Valid actions: init, validate, dump")
        raise typer.Exit(1)


# === VERSION COMMAND ===

@app.command()
def version():
    """Show version information."""
    Console().print(f"gcovtrace v{__version__}")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
