"""CLI entry point for globals-guard."""

import json
from pathlib import Path
from typing import Annotated, Literal, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import load_config
from .registry import build_registry
from .runner import ScanReport, Scanner
from .utils.logging import setup_logging

app = typer.Typer(
    name="globals-guard",
    help="Detect code overriding WordPress native global variables",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"globals-guard version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = False,
) -> None:
    """globals-guard - WordPress globals override checker."""
    pass


@app.command()
def scan(
    paths: Annotated[
        list[Path],
        typer.Argument(
            help="PHP files or directories to scan",
            exists=True,
            resolve_path=True,
        ),
    ],
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path"),
    ] = None,
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Report format: table or json"),
    ] = "table",
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-V", help="Enable verbose logging"),
    ] = False,
) -> None:
    """Scan PHP code for overridden WordPress globals.

    Exits with status 1 when any problem is found.
    """
    if output_format not in ("table", "json"):
        console.print(f"[red]Unknown format: {output_format}[/red]")
        raise typer.Exit(2)

    config = load_config(config_file)
    log_level = "DEBUG" if verbose else config.log_level
    setup_logging(log_level, config.log_file)

    report = Scanner(config).scan_paths(paths)

    if output_format == "json":
        typer.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _print_report(report)

    if report.total_diagnostics:
        raise typer.Exit(1)


@app.command("list-globals")
def list_globals(
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path"),
    ] = None,
) -> None:
    """List the global variable names which may not be overridden."""
    config = load_config(config_file)
    registry = build_registry(config.sniff.extra_reserved_globals)
    for name in registry:
        typer.echo(f"${name}")


def _print_report(report: ScanReport) -> None:
    """Print diagnostics grouped per file."""
    for file_report in report.files:
        if file_report.failed:
            console.print(f"[yellow]Could not scan {file_report.file_path}: {file_report.error}[/yellow]")
            continue
        if not file_report.diagnostics:
            continue

        table = Table(title=str(file_report.file_path), title_justify="left")
        table.add_column("Line", justify="right", style="cyan")
        table.add_column("Column", justify="right", style="dim")
        table.add_column("Message")
        table.add_column("Code", style="magenta")
        for diagnostic in file_report.diagnostics:
            table.add_row(
                str(diagnostic.line),
                str(diagnostic.column),
                diagnostic.message,
                diagnostic.full_code,
            )
        console.print(table)

    style: Literal["green", "red"] = "red" if report.total_diagnostics else "green"
    console.print(
        Panel(
            f"[bold]Files scanned:[/bold] {len(report.files)}\n"
            f"[bold]Problems:[/bold] {report.total_diagnostics}\n"
            f"[bold]Failed files:[/bold] {len(report.failed_files)}\n"
            f"[bold]Duration:[/bold] {report.duration_seconds:.2f}s",
            title="globals-guard",
            border_style=style,
        )
    )


if __name__ == "__main__":
    app()
