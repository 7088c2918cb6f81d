"""Typer-based CLI for rspec-lint."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__, config_manager
from .errors import ConfigError
from .language import Language
from .linter import Linter, LintReport
from .metadata import IgnoredMetadataTable
from .models import Offense

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)

app = typer.Typer(
    help="RSpec lint: check that top-level describes name the class under test.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

EXIT_OFFENSES = 1
EXIT_ERROR = 2


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"rspec-lint v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """rspec-lint: static checks for RSpec spec files."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_config(config_path: Optional[Path]):
    try:
        return config_manager.load_config(config_path)
    except ConfigError as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=EXIT_ERROR)


def _read_source(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError:
        return ""


def _print_offense(offense: Offense) -> None:
    location = f"{offense.path}:{offense.line}:{offense.column + 1}"
    console.print(
        f"[bold]{escape(location)}[/bold]: [yellow]{offense.rule}[/yellow]: {escape(offense.message)}",
        highlight=False,
    )
    source = _read_source(offense.path) if offense.path else ""
    lines = source.splitlines()
    if 0 < offense.line <= len(lines):
        source_line = lines[offense.line - 1]
        # spans are byte based; the underline is drawn in characters
        indent = len(source_line.encode("utf-8")[:offense.column].decode("utf-8", errors="ignore"))
        highlighted = offense.location.text(source).splitlines() or [""]
        width = max(1, min(len(highlighted[0]), len(source_line) - indent))
        console.print(escape(source_line), highlight=False)
        console.print(" " * indent + "[red]" + "^" * width + "[/red]", highlight=False)


def _print_text(report: LintReport) -> None:
    for offense in report.offenses:
        _print_offense(offense)
    for error in report.errors:
        err_console.print(f"[red]{escape(str(error))}[/red]", highlight=False)

    summary = f"{len(report.files)} file(s) inspected, {len(report.offenses)} offense(s) detected"
    if report.errors:
        summary += f", {len(report.errors)} file(s) could not be parsed"
    color = "green" if report.ok else "red"
    console.print(f"\n[{color}]{summary}[/{color}]")


def _print_json(report: LintReport) -> None:
    payload = {
        "files": report.files,
        "offenses": [offense.to_dict() for offense in report.offenses],
        "errors": [
            {"path": error.path, "line": error.line, "column": error.column + 1, "message": str(error)}
            for error in report.errors
        ],
        "summary": {
            "files": len(report.files),
            "offenses": len(report.offenses),
            "errors": len(report.errors),
        },
    }
    typer.echo(json.dumps(payload, indent=2))


@app.command("check")
def check(
    paths: List[Path] = typer.Argument(..., exists=True, help="Spec files or directories to check."),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", dir_okay=False, help="Path to a TOML config file."),
    output_format: str = typer.Option("text", "--format", "-f", help="Output format: text or json."),
):
    """Check spec files for top-level describes without a class argument."""
    if output_format not in ("text", "json"):
        raise typer.BadParameter(f"Unknown format '{output_format}'. Use 'text' or 'json'.")

    linter = Linter(_load_config(config_path))
    report = linter.lint_paths(paths)

    if output_format == "json":
        _print_json(report)
    else:
        _print_text(report)

    if report.errors:
        raise typer.Exit(code=EXIT_ERROR)
    if report.offenses:
        raise typer.Exit(code=EXIT_OFFENSES)


@app.command("show-config")
def show_config(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", dir_okay=False, help="Path to a TOML config file."),
):
    """Show the effective ignored metadata and RSpec vocabulary."""
    cfg = _load_config(config_path)
    table = IgnoredMetadataTable.from_config(config_manager.rule_config(cfg).get("IgnoredMetadata"))
    language = Language.from_config(config_manager.language_config(cfg))
    include, exclude = config_manager.file_patterns(cfg)

    metadata_table = Table(title="IgnoredMetadata")
    metadata_table.add_column("Key", style="cyan")
    metadata_table.add_column("Ignored values", style="white")
    for key, values in table.to_dict().items():
        metadata_table.add_row(key, ", ".join(values))
    if not table:
        metadata_table.add_row("-", "(none)")
    console.print(metadata_table)

    console.print(f"[bold]Example groups:[/bold] {', '.join(sorted(language.example_groups))}")
    console.print(f"[bold]Shared groups:[/bold] {', '.join(sorted(language.shared_groups))}")
    console.print(f"[bold]Include:[/bold] {', '.join(include)}")
    console.print(f"[bold]Exclude:[/bold] {', '.join(exclude) or '(none)'}")
