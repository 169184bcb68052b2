"""CLI interface for docvalidation using Typer framework."""

import json as jsonlib
import logging
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from docvalidation import __description__, __version__
from docvalidation.config import DocValidationConfig, ParserBackend, load_config
from docvalidation.document import NodeKind, node_kind, node_text
from docvalidation.exceptions import StructureDefinitionError
from docvalidation.loader import load_structure
from docvalidation.parser import DocumentParser
from docvalidation.validator import StructureValidator

app = typer.Typer(
    name="docvalidation",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"docvalidation version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """docvalidation - Validate rendered markup against expected structures."""


def _load_settings(config: Optional[Path], backend: Optional[ParserBackend], collect_all: bool) -> DocValidationConfig:
    settings = load_config(config)
    if backend is not None:
        settings.parser.backend = backend
    if collect_all:
        settings.matching.collect_all = True
    logging.basicConfig(
        level=settings.logging.level.to_logging_level(),
        format="%(levelname)s %(name)s: %(message)s",
    )
    return settings


def _parse_page(page: Path, settings: DocValidationConfig):
    parsed = DocumentParser(settings.parser).parse_file(page)
    if not parsed.success:
        for error in parsed.errors:
            console.print(f"[red]Error:[/red] {error}")
        raise typer.Exit(1)
    return parsed.document


@app.command()
def check(
    page: Annotated[
        Path,
        typer.Argument(help="Rendered HTML/XHTML file to validate")
    ],
    expect: Annotated[
        Path,
        typer.Option("--expect", "-e", help="JSON file describing the expected structure")
    ],
    backend: Annotated[
        Optional[ParserBackend],
        typer.Option("--backend", "-b", help="Markup parser backend (default: from config, html)")
    ] = None,
    collect_all: Annotated[
        bool,
        typer.Option("--all", "-a", help="Report every failure instead of stopping at the first")
    ] = False,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json (default: table)")
    ] = "table",
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .docvalidation.json)")
    ] = None,
) -> None:
    """Validate a rendered page against an expected structure."""
    valid_formats = ["table", "json"]
    if format not in valid_formats:
        console.print(f"[red]Error:[/red] Invalid format '{format}'. Must be one of: {', '.join(valid_formats)}")
        raise typer.Exit(1)

    try:
        settings = _load_settings(config, backend, collect_all)
        expected = load_structure(expect)
    except StructureDefinitionError as e:
        console.print(f"[red]Error:[/red] {e}")
        for violation in e.violations:
            console.print(f"  [dim]{violation}[/dim]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    document = _parse_page(page, settings)
    result = StructureValidator(settings).validate(expected, document)

    if format == "json":
        typer.echo(jsonlib.dumps(result.to_dict(), indent=2))
    else:
        status_color = "green" if result.passed else "red"
        console.print(f"[{status_color}]Validation Status: {result.status.value.upper()}[/{status_color}]")

        if result.failures:
            failures_table = Table()
            failures_table.add_column("Kind", style="cyan")
            failures_table.add_column("Path", style="dim")
            failures_table.add_column("Message", style="white")

            for failure in result.failures:
                kind_color = "magenta" if failure.kind.is_structure_defect else "red"
                failures_table.add_row(
                    f"[{kind_color}]{failure.kind.name}[/{kind_color}]",
                    escape(failure.location),
                    escape(failure.message)
                )

            console.print(failures_table)
        else:
            console.print("[green]Document matches the expected structure.[/green]")

    raise typer.Exit(result.exit_code)


@app.command()
def tree(
    page: Annotated[
        Path,
        typer.Argument(help="Rendered HTML/XHTML file to show")
    ],
    backend: Annotated[
        Optional[ParserBackend],
        typer.Option("--backend", "-b", help="Markup parser backend (default: from config, html)")
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .docvalidation.json)")
    ] = None,
) -> None:
    """Show the actual document tree the validator would see."""
    try:
        settings = _load_settings(config, backend, False)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    document = _parse_page(page, settings)
    root = Tree(_node_label(document))
    _add_children(root, document)
    console.print(root)


def _add_children(branch: Tree, element: Any) -> None:
    for child in element.children:
        sub_branch = branch.add(_node_label(child))
        if node_kind(child) == NodeKind.ELEMENT:
            _add_children(sub_branch, child)


def _node_label(node: Any) -> str:
    kind = node_kind(node)
    if kind == NodeKind.ELEMENT:
        attributes = escape(" ".join(f'{name}="{value}"' for name, value in node.attributes.items()))
        label = f"[cyan]{node.tag}[/cyan]"
        return f"{label} [dim]{attributes}[/dim]" if attributes else label
    text = escape(node_text(node).strip())
    if kind == NodeKind.COMMENT:
        return f"[green]<!-- {text} -->[/green]"
    return f"[white]{text!r}[/white]"


if __name__ == "__main__":
    app()
