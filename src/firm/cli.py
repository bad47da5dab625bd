"""
Firm command line.

Non-interactive commands over a workspace directory:

- build: load and build the graph, report errors
- list: entity types, or the entities of one type
- get: print one entity as DSL
- related: neighbours of one entity
- fmt: re-render a source file in canonical form
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from firm._version import __version__
from firm.core.errors import FirmError
from firm.core.graph import Direction, EntityGraph
from firm.lang.convert import compile_schema
from firm.lang.generate import generate, generate_source
from firm.lang.source import parse
from firm.project import load_project_with_config, resolve_config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

app = typer.Typer(
    help="Firm - business entities as plain text, compiled into a queryable graph",
    no_args_is_help=True,
)

console = Console()

WorkspaceArg = Annotated[
    Path, typer.Option("--workspace", "-w", help="Workspace directory", file_okay=False)
]
ConfigOpt = Annotated[
    Path | None, typer.Option("--config", "-c", help="Path to firm.toml", dir_okay=False)
]


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"firm {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else os.environ.get("FIRM_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging")] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
) -> None:
    """Firm CLI main callback for global options."""
    configure_logging(verbose)


def _load(workspace: Path, config: Path | None) -> EntityGraph:
    try:
        graph, _ = load_project_with_config(workspace, config)
    except FirmError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    return graph


def _print_errors(errors: list[FirmError]) -> None:
    for error in errors:
        console.print(f"[yellow]{type(error).__name__}[/yellow]: {escape(str(error))}", highlight=False)


@app.command(name="build")
def build_command(
    workspace: WorkspaceArg = Path("."),
    config: ConfigOpt = None,
    strict: Annotated[
        bool, typer.Option("--strict", help="Exit with status 1 if any error was reported")
    ] = False,
) -> None:
    """Load the workspace, resolve references and validate schemas."""
    graph = _load(workspace, config)
    _print_errors(graph.errors)
    console.print(
        f"{len(graph)} entities, {len(graph.entity_types())} types, {len(graph.errors)} errors"
    )
    if strict and graph.errors:
        raise typer.Exit(code=1)


@app.command(name="list")
def list_command(
    entity_type: Annotated[
        str | None, typer.Argument(help="Entity type; omit to list types")
    ] = None,
    workspace: WorkspaceArg = Path("."),
    config: ConfigOpt = None,
) -> None:
    """List entity types, or the entities of one type."""
    graph = _load(workspace, config)

    if entity_type is None:
        table = Table(title="Entity types")
        table.add_column("Type")
        table.add_column("Count", justify="right")
        for name in graph.entity_types():
            table.add_row(name, str(len(graph.list_by_type(name))))
        console.print(table)
        return

    table = Table(title=entity_type)
    table.add_column("ID")
    table.add_column("Fields", justify="right")
    for entity in graph.list_by_type(entity_type):
        table.add_row(entity.id, str(len(entity.fields)))
    console.print(table)


@app.command(name="get")
def get_command(
    entity_id: Annotated[str, typer.Argument(help="Entity id, e.g. person.john_doe")],
    workspace: WorkspaceArg = Path("."),
    config: ConfigOpt = None,
) -> None:
    """Print one entity as DSL."""
    try:
        graph, settings = load_project_with_config(workspace, config)
        entity = graph.get_entity(entity_id)
    except FirmError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    typer.echo(generate(entity, settings.generate.to_options()), nl=False)


@app.command(name="related")
def related_command(
    entity_id: Annotated[str, typer.Argument(help="Entity id, e.g. person.john_doe")],
    workspace: WorkspaceArg = Path("."),
    config: ConfigOpt = None,
    direction: Annotated[
        Direction | None, typer.Option("--direction", "-d", help="outgoing or incoming")
    ] = None,
) -> None:
    """Show the entities linked to one entity by references."""
    graph = _load(workspace, config)
    try:
        relations = graph.related(entity_id, direction)
    except FirmError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    table = Table(title=entity_id)
    table.add_column("Direction")
    table.add_column("Field")
    table.add_column("Entity")
    for relation in relations:
        arrow = "->" if relation.direction == Direction.OUTGOING else "<-"
        table.add_row(arrow, relation.field, relation.entity.id)
    console.print(table)


@app.command(name="fmt")
def fmt_command(
    file: Annotated[Path, typer.Argument(help="Source file", exists=True, dir_okay=False)],
    write: Annotated[
        bool, typer.Option("--write", help="Rewrite the file instead of printing it")
    ] = False,
    config: ConfigOpt = None,
) -> None:
    """Re-render a source file in canonical form. Comments are not preserved."""
    try:
        settings = resolve_config(file.parent, config)
        result = parse(file.read_text(encoding="utf-8"), file)
        if result.errors:
            _print_errors(result.errors)
            raise typer.Exit(code=1)
        schemas = [compile_schema(declaration) for declaration in result.schemas]
    except FirmError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    text = generate_source(result.entities, schemas, settings.generate.to_options())
    if write:
        file.write_text(text, encoding="utf-8")
        typer.echo(f"Formatted {file}")
    else:
        typer.echo(text, nl=False)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
