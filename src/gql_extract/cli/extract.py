import asyncio
import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from gql_extract.config import ExtractorSettings
from gql_extract.core.errors import ExtractionError
from gql_extract.core.languages import is_component_path
from gql_extract.core.parser import FileParser
from gql_extract.models import Diagnostic, QueryFragment
from gql_extract.store.memory import InMemoryComponentStore

console = Console()
err_console = Console(stderr=True)

StaticQueryElementsOption = Annotated[
    bool | None,
    typer.Option(
        "--static-query-elements/--no-static-query-elements",
        help="Scan <StaticQuery query={...}> elements (default from the environment).",
    ),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")]


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def build_settings(static_query_elements: bool | None) -> ExtractorSettings:
    settings = ExtractorSettings.from_env()
    if static_query_elements is None:
        return settings
    return replace(settings, static_query_elements=static_query_elements)


def collect_paths(paths: Iterable[Path]) -> list[str]:
    """Expand directories into the component files below them."""
    collected: list[str] = []
    for path in paths:
        if path.is_dir():
            collected.extend(str(p.resolve()) for p in sorted(path.rglob("*")) if p.is_file() and is_component_path(p))
        else:
            collected.append(str(path.resolve()))
    return collected


def render_fragments(fragments: Sequence[QueryFragment]) -> None:
    table = Table(show_lines=False)
    table.add_column("name", no_wrap=True)
    table.add_column("type")
    table.add_column("location", overflow="fold")
    table.add_column("hook")
    table.add_column("auto-named")
    for fragment in fragments:
        start = fragment.template_loc.start
        table.add_row(
            fragment.name,
            fragment.query_type,
            f"{fragment.file_path}:{start.line}:{start.column}",
            "yes" if fragment.is_hook else "",
            "yes" if fragment.is_auto_named else "",
        )
    console.print(table)
    console.print(f"({len(fragments)} fragments)")


def render_diagnostics(diagnostics: Sequence[Diagnostic]) -> None:
    for diagnostic in diagnostics:
        where = diagnostic.file_path
        if diagnostic.location is not None:
            where += f":{diagnostic.location.start.line}:{diagnostic.location.start.column}"
        err_console.print(f"[red]error[/red] [bold]{diagnostic.error_id}[/bold] {diagnostic.kind} {where}")
        if diagnostic.source_message:
            err_console.print(diagnostic.source_message, markup=False, highlight=False)
        if diagnostic.code_frame:
            err_console.print(Text.from_ansi(diagnostic.code_frame))


def extract(
    paths: Annotated[list[Path], typer.Argument(help="Component files or directories to scan.")],
    json_output: Annotated[bool, typer.Option("--json", help="Print fragments as JSON.")] = False,
    static_query_elements: StaticQueryElementsOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Extract GraphQL fragments from component files."""
    configure_logging(verbose)
    settings = build_settings(static_query_elements)
    diagnostics: list[Diagnostic] = []
    parser = FileParser(reporter=diagnostics.append, sink=InMemoryComponentStore(), settings=settings)

    try:
        fragments = asyncio.run(parser.parse_files(collect_paths(paths)))
    except ExtractionError as err:
        err_console.print(f"[red]fatal[/red] {err}", highlight=False)
        raise typer.Exit(2) from err

    if json_output:
        console.print_json(data=[f.model_dump(mode="json", exclude={"doc"}) for f in fragments], highlight=False)
    else:
        render_fragments(fragments)
    render_diagnostics(diagnostics)
    if diagnostics:
        raise typer.Exit(1)
