import asyncio
import contextlib
from pathlib import Path
from typing import Annotated

import typer

from gql_extract.cli.extract import (
    StaticQueryElementsOption,
    VerboseOption,
    build_settings,
    collect_paths,
    configure_logging,
    console,
    render_diagnostics,
    render_fragments,
)
from gql_extract.core.parser import FileParser
from gql_extract.models import Diagnostic
from gql_extract.store.memory import InMemoryComponentStore
from gql_extract.watcher.watchfiles_adapter import WatchfilesWatcher


def watch(
    directory: Annotated[Path, typer.Argument(help="Directory to watch.")] = Path("src"),
    static_query_elements: StaticQueryElementsOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Extract fragments, then re-extract changed files until interrupted."""
    configure_logging(verbose)
    settings = build_settings(static_query_elements)

    async def _run() -> None:
        diagnostics: list[Diagnostic] = []
        parser = FileParser(reporter=diagnostics.append, sink=InMemoryComponentStore(), settings=settings)

        async def _extract(paths: list[str]) -> None:
            diagnostics.clear()
            fragments = await parser.parse_files(paths)
            render_fragments(fragments)
            render_diagnostics(diagnostics)

        async def _on_change(paths: set[Path]) -> None:
            await _extract(sorted(str(p) for p in paths if p.exists()))

        await _extract(collect_paths([directory]))
        watcher = WatchfilesWatcher(directory, _on_change)
        await watcher.start()
        console.print(f"[green]Watching[/green] {directory} (Ctrl+C to stop)")
        try:
            await asyncio.Event().wait()
        finally:
            await watcher.stop()

    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(_run())
