import asyncio
from pathlib import Path
from typing import Annotated

import typer

from gql_harvest.cli.output import console, print_diagnostics, print_documents
from gql_harvest.config import ExtractorSettings
from gql_harvest.core.diagnostics import DiagnosticsCollector
from gql_harvest.core.discovery import iter_source_files
from gql_harvest.core.file_parser import FileParser
from gql_harvest.watcher.watchfiles_adapter import WatchfilesWatcher


def watch(
    directory: Annotated[str, typer.Argument(help="Directory to watch.")] = ".",
) -> None:
    """Extract queries, then re-extract changed files on every save."""
    root = Path(directory)
    if not root.is_dir():
        console.print(f"[red]Not a directory: {directory}[/red]")
        raise typer.Exit(code=2)

    collector = DiagnosticsCollector()
    parser = FileParser(settings=ExtractorSettings.from_env(), sink=collector)

    async def _report(files: list[Path]) -> None:
        collector.clear()
        documents = await parser.parse_files(files)
        print_documents(documents)
        print_diagnostics(collector)

    async def _on_change(paths: set[Path]) -> None:
        await _report(sorted(paths))

    async def _run() -> None:
        await _report(list(iter_source_files([root])))
        watcher = WatchfilesWatcher(root, _on_change)
        await watcher.start()
        console.print(f"[green]Watching[/green] {root} (Ctrl+C to stop)")
        try:
            await watcher.wait()
        finally:
            await watcher.stop()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("[green]Stopped[/green]")
