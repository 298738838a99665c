import asyncio
from typing import Annotated

import typer

from gql_harvest.cli.output import (
    console,
    documents_to_json,
    print_diagnostics,
    print_documents,
    print_graphql,
)
from gql_harvest.config import ExtractorSettings
from gql_harvest.core.diagnostics import DiagnosticsCollector
from gql_harvest.core.discovery import iter_source_files
from gql_harvest.core.file_parser import FileParser


def extract(
    paths: Annotated[list[str], typer.Argument(help="Files or directories to scan.")],
    json_output: Annotated[bool, typer.Option("--json", help="Emit extracted fragments as JSON.")] = False,
    print_queries: Annotated[bool, typer.Option("--print", help="Print the extracted GraphQL documents.")] = False,
    strict: Annotated[bool, typer.Option(help="Exit with status 1 when any file failed to extract.")] = False,
) -> None:
    """Extract GraphQL queries from component source files."""
    try:
        files = list(iter_source_files(paths))
    except FileNotFoundError as err:
        console.print(f"[red]{err}[/red]")
        raise typer.Exit(code=2) from None

    collector = DiagnosticsCollector()
    parser = FileParser(settings=ExtractorSettings.from_env(), sink=collector)
    documents = asyncio.run(parser.parse_files(files))

    if json_output:
        typer.echo(documents_to_json(documents))
    elif print_queries:
        print_graphql(documents)
    else:
        print_documents(documents)
    print_diagnostics(collector)

    if strict and collector.errors:
        raise typer.Exit(code=1)
