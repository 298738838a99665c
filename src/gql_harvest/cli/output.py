import json

from graphql import print_ast
from rich.console import Console
from rich.table import Table

from gql_harvest.core.diagnostics import DiagnosticsCollector
from gql_harvest.models import Document, Severity

console = Console()
err_console = Console(stderr=True)


def print_documents(documents: dict[str, Document]) -> None:
    if not documents:
        console.print("[yellow]No queries found[/yellow]")
        return
    table = Table(title="Extracted queries")
    table.add_column("File")
    table.add_column("Line", justify="right")
    table.add_column("Kind")
    table.add_column("Name")
    for path, document in documents.items():
        for fragment in document.definitions:
            table.add_row(path, str(fragment.line), fragment.kind.value, fragment.name)
    console.print(table)


def print_graphql(documents: dict[str, Document]) -> None:
    for path, document in documents.items():
        console.print(f"[bold]# {path}[/bold]")
        console.print(print_ast(document.to_graphql()), markup=False, highlight=False)


def documents_to_json(documents: dict[str, Document]) -> str:
    payload = {
        path: [fragment.model_dump(mode="json") for fragment in document.definitions]
        for path, document in documents.items()
    }
    return json.dumps(payload, indent=2)


def print_diagnostics(collector: DiagnosticsCollector) -> None:
    for diagnostic in collector.diagnostics:
        style = "red" if diagnostic.severity is Severity.ERROR else "yellow"
        err_console.print(f"[{style}]{diagnostic.severity.value}[/{style}] {diagnostic.message}", highlight=False)
