import logging
from typing import Annotated

import typer

from gql_harvest.cli.extract import extract
from gql_harvest.cli.watch import watch

app = typer.Typer(
    name="gql-harvest",
    help="gql-harvest CLI — extract GraphQL queries embedded in component source.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def configure(
    log_level: Annotated[str, typer.Option(help="Logging level (DEBUG, INFO, WARNING, ERROR).")] = "WARNING",
) -> None:
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
        datefmt="%H:%M:%S",
    )


app.command("extract")(extract)
app.command("watch")(watch)


def main() -> None:
    app()
