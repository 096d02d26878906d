import typer

from gql_extract.cli.extract import extract
from gql_extract.cli.watch import watch

app = typer.Typer(
    name="gql-extract",
    help="gql-extract: find GraphQL fragments in component files.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("extract")(extract)
app.command("watch")(watch)


def main() -> None:
    app()
