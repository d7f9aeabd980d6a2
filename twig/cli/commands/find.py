"""twig find — print the ids of all commits with a given message."""
from __future__ import annotations

import typer

from twig.cli._repo import open_repo, reporting_errors

app = typer.Typer()


@app.callback(invoke_without_command=True)
def find(
    ctx: typer.Context,
    message: str = typer.Argument(..., help="Exact commit message to search for."),
) -> None:
    """Print one commit id per line for every commit whose message matches."""
    with reporting_errors("find"):
        repo = open_repo()
        for commit_id in repo.find(message):
            typer.echo(commit_id)
