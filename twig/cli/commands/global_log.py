"""twig global-log — every commit ever made, in creation order."""
from __future__ import annotations

import typer

from twig.cli._repo import open_repo, reporting_errors
from twig.cli.commands.log import format_commit

app = typer.Typer()


@app.callback(invoke_without_command=True)
def global_log(ctx: typer.Context) -> None:
    """Show every commit recorded in this repository."""
    with reporting_errors("global-log"):
        repo = open_repo()
        for commit_id, commit in repo.global_log():
            typer.echo(format_commit(commit_id, commit))
