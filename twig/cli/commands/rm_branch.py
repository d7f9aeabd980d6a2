"""twig rm-branch — delete a branch pointer; its commits stay in the store."""
from __future__ import annotations

import typer

from twig.cli._repo import open_repo, reporting_errors

app = typer.Typer()


@app.callback(invoke_without_command=True)
def rm_branch(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the branch to delete."),
) -> None:
    with reporting_errors("rm-branch"):
        open_repo().remove_branch(name)
        typer.echo(f"Deleted branch {name}")
