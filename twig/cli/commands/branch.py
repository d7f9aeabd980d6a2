"""twig branch — create a branch at the current head (without switching)."""
from __future__ import annotations

import typer

from twig.cli._repo import open_repo, reporting_errors

app = typer.Typer()


@app.callback(invoke_without_command=True)
def branch(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the branch to create."),
) -> None:
    with reporting_errors("branch"):
        repo = open_repo()
        commit_id = repo.create_branch(name)
        typer.echo(f"✅ Created branch {name} at {commit_id[:7]}")
