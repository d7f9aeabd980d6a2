"""twig reset — move the current branch to a commit and check out its tree.

Accepts any unambiguous prefix of a commit id.  Files tracked by the old
head but not by the target are deleted; untracked files the target would
overwrite abort the command before anything changes.  The index is cleared.
"""
from __future__ import annotations

import logging

import typer

from twig.cli._repo import open_repo, reporting_errors

logger = logging.getLogger(__name__)

app = typer.Typer()


@app.callback(invoke_without_command=True)
def reset(
    ctx: typer.Context,
    commit_id: str = typer.Argument(..., metavar="COMMIT", help="Full or abbreviated commit id."),
) -> None:
    """Reset the current branch to COMMIT."""
    with reporting_errors("reset"):
        result = open_repo().reset(commit_id)
        typer.echo(f"HEAD is now at {result.commit_id[:7]} on {result.branch}")
