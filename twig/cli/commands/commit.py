"""twig commit — record the staged changes as a new commit.

Algorithm
---------
1. Refuse a blank message and an empty index.
2. Apply the index to the head tree: removals first, then additions.
3. Store the new tree and the commit (parent = current head).
4. Move the current branch, clear the index, append to ``logs/HEAD``.
"""
from __future__ import annotations

import logging
from typing import Optional

import typer

from twig.cli._repo import open_repo, reporting_errors

logger = logging.getLogger(__name__)

app = typer.Typer()


@app.callback(invoke_without_command=True)
def commit(
    ctx: typer.Context,
    message_arg: Optional[str] = typer.Argument(None, metavar="MESSAGE", help="Commit message."),
    message: Optional[str] = typer.Option(None, "-m", "--message", help="Commit message."),
) -> None:
    """Record a new commit on the current branch."""
    with reporting_errors("commit"):
        repo = open_repo()
        commit_id = repo.commit(message if message is not None else (message_arg or ""))
        typer.echo(f"[{repo.current_branch()} {commit_id[:7]}] {repo.get_commit(commit_id).message}")
