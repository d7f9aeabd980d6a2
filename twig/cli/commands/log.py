"""twig log — first-parent history of the current branch.

Each commit renders as::

    ===
    commit <id>
    Merge: <p1[:7]> <p2[:7]>      (merge commits only)
    Date: Thu Jan 01 00:00:00 1970 +0000
    <message>
    <blank line>

Dates are printed in UTC.
"""
from __future__ import annotations

import datetime
import logging

import typer

from twig.cli._repo import open_repo, reporting_errors
from twig.objects import Commit

logger = logging.getLogger(__name__)

app = typer.Typer()

_DATE_FORMAT = "%a %b %d %H:%M:%S %Y +0000"


def format_date(timestamp: int) -> str:
    return datetime.datetime.fromtimestamp(timestamp, tz=datetime.timezone.utc).strftime(_DATE_FORMAT)


def format_commit(commit_id: str, commit: Commit) -> str:
    """Render one commit entry, including its trailing blank line."""
    lines = ["===", f"commit {commit_id}"]
    if commit.is_merge:
        lines.append("Merge: " + " ".join(parent[:7] for parent in commit.parents[:2]))
    lines += [f"Date: {format_date(commit.timestamp)}", commit.message, ""]
    return "\n".join(lines)


@app.callback(invoke_without_command=True)
def log(ctx: typer.Context) -> None:
    """Show the current branch's history, newest first."""
    with reporting_errors("log"):
        repo = open_repo()
        for commit_id, commit in repo.log():
            typer.echo(format_commit(commit_id, commit))
