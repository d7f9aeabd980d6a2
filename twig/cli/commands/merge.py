"""twig merge — merge a branch into the current branch.

Outcomes
--------
* Target already in history: ``Given branch is an ancestor of the current branch.``
* Current head is the split point: the target branch is checked out and
  ``Current branch fast-forwarded.`` is printed.
* Nothing to stage: ``No changes to merge.``
* Otherwise a merge commit ``Merged <target> into <current>.`` is created;
  when conflict placeholders were written, ``Encountered a merge conflict.``
  follows.  All outcomes exit 0.
"""
from __future__ import annotations

import logging

import typer

from twig.cli._repo import open_repo, reporting_errors
from twig.merge_engine import MergeStatus, merge as merge_branch

logger = logging.getLogger(__name__)

app = typer.Typer()

_MESSAGES: dict[MergeStatus, str] = {
    MergeStatus.GIVEN_BRANCH_IS_ANCESTOR: "Given branch is an ancestor of the current branch.",
    MergeStatus.FAST_FORWARDED: "Current branch fast-forwarded.",
    MergeStatus.NO_CHANGES: "No changes to merge.",
}


@app.callback(invoke_without_command=True)
def merge(
    ctx: typer.Context,
    branch: str = typer.Argument(..., help="Name of the branch to merge into HEAD."),
) -> None:
    """Merge BRANCH into the current branch."""
    with reporting_errors("merge"):
        result = merge_branch(open_repo(), branch)
        if result.status in _MESSAGES:
            typer.echo(_MESSAGES[result.status])
            return
        if result.commit_id is not None:
            typer.echo(f"✅ Merge commit {result.commit_id[:7]}")
        if result.has_conflicts:
            typer.echo("Encountered a merge conflict.")
            for path in result.conflict_paths:
                typer.echo(f"\tboth modified:   {path}")
