"""twig status — branches, staged changes and working-tree drift.

Default output::

    === Branches ===
    *master
    other

    === Staged Files ===
    wug.txt

    === Removed Files ===
    goodbye.txt

    === Modifications Not Staged For Commit ===
    junk.txt (deleted)
    wug3.txt (modified)

    === Untracked Files ===
    random.stuff

**--short** prints one file per line with a one-character code instead.
"""
from __future__ import annotations

import logging

import typer

from twig.cli._repo import open_repo, reporting_errors
from twig.status import StatusReport, compute_status, render_status

logger = logging.getLogger(__name__)

app = typer.Typer()

# One-character codes for --short
_SHORT_CODES: dict[str, str] = {
    "staged": "A",
    "removed": "D",
    "modified": "M",
    "deleted": "!",
    "untracked": "?",
}


def _render_short(report: StatusReport) -> list[str]:
    lines = [f"## {report.current_branch}"]
    lines += [f"{_SHORT_CODES['staged']} {path}" for path in report.staged]
    lines += [f"{_SHORT_CODES['removed']} {path}" for path in report.removed]
    lines += [f"{_SHORT_CODES[kind]} {path}" for path, kind in report.not_staged]
    lines += [f"{_SHORT_CODES['untracked']} {path}" for path in report.untracked]
    return lines


@app.callback(invoke_without_command=True)
def status(
    ctx: typer.Context,
    short: bool = typer.Option(False, "--short", "-s", help="Condensed one-line-per-file output."),
) -> None:
    """Show the working-tree state relative to HEAD and the index."""
    with reporting_errors("status"):
        report = compute_status(open_repo())
        if short:
            for line in _render_short(report):
                typer.echo(line)
        else:
            typer.echo(render_status(report))
