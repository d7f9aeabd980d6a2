"""twig rm — unstage and/or untrack files.

A staged addition is withdrawn.  A file tracked by HEAD is staged for
removal and deleted from the working tree.  A path that is neither is
reported and the remaining paths are still processed; the command then
exits with a user error.
"""
from __future__ import annotations

import logging

import typer

from twig.cli._repo import anchor_at_cwd, open_repo, reporting_errors
from twig.errors import ExitCode

logger = logging.getLogger(__name__)


def run_rm(paths: list[str]) -> None:
    with reporting_errors("rm"):
        repo = open_repo()
        result = repo.rm(anchor_at_cwd(repo.paths.root, paths))
        for path in result.removed:
            typer.echo(f"rm '{path}'")
        for error in result.errors:
            typer.echo(error.message)
        if result.errors:
            raise typer.Exit(code=ExitCode.USER_ERROR)
