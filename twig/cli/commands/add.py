"""twig add — stage files for the next commit.

``twig add <path>...`` stages the current content of each file; a
directory stages every file below it and ``*`` or ``.`` stage everything
under the current directory (the whole working tree at the root).  A file
whose content matches HEAD again is unstaged instead.
"""
from __future__ import annotations

import logging

import typer

from twig.cli._repo import anchor_at_cwd, open_repo, reporting_errors

logger = logging.getLogger(__name__)


def run_add(paths: list[str]) -> None:
    with reporting_errors("add"):
        repo = open_repo()
        result = repo.add(anchor_at_cwd(repo.paths.root, paths))
        for path in result.unstaged:
            typer.echo(f"unstaged: {path} (matches HEAD)")
        logger.debug("add staged %s", result.staged)
