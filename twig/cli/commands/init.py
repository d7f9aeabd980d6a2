"""twig init — create a repository in the current directory.

Creates the control directory, an empty index, the shared root commit
(``initial commit``, timestamp 0, empty tree) and the default branch
pointing at it.  ``TWIG_REPO_ROOT`` replaces the current directory when set.
"""
from __future__ import annotations

import logging
import pathlib
from typing import Optional

import typer

from twig.cli._repo import reporting_errors
from twig.config import get_settings
from twig.repository import Repository

logger = logging.getLogger(__name__)

app = typer.Typer()


@app.callback(invoke_without_command=True)
def init(
    ctx: typer.Context,
    default_branch: Optional[str] = typer.Option(
        None,
        "--default-branch",
        metavar="BRANCH",
        help="Name of the initial branch (default: TWIG_DEFAULT_BRANCH or master).",
    ),
) -> None:
    """Initialise a new Twig repository in the current directory."""
    root = get_settings().repo_root or pathlib.Path.cwd()
    with reporting_errors("init"):
        repo = Repository.init(root, default_branch=default_branch)
        typer.echo(
            f"✅ Initialised empty Twig repository in {repo.paths.control_dir} "
            f"on branch {repo.current_branch()}"
        )
