"""Shared plumbing for Twig command callbacks.

Every command except ``init`` needs an open repository, and every command
reports failures the same way: the error's message on stdout, then the
error's exit code.  Messages go to stdout so that
``typer.testing.CliRunner`` captures them in ``result.output``.
"""
from __future__ import annotations

import contextlib
import logging
import pathlib
from collections.abc import Iterator

import typer

from twig.errors import ExitCode, TwigError
from twig.layout import find_repo_root
from twig.repository import Repository

logger = logging.getLogger(__name__)


def require_repo(start: pathlib.Path | None = None) -> pathlib.Path:
    """Return the repo root or exit 2 with a clear error message."""
    root = find_repo_root(start)
    if root is None:
        typer.echo("Not in an initialized Twig directory.")
        raise typer.Exit(code=ExitCode.REPO_NOT_FOUND)
    return root


def open_repo() -> Repository:
    return Repository.open(require_repo())


@contextlib.contextmanager
def reporting_errors(command: str) -> Iterator[None]:
    """Translate exceptions raised inside a command body into CLI exits."""
    try:
        yield
    except typer.Exit:
        raise
    except TwigError as exc:
        typer.echo(exc.message)
        if exc.exit_code == ExitCode.INTERNAL_ERROR:
            logger.error("❌ twig %s: %s", command, exc)
        raise typer.Exit(code=exc.exit_code)
    except Exception as exc:
        typer.echo(f"❌ twig {command} failed: {exc}")
        logger.error("❌ twig %s error: %s", command, exc, exc_info=True)
        raise typer.Exit(code=ExitCode.INTERNAL_ERROR)


def anchor_at_cwd(root: pathlib.Path, operands: list[str]) -> list[str]:
    """Rewrite relative path operands so they name paths under the current directory.

    Inside a subdirectory of *root*, ``a.txt`` means ``<cwd>/a.txt`` and
    ``.`` or ``*`` mean the subdirectory itself.  At the root, or when the
    current directory lies outside *root* (``TWIG_REPO_ROOT``), operands stay
    relative to *root*.
    """
    cwd = pathlib.Path.cwd().resolve()
    if root.resolve() not in cwd.parents:
        return list(operands)
    return [
        op if pathlib.Path(op).is_absolute() else str(cwd if op == "*" else cwd / op)
        for op in operands
    ]
