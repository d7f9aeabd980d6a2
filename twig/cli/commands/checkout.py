"""twig checkout — restore files or switch branches.

Three forms::

    twig checkout -- <file>             restore <file> from HEAD
    twig checkout <commit> -- <file>    restore <file> from <commit>
    twig checkout <branch>              switch to <branch>

The ``--`` separator decides the form, so it has to survive argument
parsing: :class:`CheckoutCommand` records how many arguments precede it
before Click consumes it.
"""
from __future__ import annotations

import logging

import click
import typer
from typer.core import TyperCommand

from twig.cli._repo import anchor_at_cwd, open_repo, reporting_errors
from twig.errors import ExitCode

logger = logging.getLogger(__name__)

SEPARATOR_KEY = "twig.checkout.separator"


class CheckoutCommand(TyperCommand):
    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        ctx.meta[SEPARATOR_KEY] = args.index("--") if "--" in args else None
        return super().parse_args(ctx, args)


def _usage_error() -> typer.Exit:
    typer.echo("Incorrect operands.")
    return typer.Exit(code=ExitCode.USER_ERROR)


def run_checkout(args: list[str], separator: int | None) -> None:
    """Dispatch to the checkout form selected by the ``--`` position."""
    with reporting_errors("checkout"):
        if separator is None:
            if len(args) != 1:
                raise _usage_error()
            result = open_repo().checkout_branch(args[0])
            typer.echo(f"Switched to branch '{result.branch}'")
            return

        before, after = args[:separator], args[separator:]
        if len(after) != 1 or len(before) > 1:
            raise _usage_error()
        repo = open_repo()
        (file_path,) = anchor_at_cwd(repo.paths.root, after)
        if before:
            repo.checkout_file_at(before[0], file_path)
        else:
            repo.checkout_file(file_path)
