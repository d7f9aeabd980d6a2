"""Twig CLI — Typer application root.

Entry point for the ``twig`` console script.  Single-argument commands are
Typer sub-applications; ``add``, ``rm`` and ``checkout`` take a variable
number of operands and are registered as plain commands.
"""
from __future__ import annotations

import logging

import typer

from twig.cli.commands import (
    branch,
    commit,
    find,
    global_log,
    init,
    log,
    merge,
    reset,
    rm_branch,
    status,
)
from twig.cli.commands.add import run_add
from twig.cli.commands.checkout import SEPARATOR_KEY, CheckoutCommand, run_checkout
from twig.cli.commands.rm import run_rm
from twig.config import get_settings

cli = typer.Typer(
    name="twig",
    help="Twig — a small content-addressed version-control system.",
    no_args_is_help=True,
)


@cli.callback()
def _configure(
    debug: bool = typer.Option(False, "--debug", help="Log at DEBUG level to stderr."),
) -> None:
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if debug else settings.effective_log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


cli.add_typer(init.app, name="init", help="Create a new repository in the current directory.")


# add, rm and checkout are plain commands (not add_typer) because their
# variadic operands would otherwise be parsed by a Click Group.
@cli.command("add", help="Stage files for the next commit.")
def _add_cmd(
    paths: list[str] = typer.Argument(..., help="Files or directories to stage; * stages everything."),
) -> None:
    run_add(paths)


cli.add_typer(commit.app, name="commit", help="Record the staged changes.")


@cli.command("rm", help="Unstage a file and stop tracking it.")
def _rm_cmd(
    paths: list[str] = typer.Argument(..., help="Files to unstage or untrack."),
) -> None:
    run_rm(paths)


cli.add_typer(log.app, name="log", help="Show the current branch's history.")
cli.add_typer(global_log.app, name="global-log", help="Show every commit ever made.")
cli.add_typer(find.app, name="find", help="Find commits by exact message.")
cli.add_typer(status.app, name="status", help="Show branches, staged changes and drift.")


@cli.command(
    "checkout",
    cls=CheckoutCommand,
    help="Restore a file (-- FILE, COMMIT -- FILE) or switch to a branch.",
)
def _checkout_cmd(
    ctx: typer.Context,
    operands: list[str] = typer.Argument(..., metavar="[COMMIT] -- FILE | BRANCH"),
) -> None:
    run_checkout(operands, ctx.meta.get(SEPARATOR_KEY))


cli.add_typer(branch.app, name="branch", help="Create a branch at the current head.")
cli.add_typer(rm_branch.app, name="rm-branch", help="Delete a branch pointer.")
cli.add_typer(reset.app, name="reset", help="Move the current branch to a commit.")
cli.add_typer(merge.app, name="merge", help="Merge a branch into the current branch.")


if __name__ == "__main__":
    cli()
