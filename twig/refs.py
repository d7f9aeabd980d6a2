"""Mutable names on top of the immutable store: HEAD, branch refs and the commit log.

Branches are plain files under ``.twig/refs/heads/<name>`` holding a
40-character commit id.  ``HEAD`` is symbolic (``ref: refs/heads/<name>``)
and always names a branch.  Every update is a single atomic overwrite.

``logs/HEAD`` is append-only; one line per commit ever created in this
repository, including commits no longer reachable from a branch.
"""
from __future__ import annotations

import logging
import pathlib
import re
from dataclasses import dataclass

from twig._fs import append_text, atomic_write_text, prune_empty_dirs
from twig.errors import BranchNotFoundError, InvalidBranchNameError, TwigError
from twig.layout import RepoPaths

logger = logging.getLogger(__name__)

_HEAD_PREFIX = "ref: refs/heads/"

# Branch names follow the same rules as Git: no spaces, no control chars,
# no component starting with a dot, no double dots, no trailing slash or dot.
_BRANCH_RE = re.compile(r"^[a-zA-Z0-9._\-/]+$")


@dataclass(frozen=True)
class LogEntry:
    """One line of ``logs/HEAD``."""

    commit_id: str
    timestamp: int
    message: str


def _is_valid_branch_name(name: str) -> bool:
    return not (
        not _BRANCH_RE.fullmatch(name)
        or ".." in name
        or name.startswith((".", "/"))
        or name.endswith(("/", "."))
        or "//" in name
        or "/." in name
    )


def validate_branch_name(name: str) -> None:
    if not _is_valid_branch_name(name):
        raise InvalidBranchNameError(name)


# ---------------------------------------------------------------------------
# HEAD
# ---------------------------------------------------------------------------


def read_head_branch(paths: RepoPaths) -> str:
    """Return the branch name HEAD points to."""
    content = paths.head_file.read_text(encoding="utf-8").strip()
    if not content.startswith(_HEAD_PREFIX):
        raise TwigError(f"Malformed HEAD: {content!r}")
    return content[len(_HEAD_PREFIX):]


def write_head(paths: RepoPaths, branch: str) -> None:
    atomic_write_text(paths.head_file, f"{_HEAD_PREFIX}{branch}\n")
    logger.debug("HEAD -> %s", branch)


# ---------------------------------------------------------------------------
# Branches
# ---------------------------------------------------------------------------


def _ref_path(paths: RepoPaths, name: str) -> pathlib.Path | None:
    """Return the ref file for *name*, or ``None`` if the name cannot be a branch."""
    if not _is_valid_branch_name(name):
        return None
    ref = paths.heads_dir / name
    heads = paths.heads_dir.resolve()
    if heads not in ref.resolve().parents:
        return None
    return ref


def branch_exists(paths: RepoPaths, name: str) -> bool:
    ref = _ref_path(paths, name)
    return ref is not None and ref.is_file()


def branch_conflict(paths: RepoPaths, name: str) -> str | None:
    """Return the existing branch that blocks creating *name*, if any.

    A ref is a file, so ``a`` and ``a/b`` cannot both exist.
    """
    parts = name.split("/")
    for depth in range(1, len(parts)):
        prefix = "/".join(parts[:depth])
        if branch_exists(paths, prefix):
            return prefix
    nested = paths.heads_dir / name
    if nested.is_dir():
        for ref in sorted(nested.rglob("*")):
            if ref.is_file() and not ref.name.startswith(".tmp-"):
                return ref.relative_to(paths.heads_dir).as_posix()
    return None


def read_branch(paths: RepoPaths, name: str) -> str:
    """Return the commit id *name* points to.

    Raises:
        BranchNotFoundError: No such branch, or *name* is not a valid branch name.
    """
    ref = _ref_path(paths, name)
    if ref is None or not ref.is_file():
        raise BranchNotFoundError()
    return ref.read_text(encoding="utf-8").strip()


def write_branch(paths: RepoPaths, name: str, commit_id: str) -> None:
    ref = _ref_path(paths, name)
    if ref is None:
        raise InvalidBranchNameError(name)
    atomic_write_text(ref, commit_id + "\n")
    logger.info("✅ %s -> %s", name, commit_id[:8])


def delete_branch(paths: RepoPaths, name: str) -> None:
    ref = _ref_path(paths, name)
    if ref is None or not ref.is_file():
        raise BranchNotFoundError()
    ref.unlink()
    prune_empty_dirs(ref.parent, stop=paths.heads_dir)
    logger.info("✅ Deleted branch %s", name)


def list_branches(paths: RepoPaths) -> list[str]:
    """Return every branch name (nested names use ``/``), sorted."""
    if not paths.heads_dir.is_dir():
        return []
    return sorted(
        p.relative_to(paths.heads_dir).as_posix()
        for p in paths.heads_dir.rglob("*")
        if p.is_file() and not p.name.startswith(".tmp-")
    )


# ---------------------------------------------------------------------------
# Commit log
# ---------------------------------------------------------------------------


def append_log(paths: RepoPaths, commit_id: str, timestamp: int, message: str) -> None:
    # Newlines would break the one-line-per-commit format.
    flat = " ".join(message.splitlines())
    append_text(paths.log_file, f"{commit_id} {timestamp} {flat}\n")


def read_log(paths: RepoPaths) -> list[LogEntry]:
    """Return every recorded commit in creation order."""
    if not paths.log_file.is_file():
        return []
    entries: list[LogEntry] = []
    for line in paths.log_file.read_text(encoding="utf-8").splitlines():
        if not line.strip():
            continue
        commit_id, timestamp, *rest = line.split(" ", 2)
        entries.append(
            LogEntry(commit_id=commit_id, timestamp=int(timestamp), message=rest[0] if rest else "")
        )
    return entries
