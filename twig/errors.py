"""Exit-code contract and exception types for Twig.

Every failure a command can report is a :class:`TwigError` subclass carrying
the user-facing message and the process exit code the CLI should use.
Validation errors are raised before any persisted state is touched; store
errors (:class:`ObjectNotFoundError`, :class:`CorruptObjectError`) signal
on-disk tampering or a bug and are fatal.
"""
from __future__ import annotations

import enum


class ExitCode(enum.IntEnum):
    """Standardised CLI exit codes.

    0 — success
    1 — user error (bad arguments, invalid input)
    2 — repo-not-found
    3 — internal error (missing or corrupt objects)
    """

    SUCCESS = 0
    USER_ERROR = 1
    REPO_NOT_FOUND = 2
    INTERNAL_ERROR = 3


class TwigError(Exception):
    """Base exception for Twig errors."""

    default_message = "Twig command failed."
    exit_code = ExitCode.USER_ERROR

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


# ---------------------------------------------------------------------------
# Repository lifecycle
# ---------------------------------------------------------------------------


class NotInitializedError(TwigError):
    """Raised when the current directory is not inside a Twig repository."""

    default_message = "Not in an initialized Twig directory."
    exit_code = ExitCode.REPO_NOT_FOUND


class AlreadyInitializedError(TwigError):
    default_message = (
        "A Twig version-control system already exists in the current directory."
    )


# ---------------------------------------------------------------------------
# Staging and committing
# ---------------------------------------------------------------------------


class EmptyCommitError(TwigError):
    default_message = "No changes added to the commit."


class EmptyMessageError(TwigError):
    default_message = "Please enter a commit message."


class PathNotFoundError(TwigError):
    def __init__(self, path: str) -> None:
        super().__init__(f"{path} does not exist.")
        self.path = path


class OutsideRepositoryError(TwigError):
    def __init__(self, path: str, root: str) -> None:
        super().__init__(f"fatal: {path} is outside repository at {root}")
        self.path = path


class NotTrackedOrStagedError(TwigError):
    """A path passed to ``rm`` is neither staged nor tracked.

    Reported per path; the remaining paths of the batch are still processed.
    """

    default_message = "No reason to remove the file."

    def __init__(self, path: str) -> None:
        super().__init__(f"{self.default_message} {path}")
        self.path = path


# ---------------------------------------------------------------------------
# Commit and branch lookup
# ---------------------------------------------------------------------------


class FileNotInCommitError(TwigError):
    default_message = "File does not exist in that commit."


class UnknownIdError(TwigError):
    default_message = "No commit with that id exists."


class AmbiguousIdError(TwigError):
    """Raised when an abbreviated id matches more than one commit."""

    default_message = "Please enter more digits."

    def __init__(self, prefix: str, candidates: list[str]) -> None:
        super().__init__(
            f"{self.default_message} ({prefix!r} matches {len(candidates)} commits)"
        )
        self.prefix = prefix
        self.candidates = candidates


class NoCommitWithMessageError(TwigError):
    default_message = "Found no commit with that message."


class AlreadyOnBranchError(TwigError):
    default_message = "No need to checkout the current branch."


class WouldOverwriteUntrackedError(TwigError):
    """Raised when checkout/reset/merge would clobber untracked work."""

    default_message = (
        "There is an untracked file in the way; delete it, or add and commit it first."
    )

    def __init__(self, paths: list[str]) -> None:
        super().__init__()
        self.paths = sorted(paths)


class BranchExistsError(TwigError):
    default_message = "A branch with that name already exists."


class BranchNotFoundError(TwigError):
    default_message = "A branch with that name does not exist."


class CannotRemoveCurrentBranchError(TwigError):
    default_message = "Cannot remove the current branch."


class InvalidBranchNameError(TwigError):
    def __init__(self, name: str) -> None:
        super().__init__(
            f"Invalid branch name '{name}'. "
            "Use letters, digits, hyphens, underscores, dots, or forward slashes."
        )
        self.name = name


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


class SelfMergeError(TwigError):
    default_message = "Cannot merge a branch with itself."


class UncommittedChangesError(TwigError):
    default_message = "You have uncommitted changes."


# ---------------------------------------------------------------------------
# Object store (fatal)
# ---------------------------------------------------------------------------


class ObjectNotFoundError(TwigError):
    exit_code = ExitCode.INTERNAL_ERROR

    def __init__(self, digest: str) -> None:
        super().__init__(f"Object {digest[:8]} missing from the object store.")
        self.digest = digest


class CorruptObjectError(TwigError):
    exit_code = ExitCode.INTERNAL_ERROR

    def __init__(self, digest: str, reason: str) -> None:
        super().__init__(f"Object {digest[:8]} is corrupt: {reason}")
        self.digest = digest
        self.reason = reason
