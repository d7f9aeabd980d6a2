"""Twig repository operations — add, commit, rm, checkout, branch, reset, history.

A :class:`Repository` is bound to one :class:`~twig.layout.RepoPaths`
context and an injectable clock.  Each operation follows the same
lifecycle:

1. Validate arguments and resolve every id / branch / path it needs.
   Validation errors are raised here, before any persisted state changes.
2. Load the index from ``.twig/index``.
3. Mutate the working tree, the object store and the index in memory.
4. Persist the index (atomic rename) and move refs.

Working-tree safety
-------------------
Checkout of a branch, reset and merge replace the working tree with another
commit's tree.  Before touching anything they compute the *unsafe* files:
working files that are not tracked by the current commit (or are staged for
removal but exist again) and that the target commit tracks.  Any unsafe
file aborts the command with :class:`~twig.errors.WouldOverwriteUntrackedError`
and leaves the working tree untouched.  Untracked files the target does not
track are never deleted.

Abbreviated ids
---------------
``checkout <id> -- <file>`` and ``reset <id>`` accept any unambiguous prefix
of a commit id.  Resolution scans the matching shard of the object store and
only considers commit objects.
"""
from __future__ import annotations

import logging
import pathlib
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import cast

from twig import refs, workdir
from twig.config import get_settings
from twig.errors import (
    AlreadyInitializedError,
    AlreadyOnBranchError,
    BranchExistsError,
    CannotRemoveCurrentBranchError,
    EmptyCommitError,
    EmptyMessageError,
    FileNotInCommitError,
    NoCommitWithMessageError,
    NotInitializedError,
    NotTrackedOrStagedError,
    WouldOverwriteUntrackedError,
)
from twig.index import Index, load_index, save_index
from twig.layout import RepoPaths, find_repo_root
from twig.object_store import ObjectStore
from twig.objects import Blob, Commit, ObjectKind, Tree

logger = logging.getLogger(__name__)

INITIAL_COMMIT_MESSAGE = "initial commit"

Clock = Callable[[], int]


def _wall_clock() -> int:
    return int(time.time())


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AddResult:
    """Outcome of ``add``.

    Attributes:
        staged:   Paths newly staged (or restaged with new content).
        unstaged: Paths whose content matches HEAD again, so any pending
                  staging entry was dropped.
    """

    staged: list[str] = field(default_factory=list)
    unstaged: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RmResult:
    """Outcome of ``rm``.

    Attributes:
        removed:  Tracked paths staged for removal (working file deleted).
        unstaged: Paths whose pending addition was withdrawn.
        errors:   One :class:`NotTrackedOrStagedError` per path that was
                  neither staged nor tracked.  Non-fatal.
    """

    removed: list[str] = field(default_factory=list)
    unstaged: list[str] = field(default_factory=list)
    errors: list[NotTrackedOrStagedError] = field(default_factory=list)


@dataclass(frozen=True)
class SwitchResult:
    """Outcome of a branch checkout or a reset.

    Attributes:
        commit_id:     Commit whose tree is now in the working directory.
        branch:        Branch HEAD names after the operation.
        files_written: Files materialised from the target tree.
        files_deleted: Previously tracked files removed from the working tree.
    """

    commit_id: str
    branch: str
    files_written: int = 0
    files_deleted: int = 0


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class Repository:
    """Operations over one repository rooted at ``paths.root``."""

    def __init__(self, paths: RepoPaths, *, clock: Clock | None = None) -> None:
        self.paths = paths
        self.store = ObjectStore(paths.objects_dir)
        self._clock = clock or _wall_clock

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @classmethod
    def open(
        cls,
        root: pathlib.Path | None = None,
        *,
        clock: Clock | None = None,
    ) -> Repository:
        """Open the repository containing *root* (default: discover from cwd).

        Raises:
            NotInitializedError: No control directory was found.
        """
        if root is None:
            root = find_repo_root()
            if root is None:
                raise NotInitializedError()
        paths = RepoPaths.for_root(root)
        if not paths.is_initialized():
            raise NotInitializedError()
        return cls(paths, clock=clock)

    @classmethod
    def init(
        cls,
        root: pathlib.Path,
        *,
        default_branch: str | None = None,
        clock: Clock | None = None,
    ) -> Repository:
        """Create the control directory and the root commit in *root*.

        The root commit has the empty tree, no parents, the message
        ``"initial commit"`` and timestamp 0, so every repository shares the
        same root commit id.

        Raises:
            AlreadyInitializedError: *root* already holds a repository.
        """
        paths = RepoPaths.for_root(root)
        if paths.control_dir.exists():
            raise AlreadyInitializedError()
        branch = default_branch or get_settings().default_branch
        refs.validate_branch_name(branch)

        paths.objects_dir.mkdir(parents=True)
        paths.heads_dir.mkdir(parents=True)
        paths.log_file.parent.mkdir(parents=True)

        repo = cls(paths, clock=clock)
        save_index(paths.index_file, Index())
        tree_id = repo.store.put(Tree())
        root_commit = Commit(
            tree=tree_id, parents=(), message=INITIAL_COMMIT_MESSAGE, timestamp=0
        )
        commit_id = repo.store.put(root_commit)
        refs.write_head(paths, branch)
        refs.write_branch(paths, branch, commit_id)
        refs.append_log(paths, commit_id, root_commit.timestamp, root_commit.message)
        logger.info("✅ Initialised Twig repository in %s (branch=%s)", paths.control_dir, branch)
        return repo

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    def current_branch(self) -> str:
        return refs.read_head_branch(self.paths)

    def head_commit_id(self) -> str:
        return refs.read_branch(self.paths, self.current_branch())

    # ``store.get`` rejects any object whose kind differs from the one asked for.

    def get_commit(self, commit_id: str) -> Commit:
        return cast(Commit, self.store.get(commit_id, ObjectKind.COMMIT))

    def get_tree(self, tree_id: str) -> Tree:
        return cast(Tree, self.store.get(tree_id, ObjectKind.TREE))

    def read_blob(self, blob_id: str) -> bytes:
        return cast(Blob, self.store.get(blob_id, ObjectKind.BLOB)).content

    def tree_of(self, commit_id: str) -> Tree:
        return self.get_tree(self.get_commit(commit_id).tree)

    def head_tree(self) -> Tree:
        return self.tree_of(self.head_commit_id())

    def branch_head(self, name: str) -> str:
        return refs.read_branch(self.paths, name)

    def load_index(self) -> Index:
        return load_index(self.paths.index_file)

    def save_index(self, index: Index) -> None:
        save_index(self.paths.index_file, index)

    def resolve_commit(self, commit_id: str) -> str:
        """Resolve a full or abbreviated commit id.

        Raises:
            UnknownIdError:   No commit matches.
            AmbiguousIdError: More than one commit matches.
        """
        return self.store.resolve_prefix(commit_id, ObjectKind.COMMIT)

    # ------------------------------------------------------------------
    # Working-tree safety
    # ------------------------------------------------------------------

    def untracked_files(self, index: Index, head_tree: Tree | None = None) -> list[str]:
        """Return working files that are neither tracked nor staged for addition.

        Files staged for removal that exist again in the working tree are
        untracked too.
        """
        head_tree = head_tree if head_tree is not None else self.head_tree()
        untracked = {
            path
            for path in workdir.list_files(self.paths)
            if path not in head_tree and not index.is_staged_for_addition(path)
        }
        untracked.update(p for p in index.removals if workdir.exists(self.paths, p))
        return sorted(untracked)

    def unsafe_files(self, target_tree: Tree, index: Index, head_tree: Tree | None = None) -> list[str]:
        """Return working files a switch to *target_tree* would silently overwrite."""
        head_tree = head_tree if head_tree is not None else self.head_tree()
        at_risk = {p for p in workdir.list_files(self.paths) if p not in head_tree}
        at_risk.update(p for p in index.removals if workdir.exists(self.paths, p))
        return sorted(p for p in at_risk if p in target_tree)

    def ensure_safe_switch(self, target_tree: Tree, index: Index, head_tree: Tree | None = None) -> None:
        unsafe = self.unsafe_files(target_tree, index, head_tree)
        if unsafe:
            logger.warning("⚠️ Untracked files in the way: %s", ", ".join(unsafe))
            raise WouldOverwriteUntrackedError(unsafe)

    def _switch_working_tree(self, target_commit_id: str, index: Index) -> tuple[int, int]:
        """Replace the tracked working tree with *target_commit_id*'s tree.

        Returns ``(files_written, files_deleted)``.
        """
        head_tree = self.head_tree()
        target_tree = self.tree_of(target_commit_id)
        self.ensure_safe_switch(target_tree, index, head_tree)

        deleted = 0
        for path in sorted(head_tree.paths() - target_tree.paths()):
            if workdir.delete_file(self.paths, path):
                deleted += 1
        for path, blob_id in sorted(target_tree.entries.items()):
            workdir.write_file(self.paths, path, self.read_blob(blob_id))
        return len(target_tree.entries), deleted

    # ------------------------------------------------------------------
    # add / commit / rm
    # ------------------------------------------------------------------

    def add(self, raw_paths: Iterable[str]) -> AddResult:
        """Stage the current content of each path.

        Content identical to HEAD drops any pending staging entry for the
        path (including a staged removal); anything else is written to the
        object store and staged.
        """
        files = workdir.expand_paths(self.paths, raw_paths)
        index = self.load_index()
        head_tree = self.head_tree()
        result = AddResult()

        for path in files:
            content = workdir.read_file(self.paths, path)
            blob = Blob(content=content)
            digest = blob.digest
            if head_tree.get(path) == digest:
                if index.unstage(path):
                    result.unstaged.append(path)
                continue
            if index.additions.get(path) == digest:
                continue
            self.store.put(blob)
            index.stage_for_addition(path, digest)
            result.staged.append(path)

        self.save_index(index)
        logger.info("✅ add: %d staged, %d unstaged", len(result.staged), len(result.unstaged))
        return result

    def commit(self, message: str) -> str:
        """Record the staged changes as a new commit on the current branch.

        Raises:
            EmptyMessageError: *message* is blank.
            EmptyCommitError:  Nothing is staged.
        """
        if not message.strip():
            raise EmptyMessageError()
        index = self.load_index()
        if index.is_clean():
            raise EmptyCommitError()
        return self.commit_index(index, message)

    def commit_index(
        self,
        index: Index,
        message: str,
        *,
        merge_parent: str | None = None,
    ) -> str:
        """Build and record a commit from *index* on top of the current head.

        The new tree is the head tree with the index removals applied first,
        then the additions.  The branch ref moves to the new commit, the
        index is cleared and persisted, and ``logs/HEAD`` gains a line.
        """
        branch = self.current_branch()
        head_id = refs.read_branch(self.paths, branch)
        head = self.get_commit(head_id)
        tree = self.get_tree(head.tree).with_changes(index.removals, index.additions)
        tree_id = self.store.put(tree)

        parents = (head_id, merge_parent) if merge_parent else (head_id,)
        commit = Commit(tree=tree_id, parents=parents, message=message, timestamp=self._clock())
        commit_id = self.store.put(commit)

        refs.write_branch(self.paths, branch, commit_id)
        index.clear()
        self.save_index(index)
        refs.append_log(self.paths, commit_id, commit.timestamp, message)
        logger.info("✅ [%s %s] %s", branch, commit_id[:8], message)
        return commit_id

    def rm(self, raw_paths: Iterable[str]) -> RmResult:
        """Unstage and/or untrack each path.

        A staged addition is withdrawn; a path tracked by HEAD is staged for
        removal and its working file deleted.  Paths that are neither are
        reported in :attr:`RmResult.errors` and the rest proceed.
        """
        index = self.load_index()
        head_tree = self.head_tree()
        targets: dict[str, None] = {}
        for raw in raw_paths:
            rel = workdir.to_repo_path(self.paths, raw)
            if (self.paths.root / rel).is_dir():
                prefix = "" if rel == "." else rel + "/"
                known = head_tree.paths() | set(index.additions)
                known.update(workdir.list_files(self.paths))
                targets.update(dict.fromkeys(sorted(p for p in known if p.startswith(prefix))))
            else:
                targets[rel] = None

        result = RmResult()
        for path in targets:
            handled = False
            if index.is_staged_for_addition(path):
                index.unstage(path)
                result.unstaged.append(path)
                handled = True
            if path in head_tree:
                index.stage_for_removal(path)
                workdir.delete_file(self.paths, path)
                result.removed.append(path)
                handled = True
            if not handled:
                logger.warning("⚠️ rm: %s is neither staged nor tracked", path)
                result.errors.append(NotTrackedOrStagedError(path))

        self.save_index(index)
        return result

    # ------------------------------------------------------------------
    # checkout
    # ------------------------------------------------------------------

    def checkout_file(self, raw_path: str) -> None:
        """Restore one file from the HEAD commit.  The index is untouched.

        Raises:
            FileNotInCommitError: HEAD does not track the path.
        """
        self._restore_file(self.head_commit_id(), raw_path)

    def checkout_file_at(self, commit_id: str, raw_path: str) -> str:
        """Restore one file from the commit *commit_id* (full or abbreviated).

        Returns the resolved full commit id.

        Raises:
            UnknownIdError / AmbiguousIdError: *commit_id* does not resolve.
            FileNotInCommitError:              The commit does not track the path.
        """
        resolved = self.resolve_commit(commit_id)
        self._restore_file(resolved, raw_path)
        return resolved

    def _restore_file(self, commit_id: str, raw_path: str) -> None:
        path = workdir.to_repo_path(self.paths, raw_path)
        blob_id = self.tree_of(commit_id).get(path)
        if blob_id is None:
            raise FileNotInCommitError()
        workdir.write_file(self.paths, path, self.read_blob(blob_id))
        logger.info("✅ Restored %s from %s", path, commit_id[:8])

    def checkout_branch(self, name: str) -> SwitchResult:
        """Make *name* the current branch and its head the working tree.

        Raises:
            AlreadyOnBranchError:         *name* is already current.
            BranchNotFoundError:          No such branch.
            WouldOverwriteUntrackedError: Untracked work is in the way.
        """
        if name == self.current_branch():
            raise AlreadyOnBranchError()
        target_id = refs.read_branch(self.paths, name)
        index = self.load_index()
        written, deleted = self._switch_working_tree(target_id, index)

        refs.write_head(self.paths, name)
        index.clear()
        self.save_index(index)
        logger.info("✅ Switched to branch %r at %s", name, target_id[:8])
        return SwitchResult(
            commit_id=target_id, branch=name, files_written=written, files_deleted=deleted
        )

    # ------------------------------------------------------------------
    # branches / reset
    # ------------------------------------------------------------------

    def create_branch(self, name: str) -> str:
        """Create branch *name* at the current head without switching to it.

        Raises:
            InvalidBranchNameError: *name* is not a usable ref name.
            BranchExistsError:      *name* exists, or clashes with a nested
                                    name such as ``a`` vs ``a/b``.
        """
        refs.validate_branch_name(name)
        if refs.branch_exists(self.paths, name):
            raise BranchExistsError()
        blocking = refs.branch_conflict(self.paths, name)
        if blocking is not None:
            raise BranchExistsError(
                f"Cannot create branch '{name}': branch '{blocking}' already exists."
            )
        head_id = self.head_commit_id()
        refs.write_branch(self.paths, name, head_id)
        return head_id

    def remove_branch(self, name: str) -> None:
        """Delete the pointer *name*; its commits stay in the store."""
        if name == self.current_branch():
            raise CannotRemoveCurrentBranchError()
        refs.delete_branch(self.paths, name)

    def reset(self, commit_id: str) -> SwitchResult:
        """Move the current branch to *commit_id* and check out its tree.

        Raises:
            UnknownIdError / AmbiguousIdError: *commit_id* does not resolve.
            WouldOverwriteUntrackedError:      Untracked work is in the way.
        """
        target_id = self.resolve_commit(commit_id)
        branch = self.current_branch()
        index = self.load_index()
        written, deleted = self._switch_working_tree(target_id, index)

        refs.write_branch(self.paths, branch, target_id)
        index.clear()
        self.save_index(index)
        return SwitchResult(
            commit_id=target_id, branch=branch, files_written=written, files_deleted=deleted
        )

    # ------------------------------------------------------------------
    # history
    # ------------------------------------------------------------------

    def first_parent_chain(self, commit_id: str) -> list[str]:
        """Return *commit_id* and its first-parent ancestors, newest first."""
        chain = [commit_id]
        commit = self.get_commit(commit_id)
        while commit.first_parent is not None:
            chain.append(commit.first_parent)
            commit = self.get_commit(commit.first_parent)
        return chain

    def log(self) -> list[tuple[str, Commit]]:
        """Return the current branch's first-parent history, newest first."""
        return [(cid, self.get_commit(cid)) for cid in self.first_parent_chain(self.head_commit_id())]

    def global_log(self) -> list[tuple[str, Commit]]:
        """Return every commit ever made in this repository, in creation order."""
        return [(entry.commit_id, self.get_commit(entry.commit_id)) for entry in refs.read_log(self.paths)]

    def find(self, message: str) -> list[str]:
        """Return the ids of all commits whose message is exactly *message*.

        Raises:
            NoCommitWithMessageError: No commit has that message.
        """
        flat = " ".join(message.splitlines())
        matches = [e.commit_id for e in refs.read_log(self.paths) if e.message == flat]
        if not matches:
            raise NoCommitWithMessageError()
        return matches
