"""Twig merge engine — split-point discovery and path-level three-way merge.

Public API
----------
Pure functions (no I/O):

- :func:`classify_path` — decide what happens to one path given its blob id
  at the split point (S), on the current head (H) and on the target (T).
- :func:`matching_rules` — every decision-table row that applies; used to
  check the rows never overlap.
- :func:`render_conflict` — build the conflict placeholder written for a
  conflicting path.
- :func:`split_point_of_chains` — split point of two first-parent chains.

Repository-bound:

- :func:`find_split_point` — split point of two commits.
- :func:`merge` — merge a branch into the current branch.

Split point
-----------
Each commit's *first-parent chain* runs from the commit back to the root
commit following only first parents.  Both chains are compared from the
root forward; the split point is the last position where they still agree.
This is a simplified split-point finder, not a lowest-common-ancestor search
over the whole DAG: second parents of merge commits are ignored, so on
histories with criss-cross merges it can pick an older baseline than Git
would.

Decision table
--------------

====  =========  =========  =========  ===============================
Row   S          H          T          Outcome
====  =========  =========  =========  ===============================
1     present    == S       != S       take T (write + stage)
2     absent     absent     present    take T (write + stage)
3     present    == S       absent     delete working file, stage rm
4     present    != S       != S, != H conflict
5     present    != S       absent     conflict
6     present    absent     != S       conflict
7     absent     present    != H       conflict
--    anything else                    no action
====  =========  =========  =========  ===============================

Rows are mutually exclusive by construction; :func:`classify_path` raises
:class:`ValueError` if more than one applies.

Conflict placeholder::

    <<<<<<< HEAD
    <head content>
    =======
    <target content>
    >>>>>>>

A side that is absent contributes nothing; a present side that does not end
with a newline gets one so the markers stay on their own lines.
"""
from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from twig import workdir
from twig.errors import SelfMergeError, UncommittedChangesError
from twig.objects import Blob, Tree
from twig.repository import Repository, SwitchResult

logger = logging.getLogger(__name__)

CONFLICT_START = b"<<<<<<< HEAD\n"
CONFLICT_SEPARATOR = b"=======\n"
CONFLICT_END = b">>>>>>>"


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


class MergeAction(str, enum.Enum):
    """What the merge does to one path."""

    TAKE_THEIRS = "take_theirs"
    DELETE = "delete"
    CONFLICT = "conflict"
    NO_ACTION = "no_action"


class MergeStatus(str, enum.Enum):
    """How a merge ended.

    Attributes:
        GIVEN_BRANCH_IS_ANCESTOR: The target is already in the current history.
        FAST_FORWARDED:           The current head is the split point; the
                                  target branch was checked out.
        NO_CHANGES:               Classification staged nothing; no commit.
        MERGED:                   A merge commit was created cleanly.
        CONFLICT:                 A merge commit was created with conflict
                                  placeholders in it.
    """

    GIVEN_BRANCH_IS_ANCESTOR = "given_branch_is_ancestor"
    FAST_FORWARDED = "fast_forwarded"
    NO_CHANGES = "no_changes"
    MERGED = "merged"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class MergeResult:
    """Outcome of :func:`merge`.

    Attributes:
        status:         How the merge ended.
        split_point:    Commit id used as the merge base (``None`` when the
                        two histories share no first-parent ancestor).
        commit_id:      The merge commit, when one was created.
        conflict_paths: Paths written as conflict placeholders, sorted.
        fast_forward:   The checkout performed for a fast-forward.
    """

    status: MergeStatus
    split_point: str | None
    commit_id: str | None = None
    conflict_paths: list[str] = field(default_factory=list)
    fast_forward: SwitchResult | None = None

    @property
    def has_conflicts(self) -> bool:
        return self.status is MergeStatus.CONFLICT


# ---------------------------------------------------------------------------
# Pure merge functions (no I/O)
# ---------------------------------------------------------------------------

BlobId = str | None
_Predicate = Callable[[BlobId, BlobId, BlobId], bool]

MERGE_RULES: tuple[tuple[str, _Predicate, MergeAction], ...] = (
    (
        "modified in target only",
        lambda s, h, t: s is not None and h == s and t is not None and t != s,
        MergeAction.TAKE_THEIRS,
    ),
    (
        "added in target only",
        lambda s, h, t: s is None and h is None and t is not None,
        MergeAction.TAKE_THEIRS,
    ),
    (
        "deleted in target, unchanged in head",
        lambda s, h, t: s is not None and h == s and t is None,
        MergeAction.DELETE,
    ),
    (
        "modified differently on both sides",
        lambda s, h, t: (
            s is not None and h is not None and t is not None
            and h != s and t != s and h != t
        ),
        MergeAction.CONFLICT,
    ),
    (
        "modified in head, deleted in target",
        lambda s, h, t: s is not None and h is not None and t is None and h != s,
        MergeAction.CONFLICT,
    ),
    (
        "deleted in head, modified in target",
        lambda s, h, t: s is not None and h is None and t is not None and t != s,
        MergeAction.CONFLICT,
    ),
    (
        "added differently on both sides",
        lambda s, h, t: s is None and h is not None and t is not None and h != t,
        MergeAction.CONFLICT,
    ),
)


def matching_rules(split: BlobId, head: BlobId, target: BlobId) -> list[str]:
    """Return the names of every decision-table row that applies."""
    return [name for name, predicate, _ in MERGE_RULES if predicate(split, head, target)]


def classify_path(split: BlobId, head: BlobId, target: BlobId) -> MergeAction:
    """Classify one path by its blob id at the split point, head and target.

    ``None`` means the path is absent on that side.
    """
    actions = [action for _, predicate, action in MERGE_RULES if predicate(split, head, target)]
    if len(actions) > 1:
        raise ValueError(f"overlapping merge rules for ({split}, {head}, {target})")
    return actions[0] if actions else MergeAction.NO_ACTION


def _terminated(content: bytes) -> bytes:
    if content and not content.endswith(b"\n"):
        return content + b"\n"
    return content


def render_conflict(head: bytes | None, target: bytes | None) -> bytes:
    """Return the conflict placeholder for *head* vs *target* content."""
    return b"".join(
        (
            CONFLICT_START,
            _terminated(head or b""),
            CONFLICT_SEPARATOR,
            _terminated(target or b""),
            CONFLICT_END,
        )
    )


def split_point_of_chains(chain_a: Sequence[str], chain_b: Sequence[str]) -> str | None:
    """Return the last shared position of two root-first ancestor chains."""
    split: str | None = None
    for a, b in zip(chain_a, chain_b):
        if a != b:
            break
        split = a
    return split


# ---------------------------------------------------------------------------
# Repository-bound merge
# ---------------------------------------------------------------------------


def find_split_point(repo: Repository, commit_a: str, commit_b: str) -> str | None:
    """Return the split point of two commits' first-parent histories."""
    chain_a = list(reversed(repo.first_parent_chain(commit_a)))
    chain_b = list(reversed(repo.first_parent_chain(commit_b)))
    return split_point_of_chains(chain_a, chain_b)


def merge(repo: Repository, branch: str) -> MergeResult:
    """Merge *branch* into the current branch.

    Algorithm
    ---------
    1. Refuse to merge the current branch into itself.
    2. Resolve both heads and their split point.
    3. Split point == target head: nothing to do.
    4. Split point == current head: check out the target branch.
    5. Require a clean index and no untracked file in the target's way.
    6. Classify every path of the three trees and apply the outcome to the
       working tree and the index.
    7. Commit the index with parents (head, target) unless it stayed clean.

    Raises:
        SelfMergeError:               *branch* is the current branch.
        BranchNotFoundError:          *branch* does not exist.
        UncommittedChangesError:      The index is not clean.
        WouldOverwriteUntrackedError: Untracked work is in the way.
    """
    current = repo.current_branch()
    if branch == current:
        raise SelfMergeError()
    target_id = repo.branch_head(branch)
    head_id = repo.head_commit_id()
    split_id = find_split_point(repo, head_id, target_id)
    logger.debug(
        "merge %s into %s: head=%s target=%s split=%s",
        branch, current, head_id[:8], target_id[:8], split_id[:8] if split_id else None,
    )

    if split_id == target_id:
        logger.info("Given branch %r is an ancestor of %r", branch, current)
        return MergeResult(status=MergeStatus.GIVEN_BRANCH_IS_ANCESTOR, split_point=split_id)

    if split_id == head_id:
        switched = repo.checkout_branch(branch)
        logger.info("✅ Fast-forwarded %r to %s", current, target_id[:8])
        return MergeResult(
            status=MergeStatus.FAST_FORWARDED, split_point=split_id, fast_forward=switched
        )

    index = repo.load_index()
    if not index.is_clean():
        raise UncommittedChangesError()

    head_tree = repo.tree_of(head_id)
    target_tree = repo.tree_of(target_id)
    split_tree = repo.tree_of(split_id) if split_id is not None else Tree()
    repo.ensure_safe_switch(target_tree, index, head_tree)

    conflicts: list[str] = []
    for path in sorted(split_tree.paths() | head_tree.paths() | target_tree.paths()):
        s, h, t = split_tree.get(path), head_tree.get(path), target_tree.get(path)
        action = classify_path(s, h, t)
        if action is MergeAction.TAKE_THEIRS and t is not None:
            workdir.write_file(repo.paths, path, repo.read_blob(t))
            index.stage_for_addition(path, t)
        elif action is MergeAction.DELETE:
            workdir.delete_file(repo.paths, path)
            index.stage_for_removal(path)
        elif action is MergeAction.CONFLICT:
            placeholder = Blob(
                content=render_conflict(
                    repo.read_blob(h) if h is not None else None,
                    repo.read_blob(t) if t is not None else None,
                )
            )
            blob_id = repo.store.put(placeholder)
            workdir.write_file(repo.paths, path, placeholder.content)
            index.stage_for_addition(path, blob_id)
            conflicts.append(path)
        if action is not MergeAction.NO_ACTION:
            logger.debug("merge %s: %s", path, action.value)

    if index.is_clean():
        logger.info("Merge of %r into %r staged no changes", branch, current)
        return MergeResult(status=MergeStatus.NO_CHANGES, split_point=split_id)

    commit_id = repo.commit_index(
        index, f"Merged {branch} into {current}.", merge_parent=target_id
    )
    if conflicts:
        logger.warning("⚠️ Merge conflict in %d file(s): %s", len(conflicts), ", ".join(conflicts))
        return MergeResult(
            status=MergeStatus.CONFLICT,
            split_point=split_id,
            commit_id=commit_id,
            conflict_paths=conflicts,
        )
    return MergeResult(status=MergeStatus.MERGED, split_point=split_id, commit_id=commit_id)
