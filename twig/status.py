"""Working-tree state relative to HEAD and the index.

A :class:`StatusReport` has five sorted sections:

- ``branches``        — every branch; :attr:`StatusReport.current_branch`
                        names the one HEAD points at.
- ``staged``          — index additions.
- ``removed``         — index removals.
- ``not_staged``      — ``(path, "modified" | "deleted")`` pairs for working
                        files that differ from what the next commit would
                        record.
- ``untracked``       — working files neither tracked nor staged, plus files
                        staged for removal that exist again.

Computing a report never mutates the repository.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from twig import refs, workdir
from twig.repository import Repository

logger = logging.getLogger(__name__)

MODIFIED = "modified"
DELETED = "deleted"


@dataclass(frozen=True)
class StatusReport:
    current_branch: str
    branches: list[str] = field(default_factory=list)
    staged: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    not_staged: list[tuple[str, str]] = field(default_factory=list)
    untracked: list[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        """``True`` when nothing is staged, changed or untracked."""
        return not (self.staged or self.removed or self.not_staged or self.untracked)


def compute_status(repo: Repository) -> StatusReport:
    """Compare the working tree with HEAD and the index."""
    index = repo.load_index()
    head_tree = repo.head_tree()
    working = workdir.snapshot(repo.paths)

    not_staged: dict[str, str] = {}
    for path, blob_id in head_tree.entries.items():
        if index.is_staged_for_addition(path) or index.is_staged_for_removal(path):
            continue
        if path not in working:
            not_staged[path] = DELETED
        elif working[path] != blob_id:
            not_staged[path] = MODIFIED
    for path, blob_id in index.additions.items():
        if path not in working:
            not_staged[path] = DELETED
        elif working[path] != blob_id:
            not_staged[path] = MODIFIED

    report = StatusReport(
        current_branch=repo.current_branch(),
        branches=refs.list_branches(repo.paths),
        staged=sorted(index.additions),
        removed=sorted(index.removals),
        not_staged=sorted(not_staged.items()),
        untracked=repo.untracked_files(index, head_tree),
    )
    logger.debug(
        "status: %d staged, %d removed, %d not staged, %d untracked",
        len(report.staged), len(report.removed), len(report.not_staged), len(report.untracked),
    )
    return report


def render_status(report: StatusReport) -> str:
    """Render *report* in the sectioned text layout printed by ``twig status``."""
    lines = ["=== Branches ==="]
    lines += [f"*{name}" if name == report.current_branch else name for name in report.branches]
    lines += ["", "=== Staged Files ===", *report.staged]
    lines += ["", "=== Removed Files ===", *report.removed]
    lines += ["", "=== Modifications Not Staged For Commit ==="]
    lines += [f"{path} ({kind})" for path, kind in report.not_staged]
    lines += ["", "=== Untracked Files ===", *report.untracked, ""]
    return "\n".join(lines)
