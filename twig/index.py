"""Twig staging area.

The index holds two pending change sets for the next commit:

- ``additions`` — ``{path: blob_id}`` staged to be written into the tree.
- ``removals``  — paths staged to be dropped from the tree.

A path is never in both sets: staging it one way withdraws it from the
other.  The index is *clean* when both sets are empty.

No hashing and no I/O happens inside :class:`Index`; callers pass
already-computed digests.  :func:`load_index` and :func:`save_index` read the
record lazily at the start of a command and rewrite it wholesale (atomic
rename) at the end.

``index`` schema
----------------

.. code-block:: json

    {
        "additions": {"notes/a.txt": "3b18e512dba79e4c8300dd08aeb37f8e728b8dad"},
        "removals":  ["old.txt"]
    }
"""
from __future__ import annotations

import logging
import pathlib

from pydantic import BaseModel, Field, ValidationError, field_serializer

from twig._fs import atomic_write_text
from twig.objects import HexDigest

logger = logging.getLogger(__name__)


class Index(BaseModel):
    """Mutable staging area; one per repository."""

    additions: dict[str, HexDigest] = Field(default_factory=dict)
    removals: set[str] = Field(default_factory=set)

    @field_serializer("additions")
    def _sorted_additions(self, additions: dict[str, str]) -> dict[str, str]:
        return {path: additions[path] for path in sorted(additions)}

    @field_serializer("removals")
    def _sorted_removals(self, removals: set[str]) -> list[str]:
        return sorted(removals)

    def stage_for_addition(self, path: str, digest: str) -> None:
        self.removals.discard(path)
        self.additions[path] = digest

    def stage_for_removal(self, path: str) -> None:
        self.additions.pop(path, None)
        self.removals.add(path)

    def unstage(self, path: str) -> bool:
        """Drop *path* from both sets; return ``True`` if anything was staged."""
        was_added = self.additions.pop(path, None) is not None
        was_removed = path in self.removals
        self.removals.discard(path)
        return was_added or was_removed

    def is_staged_for_addition(self, path: str) -> bool:
        return path in self.additions

    def is_staged_for_removal(self, path: str) -> bool:
        return path in self.removals

    def is_clean(self) -> bool:
        return not self.additions and not self.removals

    def clear(self) -> None:
        self.additions.clear()
        self.removals.clear()


def load_index(index_file: pathlib.Path) -> Index:
    """Return the persisted index, or an empty one when the file is absent or empty.

    Raises:
        ValueError: The file exists but does not hold a valid index record.
    """
    if not index_file.is_file():
        return Index()
    raw = index_file.read_text(encoding="utf-8")
    if not raw.strip():
        return Index()
    try:
        return Index.model_validate_json(raw)
    except ValidationError as exc:
        logger.error("❌ Unreadable index at %s: %s", index_file, exc)
        raise ValueError(f"corrupt index file {index_file}") from exc


def save_index(index_file: pathlib.Path, index: Index) -> None:
    atomic_write_text(index_file, index.model_dump_json(indent=2) + "\n")
    logger.debug(
        "Saved index (%d staged, %d removed)", len(index.additions), len(index.removals)
    )
