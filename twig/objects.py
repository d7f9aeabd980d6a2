"""Twig content model — blobs, trees and commits, and their identities.

All functions here are pure (no I/O).  They are kept apart from the object
store so hashing and encoding can be unit-tested without a repository.

ID derivation contract (deterministic, no random components)::

    blob_id   = sha1(b"blob " + len(content) + b"\\0" + content)
    tree_id   = sha1("".join(f"100644 blob {oid}\\0{path}" for path in sorted(entries)))
                  or "0" * 40 for the empty tree
    commit_id = sha1(
                  f"tree {tree_id}\\n"
                  + "".join(f"parent {pid}\\n" for pid in parents)
                  + f"{timestamp} +0000\\n"
                  + f"{message}\\n"
                )

On-disk encoding
----------------
Every object is stored as ``b"<kind> <payload length>\\0" + payload``.  A
blob's payload is its raw content; tree and commit payloads are canonical
JSON records (sorted paths, parents in order).  The encoding is what the
store writes; the identity above is what the store is keyed by.  Decoding
re-derives the identity so a tampered file is detected on read.

The object kinds form a closed set: :class:`Blob`, :class:`Tree` and
:class:`Commit` share the ``kind`` discriminant and a ``digest`` property,
and reference each other only through digest strings.
"""
from __future__ import annotations

import enum
import hashlib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Annotated, ClassVar, Union

from pydantic import BaseModel, ConfigDict, StringConstraints, ValidationError

DIGEST_LENGTH = 40
EMPTY_TREE_DIGEST = "0" * DIGEST_LENGTH

_FILE_MODE = "100644"

HexDigest = Annotated[str, StringConstraints(pattern=r"^[0-9a-f]{40}$")]


class ObjectKind(str, enum.Enum):
    """Discriminant shared by every stored object."""

    BLOB = "blob"
    TREE = "tree"
    COMMIT = "commit"


def sha1_hex(data: bytes) -> str:
    """Return the 40-character lowercase SHA-1 hex digest of *data*."""
    return hashlib.sha1(data).hexdigest()


def is_hex_digest(value: str) -> bool:
    return len(value) == DIGEST_LENGTH and all(c in "0123456789abcdef" for c in value)


# ---------------------------------------------------------------------------
# Identity functions
# ---------------------------------------------------------------------------


def compute_blob_id(content: bytes) -> str:
    """Return the blob id for *content*: the digest of header + bytes."""
    header = f"blob {len(content)}\0".encode()
    return sha1_hex(header + content)


def compute_tree_id(entries: Mapping[str, str]) -> str:
    """Return the tree id for a ``{path: blob_id}`` mapping.

    Entries are concatenated in ascending path order so two identical
    snapshots always produce the same id regardless of insertion order.
    The empty tree has the reserved all-zero id.
    """
    if not entries:
        return EMPTY_TREE_DIGEST
    payload = "".join(
        f"{_FILE_MODE} blob {entries[path]}\0{path}" for path in sorted(entries)
    )
    return sha1_hex(payload.encode())


def compute_commit_id(
    tree_id: str,
    parent_ids: Iterable[str],
    timestamp: int,
    message: str,
) -> str:
    """Return the commit id for its canonical inputs.

    Parent order is significant: the first parent is the branch the commit
    was made on, the second (merge commits only) is the merged-in branch.
    """
    parts = [f"tree {tree_id}\n"]
    parts.extend(f"parent {pid}\n" for pid in parent_ids)
    parts.append(f"{timestamp} +0000\n")
    parts.append(f"{message}\n")
    return sha1_hex("".join(parts).encode())


# ---------------------------------------------------------------------------
# Object records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Blob:
    """Immutable snapshot of one file's bytes."""

    content: bytes

    kind: ClassVar[ObjectKind] = ObjectKind.BLOB

    @property
    def digest(self) -> str:
        return compute_blob_id(self.content)


@dataclass(frozen=True)
class Tree:
    """Immutable flat ``{path: blob_id}`` snapshot of every tracked file."""

    entries: Mapping[str, str] = field(default_factory=dict)

    kind: ClassVar[ObjectKind] = ObjectKind.TREE

    @property
    def digest(self) -> str:
        return compute_tree_id(self.entries)

    def get(self, path: str) -> str | None:
        return self.entries.get(path)

    def __contains__(self, path: object) -> bool:
        return path in self.entries

    def paths(self) -> set[str]:
        return set(self.entries)

    def with_changes(
        self,
        removals: Iterable[str],
        additions: Mapping[str, str],
    ) -> Tree:
        """Return a new tree with *removals* dropped, then *additions* upserted.

        Removal runs first so a remove-then-readd of the same path ends with
        the path present.
        """
        entries = dict(self.entries)
        for path in removals:
            entries.pop(path, None)
        entries.update(additions)
        return Tree(entries=entries)


@dataclass(frozen=True)
class Commit:
    """Immutable DAG node: tree, ordered parents, message and epoch seconds."""

    tree: str
    parents: tuple[str, ...]
    message: str
    timestamp: int

    kind: ClassVar[ObjectKind] = ObjectKind.COMMIT

    @property
    def digest(self) -> str:
        return compute_commit_id(self.tree, self.parents, self.timestamp, self.message)

    @property
    def first_parent(self) -> str | None:
        return self.parents[0] if self.parents else None

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1


TwigObject = Union[Blob, Tree, Commit]


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


class _TreeRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    entries: dict[str, HexDigest]


class _CommitRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    tree: HexDigest
    parents: list[HexDigest]
    message: str
    timestamp: int


class ObjectDecodeError(ValueError):
    """Raised when stored bytes are not a well-formed object encoding."""


def encode_object(obj: TwigObject) -> bytes:
    """Serialize *obj* to its on-disk byte encoding."""
    if isinstance(obj, Blob):
        payload = obj.content
    elif isinstance(obj, Tree):
        ordered = {path: obj.entries[path] for path in sorted(obj.entries)}
        payload = _TreeRecord(entries=ordered).model_dump_json().encode()
    else:
        payload = _CommitRecord(
            tree=obj.tree,
            parents=list(obj.parents),
            message=obj.message,
            timestamp=obj.timestamp,
        ).model_dump_json().encode()
    return f"{obj.kind.value} {len(payload)}\0".encode() + payload


def decode_object(data: bytes) -> TwigObject:
    """Parse bytes produced by :func:`encode_object`.

    Raises:
        ObjectDecodeError: When the header is malformed, the declared length
            does not match, or the payload fails validation.
    """
    nul = data.find(b"\0")
    if nul < 0:
        raise ObjectDecodeError("missing header terminator")
    try:
        kind_text, length_text = data[:nul].decode("ascii").split(" ")
        kind = ObjectKind(kind_text)
        length = int(length_text)
    except (UnicodeDecodeError, ValueError) as exc:
        raise ObjectDecodeError(f"malformed header: {exc}") from exc
    payload = data[nul + 1:]
    if len(payload) != length:
        raise ObjectDecodeError(
            f"payload length {len(payload)} does not match header {length}"
        )

    if kind is ObjectKind.BLOB:
        return Blob(content=payload)
    try:
        if kind is ObjectKind.TREE:
            tree_record = _TreeRecord.model_validate_json(payload)
            return Tree(entries=dict(tree_record.entries))
        commit_record = _CommitRecord.model_validate_json(payload)
    except ValidationError as exc:
        raise ObjectDecodeError(f"invalid {kind.value} payload: {exc}") from exc
    return Commit(
        tree=commit_record.tree,
        parents=tuple(commit_record.parents),
        message=commit_record.message,
        timestamp=commit_record.timestamp,
    )
