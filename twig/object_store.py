"""Canonical content-addressed object store for Twig.

Every command that reads or writes blobs, trees or commits goes through
:class:`ObjectStore`.  No command implements its own object path logic.

Layout
------
Objects live under ``<root>/.twig/objects/`` using a two-character sharded
directory layout that mirrors Git's loose-object format::

    .twig/objects/<sha2>/<sha38>

where ``<sha2>`` is the first two hex characters of the SHA-1 digest and
``<sha38>`` the remaining 38.  Two hex characters yield at most 256
subdirectories, which keeps every directory small as history grows.

Guarantees
----------
* Append-only: writing the same object twice is a no-op and objects are
  never deleted.
* Atomic: an object is written to a temporary file inside its shard and
  renamed into place, so a concurrent reader (or a crash) never observes a
  partially written object.
* Verified reads: :meth:`ObjectStore.get` checks the stored kind and
  re-derives the digest from the decoded object.
"""
from __future__ import annotations

import logging
import pathlib

from twig._fs import atomic_write_bytes
from twig.errors import (
    AmbiguousIdError,
    CorruptObjectError,
    ObjectNotFoundError,
    UnknownIdError,
)
from twig.objects import (
    DIGEST_LENGTH,
    ObjectDecodeError,
    ObjectKind,
    TwigObject,
    decode_object,
    encode_object,
    is_hex_digest,
)

logger = logging.getLogger(__name__)

_HEX = frozenset("0123456789abcdef")


class ObjectStore:
    """Digest-keyed table of encoded objects rooted at *objects_dir*."""

    def __init__(self, objects_dir: pathlib.Path) -> None:
        self.objects_dir = objects_dir

    def path_for(self, digest: str) -> pathlib.Path:
        """Return the canonical on-disk path for *digest* (may not exist yet)."""
        return self.objects_dir / digest[:2] / digest[2:]

    def has(self, digest: str) -> bool:
        return self.path_for(digest).is_file()

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def put(self, obj: TwigObject) -> str:
        """Persist *obj* and return its digest.

        Idempotent: if an object with the same digest is already stored the
        write is skipped.
        """
        digest = obj.digest
        if self.has(digest):
            logger.debug("Object %s already in store, skipped", digest[:8])
            return digest
        data = encode_object(obj)
        atomic_write_bytes(self.path_for(digest), data)
        logger.debug("✅ Stored %s %s (%d bytes)", obj.kind.value, digest[:8], len(data))
        return digest

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def get(self, digest: str, expected_kind: ObjectKind | None = None) -> TwigObject:
        """Read and decode the object stored under *digest*.

        Raises:
            ObjectNotFoundError: The object is not in the store.
            CorruptObjectError:  The bytes cannot be decoded, the stored kind
                                 differs from *expected_kind*, or the decoded
                                 object hashes to a different digest.
        """
        src = self.path_for(digest)
        if not is_hex_digest(digest) or not src.is_file():
            raise ObjectNotFoundError(digest)
        try:
            obj = decode_object(src.read_bytes())
        except ObjectDecodeError as exc:
            logger.error("❌ Failed to decode object %s: %s", digest[:8], exc)
            raise CorruptObjectError(digest, str(exc)) from exc
        if expected_kind is not None and obj.kind is not expected_kind:
            raise CorruptObjectError(
                digest, f"expected {expected_kind.value}, found {obj.kind.value}"
            )
        if obj.digest != digest:
            raise CorruptObjectError(digest, f"content hashes to {obj.digest[:8]}")
        return obj

    def read_kind(self, digest: str) -> ObjectKind:
        """Return the kind recorded in an object's header without decoding it."""
        src = self.path_for(digest)
        if not src.is_file():
            raise ObjectNotFoundError(digest)
        with src.open("rb") as fh:
            head = fh.read(32)
        try:
            return ObjectKind(head.split(b" ", 1)[0].decode("ascii"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise CorruptObjectError(digest, "unreadable header") from exc

    # ------------------------------------------------------------------
    # Abbreviated ids
    # ------------------------------------------------------------------

    def iter_digests(self, prefix: str = "") -> list[str]:
        """Return every stored digest starting with *prefix*, sorted."""
        if not self.objects_dir.is_dir():
            return []
        shard_prefix, rest = prefix[:2], prefix[2:]
        found: list[str] = []
        for shard in sorted(self.objects_dir.iterdir()):
            if not shard.is_dir() or not shard.name.startswith(shard_prefix):
                continue
            for entry in sorted(shard.iterdir()):
                digest = shard.name + entry.name
                if entry.name.startswith(rest) and is_hex_digest(digest):
                    found.append(digest)
        return found

    def resolve_prefix(self, prefix: str, kind: ObjectKind | None = None) -> str:
        """Resolve a full or abbreviated digest to exactly one stored object.

        Only objects of *kind* are considered when it is given, so a commit
        prefix is never ambiguous with a blob that happens to share it.

        Raises:
            UnknownIdError:   No stored object matches.
            AmbiguousIdError: More than one stored object matches.
        """
        prefix = prefix.strip().lower()
        if not prefix or len(prefix) > DIGEST_LENGTH or not set(prefix) <= _HEX:
            raise UnknownIdError()

        candidates = self.iter_digests(prefix)
        if kind is not None:
            candidates = [d for d in candidates if self.read_kind(d) is kind]

        if not candidates:
            raise UnknownIdError()
        if len(candidates) > 1:
            raise AmbiguousIdError(prefix, candidates)
        logger.debug("Resolved %r to %s", prefix, candidates[0][:8])
        return candidates[0]
