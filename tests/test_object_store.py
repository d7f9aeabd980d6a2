"""Tests for twig.object_store.ObjectStore."""
from __future__ import annotations

import collections
import pathlib

import pytest

from twig.errors import (
    AmbiguousIdError,
    CorruptObjectError,
    ObjectNotFoundError,
    UnknownIdError,
)
from twig.object_store import ObjectStore
from twig.objects import EMPTY_TREE_DIGEST, Blob, Commit, ObjectKind, Tree


@pytest.fixture
def store(tmp_path: pathlib.Path) -> ObjectStore:
    return ObjectStore(tmp_path / "objects")


def _commit(timestamp: int) -> Commit:
    return Commit(tree=EMPTY_TREE_DIGEST, parents=(), message="c", timestamp=timestamp)


class TestPut:
    def test_sharded_path(self, store: ObjectStore) -> None:
        digest = store.put(Blob(content=b"hello\n"))
        assert store.path_for(digest) == store.objects_dir / digest[:2] / digest[2:]
        assert store.has(digest)

    def test_put_is_idempotent(self, store: ObjectStore) -> None:
        first = store.put(Blob(content=b"x"))
        mtime = store.path_for(first).stat().st_mtime_ns
        second = store.put(Blob(content=b"x"))
        assert first == second
        assert store.path_for(first).stat().st_mtime_ns == mtime

    def test_put_skips_existing_digest(self, store: ObjectStore, monkeypatch: pytest.MonkeyPatch) -> None:
        digest = store.put(Blob(content=b"x"))
        writes: list[pathlib.Path] = []
        monkeypatch.setattr(
            "twig.object_store.atomic_write_bytes", lambda dest, data: writes.append(dest)
        )
        assert store.put(Blob(content=b"x")) == digest
        assert store.put(Blob(content=b"y")) != digest
        assert writes == [store.path_for(Blob(content=b"y").digest)]

    def test_no_temp_files_left(self, store: ObjectStore) -> None:
        digest = store.put(Blob(content=b"x"))
        shard = store.path_for(digest).parent
        assert [p.name for p in shard.iterdir()] == [digest[2:]]


class TestGet:
    def test_returns_equal_object(self, store: ObjectStore) -> None:
        commit = _commit(1)
        digest = store.put(commit)
        assert store.get(digest) == commit

    def test_missing_object(self, store: ObjectStore) -> None:
        with pytest.raises(ObjectNotFoundError):
            store.get("f" * 40)

    def test_kind_mismatch_is_corrupt(self, store: ObjectStore) -> None:
        digest = store.put(Blob(content=b"x"))
        with pytest.raises(CorruptObjectError):
            store.get(digest, ObjectKind.COMMIT)

    def test_tampered_content_is_corrupt(self, store: ObjectStore) -> None:
        digest = store.put(Blob(content=b"abc"))
        store.path_for(digest).write_bytes(b"blob 3\0abd")
        with pytest.raises(CorruptObjectError):
            store.get(digest)

    def test_garbage_is_corrupt(self, store: ObjectStore) -> None:
        digest = store.put(Tree(entries={"a": "a" * 40}))
        store.path_for(digest).write_bytes(b"not an object")
        with pytest.raises(CorruptObjectError):
            store.get(digest)

    def test_read_kind(self, store: ObjectStore) -> None:
        assert store.read_kind(store.put(_commit(3))) is ObjectKind.COMMIT
        assert store.read_kind(store.put(Tree())) is ObjectKind.TREE


class TestResolvePrefix:
    def test_full_id(self, store: ObjectStore) -> None:
        digest = store.put(_commit(1))
        assert store.resolve_prefix(digest) == digest

    def test_short_prefix(self, store: ObjectStore) -> None:
        digest = store.put(_commit(1))
        assert store.resolve_prefix(digest[:6]) == digest

    def test_uppercase_prefix(self, store: ObjectStore) -> None:
        digest = store.put(_commit(1))
        assert store.resolve_prefix(digest[:8].upper()) == digest

    def test_unknown_prefix(self, store: ObjectStore) -> None:
        digest = store.put(_commit(1))
        other = "0" if digest[0] != "0" else "1"
        with pytest.raises(UnknownIdError):
            store.resolve_prefix(other * 6)

    @pytest.mark.parametrize("bad", ["", "xyz", "a" * 41, "12 4"])
    def test_invalid_prefix(self, store: ObjectStore, bad: str) -> None:
        with pytest.raises(UnknownIdError):
            store.resolve_prefix(bad)

    def test_ambiguous_prefix(self, store: ObjectStore) -> None:
        digests = [store.put(_commit(ts)) for ts in range(1, 40)]
        # 39 ids over 16 leading hex digits: at least one digit repeats.
        first_chars = collections.Counter(d[0] for d in digests)
        shared, count = first_chars.most_common(1)[0]
        assert count > 1
        with pytest.raises(AmbiguousIdError) as excinfo:
            store.resolve_prefix(shared)
        assert len(excinfo.value.candidates) == count

    def test_kind_filter_skips_other_objects(self, store: ObjectStore) -> None:
        store.put(Tree())
        assert store.resolve_prefix(EMPTY_TREE_DIGEST[:6]) == EMPTY_TREE_DIGEST
        with pytest.raises(UnknownIdError):
            store.resolve_prefix(EMPTY_TREE_DIGEST[:6], ObjectKind.COMMIT)

    def test_iter_digests_ignores_temp_files(self, store: ObjectStore) -> None:
        digest = store.put(Blob(content=b"x"))
        (store.path_for(digest).parent / ".tmp-leftover").write_bytes(b"")
        assert store.iter_digests() == [digest]
