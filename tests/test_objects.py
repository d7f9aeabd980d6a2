"""Tests for twig.objects — identities and the on-disk encoding.

Covers:
- Blob ids match Git's loose-object hashing.
- Tree ids are order-independent; the empty tree has the all-zero id.
- Commit ids depend on parent order.
- decode_object rejects malformed headers and payloads.
"""
from __future__ import annotations

import hashlib

import pytest

from twig.objects import (
    EMPTY_TREE_DIGEST,
    Blob,
    Commit,
    ObjectDecodeError,
    ObjectKind,
    Tree,
    compute_blob_id,
    compute_commit_id,
    compute_tree_id,
    decode_object,
    encode_object,
    is_hex_digest,
)

_A = "a" * 40
_B = "b" * 40


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


class TestBlobId:
    def test_empty_blob_matches_git(self) -> None:
        assert compute_blob_id(b"") == "e69de29bb2d1d6434b8b29ae775ad8c2e48c5391"

    def test_hello_matches_git(self) -> None:
        assert compute_blob_id(b"hello\n") == "ce013625030ba8dba906f756967f9e9ca394464a"

    def test_blob_digest_property(self) -> None:
        content = b"some bytes"
        expected = hashlib.sha1(b"blob 10\0" + content).hexdigest()
        assert Blob(content=content).digest == expected

    def test_blob_kind(self) -> None:
        assert Blob(content=b"").kind is ObjectKind.BLOB


class TestTreeId:
    def test_empty_tree_is_all_zeros(self) -> None:
        assert compute_tree_id({}) == EMPTY_TREE_DIGEST
        assert Tree().digest == "0" * 40

    def test_insertion_order_does_not_matter(self) -> None:
        assert compute_tree_id({"a.txt": _A, "b.txt": _B}) == compute_tree_id(
            {"b.txt": _B, "a.txt": _A}
        )

    def test_entry_content_changes_id(self) -> None:
        assert compute_tree_id({"a.txt": _A}) != compute_tree_id({"a.txt": _B})

    def test_path_changes_id(self) -> None:
        assert compute_tree_id({"a.txt": _A}) != compute_tree_id({"c.txt": _A})

    def test_tree_id_is_hex(self) -> None:
        assert is_hex_digest(compute_tree_id({"a.txt": _A}))


class TestCommitId:
    def test_deterministic(self) -> None:
        assert compute_commit_id(_A, [_B], 5, "msg") == compute_commit_id(_A, [_B], 5, "msg")

    def test_parent_order_matters(self) -> None:
        assert compute_commit_id(_A, [_A, _B], 5, "m") != compute_commit_id(_A, [_B, _A], 5, "m")

    def test_message_and_timestamp_matter(self) -> None:
        base = compute_commit_id(_A, [], 5, "m")
        assert compute_commit_id(_A, [], 6, "m") != base
        assert compute_commit_id(_A, [], 5, "n") != base

    def test_commit_digest_property(self) -> None:
        commit = Commit(tree=_A, parents=(_B,), message="m", timestamp=7)
        assert commit.digest == compute_commit_id(_A, [_B], 7, "m")

    def test_first_parent_and_merge_flag(self) -> None:
        root = Commit(tree=_A, parents=(), message="r", timestamp=0)
        merge = Commit(tree=_A, parents=(_A, _B), message="m", timestamp=1)
        assert root.first_parent is None
        assert not root.is_merge
        assert merge.first_parent == _A
        assert merge.is_merge


# ---------------------------------------------------------------------------
# Tree manipulation
# ---------------------------------------------------------------------------


class TestTreeWithChanges:
    def test_removals_apply_before_additions(self) -> None:
        tree = Tree(entries={"a.txt": _A, "b.txt": _B})
        changed = tree.with_changes({"a.txt"}, {"a.txt": _B})
        assert changed.entries == {"a.txt": _B, "b.txt": _B}

    def test_original_tree_unchanged(self) -> None:
        tree = Tree(entries={"a.txt": _A})
        tree.with_changes({"a.txt"}, {})
        assert tree.entries == {"a.txt": _A}

    def test_membership(self) -> None:
        tree = Tree(entries={"dir/a.txt": _A})
        assert "dir/a.txt" in tree
        assert tree.get("missing") is None
        assert tree.paths() == {"dir/a.txt"}


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


class TestEncoding:
    def test_header_names_kind_and_length(self) -> None:
        data = encode_object(Blob(content=b"abc"))
        assert data == b"blob 3\0abc"

    def test_commit_decodes_to_equal_object(self) -> None:
        commit = Commit(tree=_A, parents=(_A, _B), message="multi\nline", timestamp=42)
        decoded = decode_object(encode_object(commit))
        assert decoded == commit
        assert decoded.digest == commit.digest

    def test_tree_encoding_is_canonical(self) -> None:
        one = encode_object(Tree(entries={"b": _B, "a": _A}))
        two = encode_object(Tree(entries={"a": _A, "b": _B}))
        assert one == two

    def test_missing_header_terminator(self) -> None:
        with pytest.raises(ObjectDecodeError):
            decode_object(b"blob 3abc")

    def test_unknown_kind(self) -> None:
        with pytest.raises(ObjectDecodeError):
            decode_object(b"tag 3\0abc")

    def test_length_mismatch(self) -> None:
        with pytest.raises(ObjectDecodeError):
            decode_object(b"blob 4\0abc")

    def test_invalid_commit_payload(self) -> None:
        payload = b'{"tree": "nothex"}'
        with pytest.raises(ObjectDecodeError):
            decode_object(b"commit %d\0" % len(payload) + payload)
