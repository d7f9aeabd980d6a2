"""Tests for twig.index — staging semantics and persistence."""
from __future__ import annotations

import json
import pathlib

import pytest
from pydantic import ValidationError

from twig.index import Index, load_index, save_index

_A = "a" * 40
_B = "b" * 40


class TestStaging:
    def test_new_index_is_clean(self) -> None:
        assert Index().is_clean()

    def test_addition_withdraws_removal(self) -> None:
        index = Index()
        index.stage_for_removal("f.txt")
        index.stage_for_addition("f.txt", _A)
        assert index.is_staged_for_addition("f.txt")
        assert not index.is_staged_for_removal("f.txt")

    def test_removal_withdraws_addition(self) -> None:
        index = Index()
        index.stage_for_addition("f.txt", _A)
        index.stage_for_removal("f.txt")
        assert not index.is_staged_for_addition("f.txt")
        assert index.is_staged_for_removal("f.txt")

    def test_restage_replaces_digest(self) -> None:
        index = Index()
        index.stage_for_addition("f.txt", _A)
        index.stage_for_addition("f.txt", _B)
        assert index.additions == {"f.txt": _B}

    def test_unstage(self) -> None:
        index = Index()
        index.stage_for_addition("a", _A)
        index.stage_for_removal("b")
        assert index.unstage("a")
        assert index.unstage("b")
        assert not index.unstage("c")
        assert index.is_clean()

    def test_clear(self) -> None:
        index = Index(additions={"a": _A}, removals={"b"})
        index.clear()
        assert index.is_clean()

    def test_rejects_non_hex_digest(self) -> None:
        with pytest.raises(ValidationError):
            Index(additions={"a": "nothex"})


class TestPersistence:
    def test_missing_file_loads_empty(self, tmp_path: pathlib.Path) -> None:
        assert load_index(tmp_path / "index").is_clean()

    def test_blank_file_loads_empty(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "index").write_text("\n")
        assert load_index(tmp_path / "index").is_clean()

    def test_save_then_load(self, tmp_path: pathlib.Path) -> None:
        index = Index()
        index.stage_for_addition("z.txt", _A)
        index.stage_for_addition("a.txt", _B)
        index.stage_for_removal("gone.txt")
        save_index(tmp_path / "index", index)

        loaded = load_index(tmp_path / "index")
        assert loaded.additions == {"a.txt": _B, "z.txt": _A}
        assert loaded.removals == {"gone.txt"}

    def test_saved_record_is_sorted_json(self, tmp_path: pathlib.Path) -> None:
        index = Index(additions={"z": _A, "a": _B}, removals={"y", "b"})
        save_index(tmp_path / "index", index)
        record = json.loads((tmp_path / "index").read_text())
        assert list(record["additions"]) == ["a", "z"]
        assert record["removals"] == ["b", "y"]

    def test_corrupt_file_raises(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "index").write_text("{not json")
        with pytest.raises(ValueError):
            load_index(tmp_path / "index")
