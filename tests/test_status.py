"""Tests for twig.status — report sections and rendering."""
from __future__ import annotations

from twig.repository import Repository
from twig.status import DELETED, MODIFIED, StatusReport, compute_status, render_status


def _write(repo: Repository, path: str, text: str) -> None:
    dest = repo.paths.root / path
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(text)


def _setup_mixed_state(repo: Repository) -> None:
    for name, text in {
        "a.txt": "A",
        "goodbye.txt": "G",
        "junk.txt": "J",
        "wug3.txt": "W",
    }.items():
        _write(repo, name, text)
    repo.add(["*"])
    repo.commit("tracked files")
    repo.create_branch("other")

    _write(repo, "wug.txt", "new")
    repo.add(["wug.txt"])
    repo.rm(["goodbye.txt"])
    (repo.paths.root / "junk.txt").unlink()
    _write(repo, "wug3.txt", "changed")
    _write(repo, "random.stuff", "?")


def test_clean_repository(repo: Repository) -> None:
    report = compute_status(repo)
    assert report.current_branch == "master"
    assert report.branches == ["master"]
    assert report.is_clean


def test_sections(repo: Repository) -> None:
    _setup_mixed_state(repo)

    report = compute_status(repo)

    assert report.branches == ["master", "other"]
    assert report.staged == ["wug.txt"]
    assert report.removed == ["goodbye.txt"]
    assert report.not_staged == [("junk.txt", DELETED), ("wug3.txt", MODIFIED)]
    assert report.untracked == ["random.stuff"]
    assert not report.is_clean


def test_staged_file_changed_after_staging(repo: Repository) -> None:
    _write(repo, "s.txt", "one")
    _write(repo, "d.txt", "one")
    repo.add(["s.txt", "d.txt"])
    _write(repo, "s.txt", "two")
    (repo.paths.root / "d.txt").unlink()

    report = compute_status(repo)

    assert report.staged == ["d.txt", "s.txt"]
    assert report.not_staged == [("d.txt", DELETED), ("s.txt", MODIFIED)]


def test_removed_file_recreated_is_untracked(repo: Repository) -> None:
    _write(repo, "a.txt", "A")
    repo.add(["a.txt"])
    repo.commit("add a")
    repo.rm(["a.txt"])
    _write(repo, "a.txt", "A")

    report = compute_status(repo)

    assert report.removed == ["a.txt"]
    assert report.untracked == ["a.txt"]
    assert report.not_staged == []


def test_status_does_not_mutate(repo: Repository) -> None:
    _setup_mixed_state(repo)
    index_before = repo.paths.index_file.read_bytes()
    compute_status(repo)
    assert repo.paths.index_file.read_bytes() == index_before


def test_render() -> None:
    report = StatusReport(
        current_branch="master",
        branches=["master", "other"],
        staged=["wug.txt"],
        removed=["goodbye.txt"],
        not_staged=[("junk.txt", DELETED), ("wug3.txt", MODIFIED)],
        untracked=["random.stuff"],
    )
    assert render_status(report) == (
        "=== Branches ===\n"
        "*master\n"
        "other\n"
        "\n"
        "=== Staged Files ===\n"
        "wug.txt\n"
        "\n"
        "=== Removed Files ===\n"
        "goodbye.txt\n"
        "\n"
        "=== Modifications Not Staged For Commit ===\n"
        "junk.txt (deleted)\n"
        "wug3.txt (modified)\n"
        "\n"
        "=== Untracked Files ===\n"
        "random.stuff\n"
    )
