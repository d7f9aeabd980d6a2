"""Working-tree access for Twig.

The working tree is every regular file under the repository root except the
control directory.  Paths are always repository-relative with POSIX
separators, regardless of host OS, so tree entries are reproducible across
machines.
"""
from __future__ import annotations

import hashlib
import logging
import pathlib
from collections.abc import Iterable

from twig._fs import prune_empty_dirs
from twig.errors import OutsideRepositoryError, PathNotFoundError
from twig.layout import RepoPaths

logger = logging.getLogger(__name__)


def hash_file(path: pathlib.Path) -> str:
    """Return the blob id of a file's raw bytes.

    Reading in chunks keeps memory usage constant regardless of file size;
    the header needs the size up front, which ``stat`` provides.
    """
    h = hashlib.sha1(f"blob {path.stat().st_size}\0".encode())
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def to_repo_path(paths: RepoPaths, raw: str | pathlib.Path) -> str:
    """Normalise a user-supplied path to a repository-relative POSIX path.

    Relative paths are taken relative to the repository root.

    Raises:
        OutsideRepositoryError: The path resolves outside the working tree
            or into the control directory.
    """
    candidate = pathlib.Path(raw)
    if not candidate.is_absolute():
        candidate = paths.root / candidate
    resolved = candidate.resolve()
    try:
        rel = resolved.relative_to(paths.root)
    except ValueError:
        raise OutsideRepositoryError(str(raw), str(paths.root)) from None
    if rel.parts and rel.parts[0] == paths.control_dir_name:
        raise OutsideRepositoryError(str(raw), str(paths.root))
    return rel.as_posix()


def _iter_files(paths: RepoPaths, base: pathlib.Path) -> Iterable[pathlib.Path]:
    for file_path in sorted(base.rglob("*")):
        rel = file_path.relative_to(paths.root)
        if rel.parts[0] == paths.control_dir_name:
            continue
        if file_path.is_file() and not file_path.is_symlink():
            yield file_path


def list_files(paths: RepoPaths) -> list[str]:
    """Return every working file as a sorted list of repository paths."""
    return [p.relative_to(paths.root).as_posix() for p in _iter_files(paths, paths.root)]


def expand_paths(paths: RepoPaths, raw_paths: Iterable[str]) -> list[str]:
    """Expand user arguments to the working files they name.

    Directories expand to every file below them; ``*`` and ``.`` name the
    whole working tree.

    Raises:
        PathNotFoundError: An argument names nothing in the working tree.
    """
    expanded: dict[str, None] = {}
    for raw in raw_paths:
        if raw in ("*", "."):
            expanded.update(dict.fromkeys(list_files(paths)))
            continue
        rel = to_repo_path(paths, raw)
        target = paths.root / rel
        if target.is_dir():
            expanded.update(
                dict.fromkeys(
                    p.relative_to(paths.root).as_posix() for p in _iter_files(paths, target)
                )
            )
        elif target.is_file():
            expanded[rel] = None
        else:
            raise PathNotFoundError(str(raw))
    return list(expanded)


def snapshot(paths: RepoPaths) -> dict[str, str]:
    """Return ``{path: blob_id}`` for every file in the working tree."""
    return {
        p.relative_to(paths.root).as_posix(): hash_file(p)
        for p in _iter_files(paths, paths.root)
    }


def exists(paths: RepoPaths, rel_path: str) -> bool:
    return (paths.root / rel_path).is_file()


def read_file(paths: RepoPaths, rel_path: str) -> bytes:
    return (paths.root / rel_path).read_bytes()


def write_file(paths: RepoPaths, rel_path: str, content: bytes) -> None:
    """Overwrite ``<root>/<rel_path>``, creating parent directories."""
    dest = paths.root / rel_path
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(content)
    logger.debug("Wrote %s (%d bytes)", rel_path, len(content))


def delete_file(paths: RepoPaths, rel_path: str) -> bool:
    """Delete a working file and any directories it leaves empty.

    Returns ``True`` if a file was removed.
    """
    target = paths.root / rel_path
    if not target.is_file():
        return False
    target.unlink()
    prune_empty_dirs(target.parent, paths.root)
    logger.debug("Deleted %s", rel_path)
    return True
