"""Filesystem primitives shared by the store, the index and the ref files.

Writers never expose partial files: content goes to a temporary file in the
destination directory and is moved into place with :func:`os.replace`, which
is atomic on POSIX and Windows when source and target share a filesystem.
"""
from __future__ import annotations

import logging
import os
import pathlib
import tempfile

logger = logging.getLogger(__name__)


def atomic_write_bytes(dest: pathlib.Path, content: bytes) -> None:
    """Write *content* to *dest* so readers see either the old or new file."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=dest.parent, prefix=".tmp-", suffix=dest.name)
    tmp = pathlib.Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(content)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, dest)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def atomic_write_text(dest: pathlib.Path, text: str) -> None:
    atomic_write_bytes(dest, text.encode("utf-8"))


def append_text(dest: pathlib.Path, text: str) -> None:
    """Append *text* to *dest*, creating it if needed."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    with dest.open("a", encoding="utf-8") as fh:
        fh.write(text)


def prune_empty_dirs(start: pathlib.Path, stop: pathlib.Path) -> None:
    """Remove *start* and its empty ancestors, never touching *stop* itself."""
    current = start
    while current != stop and stop in current.parents:
        try:
            current.rmdir()
        except OSError:
            return
        logger.debug("Removed empty directory %s", current)
        current = current.parent
