"""Repository layout and discovery.

:class:`RepoPaths` is the explicit context every operation receives: the
working-tree root plus every path inside the control directory.  Nothing
in Twig reads the process working directory except :func:`find_repo_root`,
and only when no root is supplied.

Layout::

    <root>/
        .twig/
            HEAD                 ref: refs/heads/<branch>
            index                JSON staging record
            objects/<2>/<38>     encoded objects
            refs/heads/<branch>  40-hex commit id
            logs/HEAD            "<id> <unix-seconds> <message>" per commit
"""
from __future__ import annotations

import logging
import pathlib
from dataclasses import dataclass

from twig.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepoPaths:
    """Absolute paths of one repository's working tree and control files."""

    root: pathlib.Path
    control_dir_name: str = ".twig"

    @classmethod
    def for_root(cls, root: pathlib.Path, control_dir_name: str | None = None) -> RepoPaths:
        name = control_dir_name or get_settings().control_dir
        return cls(root=root.resolve(), control_dir_name=name)

    @property
    def control_dir(self) -> pathlib.Path:
        return self.root / self.control_dir_name

    @property
    def head_file(self) -> pathlib.Path:
        return self.control_dir / "HEAD"

    @property
    def index_file(self) -> pathlib.Path:
        return self.control_dir / "index"

    @property
    def objects_dir(self) -> pathlib.Path:
        return self.control_dir / "objects"

    @property
    def heads_dir(self) -> pathlib.Path:
        return self.control_dir / "refs" / "heads"

    @property
    def log_file(self) -> pathlib.Path:
        return self.control_dir / "logs" / "HEAD"

    def is_initialized(self) -> bool:
        return self.control_dir.is_dir()


def find_repo_root(start: pathlib.Path | None = None) -> pathlib.Path | None:
    """Walk up from *start* (default ``Path.cwd()``) looking for the control directory.

    Returns the first directory that contains it, or ``None`` if no such
    ancestor exists.  Never raises; callers decide what to do on a miss.

    The ``TWIG_REPO_ROOT`` setting overrides discovery entirely; set it in
    tests to avoid ``os.chdir`` calls.
    """
    settings = get_settings()
    if settings.repo_root is not None:
        p = settings.repo_root.resolve()
        logger.debug("⚠️ TWIG_REPO_ROOT override active: %s", p)
        return p if (p / settings.control_dir).is_dir() else None

    current = (start or pathlib.Path.cwd()).resolve()
    while True:
        if (current / settings.control_dir).is_dir():
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent
