"""Pytest configuration and fixtures."""
from __future__ import annotations

import pathlib
from collections.abc import Callable, Iterator

import pytest

from twig.config import get_settings
from twig.repository import Repository

_TWIG_ENV = (
    "TWIG_REPO_ROOT",
    "TWIG_CONTROL_DIR",
    "TWIG_DEFAULT_BRANCH",
    "TWIG_DEBUG",
    "TWIG_LOG_LEVEL",
)


class FakeClock:
    """Deterministic commit clock: every call advances by *step* seconds."""

    def __init__(self, start: int = 1_700_000_000, step: int = 60) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> int:
        self.now += self.step
        return self.now


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Drop any TWIG_* environment and the cached settings around each test."""
    for var in _TWIG_ENV:
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repo(tmp_path: pathlib.Path, clock: FakeClock) -> Repository:
    """A freshly initialised repository in ``tmp_path``."""
    return Repository.init(tmp_path, clock=clock)


@pytest.fixture
def make_repo() -> Callable[[pathlib.Path], Repository]:
    """Factory for extra repositories, each with its own fresh clock."""

    def _make(root: pathlib.Path) -> Repository:
        root.mkdir(parents=True, exist_ok=True)
        return Repository.init(root, clock=FakeClock())

    return _make
