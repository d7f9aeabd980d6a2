"""
Twig Configuration

Environment-based configuration for the Twig CLI.  Every field can be set
with a ``TWIG_``-prefixed environment variable or a ``.env`` file, e.g.
``TWIG_DEFAULT_BRANCH=main`` or ``TWIG_REPO_ROOT=/tmp/project``.
"""
import logging
import pathlib
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Twig settings loaded from environment variables."""

    app_name: str = "Twig"
    debug: bool = False
    log_level: str = "WARNING"

    # Repository layout
    control_dir: str = ".twig"
    default_branch: str = "master"

    # Overrides repository discovery entirely; useful for tests and wrappers
    # that should not depend on the process working directory.
    repo_root: Optional[pathlib.Path] = None

    model_config = SettingsConfigDict(
        env_prefix="TWIG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value}")
        return level

    @field_validator("control_dir")
    @classmethod
    def _plain_dir_name(cls, value: str) -> str:
        if not value or "/" in value or value in (".", ".."):
            raise ValueError("control_dir must be a single directory name")
        return value

    @property
    def effective_log_level(self) -> int:
        return logging.DEBUG if self.debug else logging.getLevelName(self.log_level)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
