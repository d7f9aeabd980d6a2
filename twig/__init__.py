"""Twig — a minimal Git-style version-control engine."""
from __future__ import annotations

__version__ = "0.1.0"
