"""Data models for lockfile extraction."""

from __future__ import annotations

from .dependency import Dependency

__all__ = [
    "Dependency",
]
