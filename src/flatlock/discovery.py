"""Repository and lockfile discovery utilities."""

from __future__ import annotations

import os
from pathlib import Path

from .detect import LOCKFILE_NAMES

EXCLUDES = {"node_modules", ".git", ".venv", ".yarn"}


def discover_lockfiles(root: Path | str) -> list[Path]:
    """Find lockfiles recursively under root, sorted by path.

    Excluded directories (installed packages, VCS metadata, the yarn cache)
    are pruned from the walk rather than filtered afterwards, so large
    ``node_modules`` trees are never traversed.
    """
    root = Path(root).resolve()
    lockfiles: list[Path] = []

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [name for name in dirnames if name not in EXCLUDES]
        lockfiles.extend(Path(dirpath) / name for name in filenames if name in LOCKFILE_NAMES)

    return sorted(lockfiles)
