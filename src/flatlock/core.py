"""Streaming entrypoints and repository scanning.

The generators here yield :class:`~flatlock.models.Dependency` records lazily
and may repeat a ``name@version`` key when a lockfile lists it more than once
(pnpm peer variants are already collapsed). Use
:class:`~flatlock.depset.DependencySet` for a deduplicated view.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from .depset import DependencySet
from .detect import LockfileFormat, coerce_format, sniff
from .discovery import discover_lockfiles
from .handlers import get_format_handler
from .models import Dependency

logger = logging.getLogger(__name__)


def from_string(
    content: str,
    format: LockfileFormat | str | None = None,
    path: str | Path | None = None,
) -> Iterator[Dependency]:
    """Yield dependencies from lockfile text, detecting the format unless given.

    Detection and parsing happen on the first ``next()``; errors surface then.
    """
    if format is None:
        detection = sniff(content, path)
        handler = get_format_handler(detection.format)
        document = detection.document
    else:
        handler = get_format_handler(coerce_format(format))
        document = handler.load(content)
    yield from handler.iter_dependencies(document)


def from_path(path: str | Path, format: LockfileFormat | str | None = None) -> Iterator[Dependency]:
    """Yield dependencies from a lockfile on disk."""
    path = Path(path)
    yield from from_string(path.read_text(encoding="utf-8"), format=format, path=path)


def collect(path: str | Path, format: LockfileFormat | str | None = None) -> list[Dependency]:
    """Return every dependency of a lockfile as a list."""
    return list(from_path(path, format=format))


def scan_repository(root: Path | str) -> dict[str, DependencySet]:
    """Parse every lockfile under ``root``.

    Params:
        root: repository root to scan

    Returns: mapping of lockfile path (relative to root, POSIX separators) to
    its DependencySet, sorted by path.
    """
    root = Path(root).resolve()
    results: dict[str, DependencySet] = {}
    for lockfile in sorted(discover_lockfiles(root)):
        relpath = lockfile.relative_to(root).as_posix()
        results[relpath] = DependencySet.from_path(lockfile)
    logger.debug("Scanned %d lockfile(s) under %s", len(results), root)
    return results
