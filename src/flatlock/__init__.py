"""flatlock: flat dependency extraction from npm, pnpm and yarn lockfiles.

This package turns a lockfile into the set of external packages it records,
and computes the transitive dependencies of one workspace in a monorepo.
"""

from __future__ import annotations

from .config import ResolveOptions
from .core import collect, from_path, from_string, scan_repository
from .depset import DependencySet
from .detect import LockfileFormat, detect_format
from .errors import DetectionError, FlatlockError, ParseError, TraversalError
from .models import Dependency

__all__ = [
    "Dependency",
    "DependencySet",
    "DetectionError",
    "FlatlockError",
    "LockfileFormat",
    "ParseError",
    "ResolveOptions",
    "TraversalError",
    "collect",
    "detect_format",
    "from_path",
    "from_string",
    "scan_repository",
]
