"""Exception hierarchy shared by detection, parsing and traversal."""

from __future__ import annotations


class FlatlockError(RuntimeError):
    """Base error for lockfile detection, parsing and traversal failures."""


class DetectionError(FlatlockError):
    """Raised when a lockfile format cannot be recognised from content or path."""


class ParseError(FlatlockError):
    """Raised when lockfile content is structurally invalid for its format."""


class TraversalError(FlatlockError):
    """Raised when a transitive dependency walk cannot be performed."""
