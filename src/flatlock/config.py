"""Options controlling transitive dependency resolution.

Options are passed per call; nothing is read from global state. Callers that
build options from untyped input (JSON, environment, CLI) go through
:meth:`ResolveOptions.from_mapping`, which validates every field.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any

from .errors import TraversalError

TRUTHY = {"1", "true", "yes", "y"}


@dataclass(slots=True, frozen=True)
class ResolveOptions:
    """Which manifest sections seed the walk and how misses are handled."""

    workspace_path: str | None = None
    dev: bool = False
    optional: bool = True
    peer: bool = False
    strict: bool = False

    def __post_init__(self) -> None:
        if self.workspace_path is not None and not isinstance(self.workspace_path, str):
            raise TraversalError("'workspace_path' must be a string")
        for name in ("dev", "optional", "peer", "strict"):
            if not isinstance(getattr(self, name), bool):
                raise TraversalError(f"'{name}' must be a boolean")

    @property
    def root_workspace(self) -> str:
        """Workspace path normalised for lockfile lookups; the root is ``"."``."""
        return normalize_workspace_path(self.workspace_path)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> ResolveOptions:
        """Create options from a dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise TraversalError(f"Unknown resolve option(s): {', '.join(unknown)}")
        return cls(**data)


def normalize_workspace_path(path: str | None) -> str:
    path = (path or ".").strip("/")
    if path.startswith("./"):
        path = path[2:]
    return path or "."


def env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean flag from the environment (``1/true/yes/y``)."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in TRUTHY
