"""Load package.json manifests and extract their declared dependencies."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from ..errors import ParseError, TraversalError

logger = logging.getLogger(__name__)

SECTIONS = (
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "optionalDependencies",
)

_DEPENDENCY_MAP = {
    "type": ["object", "null"],
    "additionalProperties": {"type": "string"},
}

MANIFEST_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "version": {"type": "string"},
        **{section: _DEPENDENCY_MAP for section in SECTIONS},
    },
}

_VALIDATOR = Draft202012Validator(MANIFEST_SCHEMA)


def _format_errors(errors: Iterable) -> str:
    messages = []
    for error in errors:
        pointer = "/".join(str(p) for p in error.path)
        messages.append(f"- {pointer or '<root>'}: {error.message}")
    return "\n".join(messages)


def validate_manifest(manifest: Any) -> Mapping[str, Any]:
    """Return ``manifest`` unchanged if it is a usable package manifest.

    Raises:
        TraversalError: if it is not an object or a dependency section is not
            a name -> range string map.
    """
    if not isinstance(manifest, Mapping):
        raise TraversalError("Package manifest must be a mapping")
    errors = sorted(_VALIDATOR.iter_errors(dict(manifest)), key=lambda e: list(e.path))
    if errors:
        raise TraversalError("Invalid package manifest:\n" + _format_errors(errors))
    return manifest


def load_manifest(path: Path | str) -> dict[str, Any]:
    """Read and validate a package.json file."""
    import json

    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON in {path}: {exc}") from exc
    validate_manifest(data)
    return data


def declared_dependencies(
    manifest: Mapping[str, Any], sections: Iterable[str] = SECTIONS
) -> list[tuple[str, str]]:
    """Return list of (package, version_expr) from the requested sections."""
    pairs: list[tuple[str, str]] = []
    for section in sections:
        deps = manifest.get(section) or {}
        for name, version in deps.items():
            pairs.append((name, str(version)))
    return pairs


def read_workspace_manifests(
    workspace_paths: Iterable[str], repo_dir: Path | str
) -> dict[str, dict[str, Any]]:
    """Load ``<repo_dir>/<workspace>/package.json`` for each workspace path.

    Workspaces whose manifest is missing or invalid are skipped with a warning.
    """
    repo_dir = Path(repo_dir)
    manifests: dict[str, dict[str, Any]] = {}
    for workspace in workspace_paths:
        manifest_path = repo_dir / workspace / "package.json"
        try:
            manifests[workspace] = load_manifest(manifest_path)
        except (OSError, ParseError, TraversalError) as exc:
            logger.warning("Skipping workspace %s: %s", workspace, exc)
    return manifests
