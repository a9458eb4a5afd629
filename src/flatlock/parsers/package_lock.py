"""Parse npm package-lock.json / npm-shrinkwrap.json into canonical dependencies."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from ..errors import ParseError
from ..models import Dependency

logger = logging.getLogger(__name__)


def parse_key(path: str) -> str:
    """Return the package name installed at a lockfile ``packages`` path.

    Paths look like ``node_modules/<pkg>`` repeated, optionally below a
    workspace directory, where ``<pkg>`` is ``name`` or ``@scope/name``:

        node_modules/lodash                          -> lodash
        node_modules/@babel/core                     -> @babel/core
        node_modules/foo/node_modules/@scope/bar     -> @scope/bar

    This is path parsing, not spec parsing: no version or range is involved.
    """
    parts = path.split("/")
    name = parts[-1]
    maybe_scope = parts[-2] if len(parts) > 1 else ""
    if maybe_scope.startswith("@"):
        return f"{maybe_scope}/{name}"
    return name


def load(content: str) -> dict[str, Any]:
    """Decode lockfile text, raising ParseError for anything but a JSON object."""
    import json

    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON in npm lockfile: {exc}") from exc
    if not isinstance(data, dict):
        raise ParseError("npm lockfile must be a JSON object")
    return data


def packages_table(lockfile: Mapping[str, Any]) -> dict[str, Any]:
    """Return the path-keyed ``packages`` map of a lockfile.

    Supports npm v2+ ("packages" map) and v1 ("dependencies" tree), the latter
    flattened into the same path-keyed shape.
    """
    packages = lockfile.get("packages")
    if packages is not None:
        if not isinstance(packages, dict):
            raise ParseError("npm lockfile 'packages' must be an object")
        return packages

    deps = lockfile.get("dependencies")
    if isinstance(deps, dict):
        return _flatten_v1(deps, prefix="")
    return {}


def _flatten_v1(deps: Mapping[str, Any], prefix: str) -> dict[str, Any]:
    table: dict[str, Any] = {}
    for name, meta in deps.items():
        if not isinstance(meta, dict):
            continue
        path = f"{prefix}node_modules/{name}"
        entry: dict[str, Any] = {
            key: meta[key] for key in ("integrity", "resolved", "dev", "optional") if key in meta
        }

        version = meta.get("version")
        if isinstance(version, str):
            if version.startswith("npm:"):
                # Alias: "npm:<real-name>@<version>"
                real_name, _, version = version[len("npm:") :].rpartition("@")
                if real_name:
                    entry["name"] = real_name
            elif version.startswith("file:") or version.startswith("link:"):
                entry["link"] = True
        if version:
            entry["version"] = version

        requires = meta.get("requires")
        if isinstance(requires, dict):
            entry["dependencies"] = dict(requires)

        table[path] = entry

        nested = meta.get("dependencies")
        if isinstance(nested, dict):
            table.update(_flatten_v1(nested, prefix=f"{path}/"))
    return table


def entry_name(path: str, meta: Mapping[str, Any]) -> str | None:
    """Installed package name; aliased installs record the real name on the entry."""
    name = meta.get("name")
    if isinstance(name, str) and name:
        return name
    return parse_key(path)


def is_local(meta: Mapping[str, Any]) -> bool:
    """True for symlinked workspace entries and ``file:`` installs."""
    if meta.get("link"):
        return True
    version = meta.get("version")
    return isinstance(version, str) and version.startswith("file:")


def iter_dependencies(lockfile: Mapping[str, Any]) -> Iterator[Dependency]:
    """Yield installed external dependencies from a decoded lockfile.

    The root entry ("") and workspace definitions ("packages/foo") are skipped;
    only ``node_modules/`` paths describe installed packages. Workspace
    symlinks (``link: true``) are dropped.
    """
    count = 0
    for path, meta in packages_table(lockfile).items():
        if not path or "node_modules/" not in path:
            continue
        if not isinstance(meta, dict) or is_local(meta):
            continue

        name = entry_name(path, meta)
        version = meta.get("version")
        if name and version:
            count += 1
            yield Dependency(
                name=name,
                version=str(version),
                integrity=meta.get("integrity") or None,
                resolved=meta.get("resolved") or None,
            )
    logger.debug("npm lockfile yielded %d dependencies", count)


def parse(content: str) -> Iterator[Dependency]:
    """Return a generator of dependencies from package-lock.json text."""
    lockfile = load(content)
    yield from iter_dependencies(lockfile)
