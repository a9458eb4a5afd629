"""Parse pnpm-lock.yaml (and legacy shrinkwrap.yaml) into canonical dependencies."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from ..errors import ParseError
from ..models import Dependency
from .pnpm_era import PnpmEra, detect_version
from .pnpm_spec import parse_spec_for_era

logger = logging.getLogger(__name__)

IMPORTER_SECTIONS = (
    "dependencies",
    "devDependencies",
    "optionalDependencies",
    "peerDependencies",
)


def load(content: str) -> dict[str, Any]:
    """Decode lockfile YAML, raising ParseError for anything but a mapping."""
    import yaml

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ParseError(f"Invalid YAML in pnpm lockfile: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ParseError("pnpm lockfile must be a YAML mapping")
    return data


def _section(lockfile: Mapping[str, Any], name: str) -> dict[str, Any]:
    value = lockfile.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ParseError(f"pnpm lockfile '{name}' must be a mapping")
    return value


def packages_table(lockfile: Mapping[str, Any]) -> dict[str, Any]:
    return _section(lockfile, "packages")


def snapshots_table(lockfile: Mapping[str, Any]) -> dict[str, Any]:
    return _section(lockfile, "snapshots")


def importers_table(lockfile: Mapping[str, Any]) -> dict[str, Any]:
    """Return importers keyed by workspace path.

    Single-project lockfiles written before importers existed keep the root
    project's dependency maps at the top level; they are exposed as ``"."``.
    """
    importers = _section(lockfile, "importers")
    if importers:
        return importers

    root = {
        section: lockfile[section]
        for section in IMPORTER_SECTIONS
        if isinstance(lockfile.get(section), dict)
    }
    if isinstance(lockfile.get("specifiers"), dict):
        root["specifiers"] = lockfile["specifiers"]
    return {".": root} if root else {}


def is_local(spec: object, entry: Mapping[str, Any]) -> bool:
    if isinstance(spec, str) and spec.startswith(("link:", "file:")):
        return True
    resolution = entry.get("resolution")
    return isinstance(resolution, dict) and resolution.get("type") == "directory"


def entry_identity(spec: object, entry: Mapping[str, Any], era: PnpmEra) -> tuple[str | None, str | None]:
    """Return (name, version) for a ``packages`` entry.

    Tarball and git dependencies record their real ``name``/``version`` on the
    entry itself because the key holds a URL; those fields win over the key.
    """
    name, version = parse_spec_for_era(era)(spec)
    explicit_name = entry.get("name")
    explicit_version = entry.get("version")
    if isinstance(explicit_name, str) and explicit_name:
        name = explicit_name
    if explicit_version is not None and str(explicit_version):
        version = str(explicit_version)
    return name, version


def _dependency(name: str, version: str, entry: Mapping[str, Any]) -> Dependency:
    resolution = entry.get("resolution")
    if not isinstance(resolution, dict):
        resolution = {}
    return Dependency(
        name=name,
        version=version,
        integrity=resolution.get("integrity") or None,
        resolved=resolution.get("tarball") or None,
    )


def iter_dependencies(lockfile: Mapping[str, Any]) -> Iterator[Dependency]:
    """Yield external dependencies from a decoded pnpm lockfile.

    Importers (workspace projects) and ``link:``/directory entries are never
    yielded. For v9 lockfiles, peer variants listed only under ``snapshots``
    are yielded with the resolution of their base ``packages`` entry.
    """
    detected = detect_version(lockfile)
    if detected.era is PnpmEra.UNKNOWN:
        logger.warning("Unknown pnpm lockfile version %r; guessing key grammar", detected.version)
    else:
        logger.debug("pnpm lockfile era %s (version %r)", detected.era.value, detected.version)

    parse_spec = parse_spec_for_era(detected.era)
    packages = packages_table(lockfile)
    seen: set[str] = set()

    for spec, entry in packages.items():
        if not isinstance(entry, dict):
            entry = {}
        if is_local(spec, entry):
            continue
        name, version = entry_identity(spec, entry, detected.era)
        if not name or not version:
            continue
        key = f"{name}@{version}"
        if key in seen:
            continue
        seen.add(key)
        yield _dependency(name, version, entry)

    if detected.uses_snapshots_split:
        for spec in snapshots_table(lockfile):
            name, version = parse_spec(spec)
            if not name or not version:
                continue
            key = f"{name}@{version}"
            if key in seen:
                continue
            base = packages.get(key)
            if not isinstance(base, dict) or is_local(spec, base):
                continue
            seen.add(key)
            yield _dependency(name, version, base)

    logger.debug("pnpm lockfile yielded %d dependencies", len(seen))


def parse(content: str) -> Iterator[Dependency]:
    """Return a generator of dependencies from pnpm lockfile text."""
    lockfile = load(content)
    yield from iter_dependencies(lockfile)
