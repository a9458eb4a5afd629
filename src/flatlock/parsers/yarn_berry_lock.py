"""Parse yarn.lock v2+ (berry) to capture resolved dependencies."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from ..errors import ParseError
from ..models import Dependency

logger = logging.getLogger(__name__)

METADATA_KEY = "__metadata"
PROTOCOLS = ("npm", "workspace", "portal", "link", "patch", "file")
LOCAL_PROTOCOLS = frozenset({"workspace", "portal", "link", "file"})


def _earliest_protocol(descriptor: str) -> tuple[int, str | None]:
    """Locate the earliest ``@<protocol>:`` marker.

    Every marker is searched and the smallest index wins: ``patch:`` locators
    embed a nested ``@npm:`` further along the string.
    """
    earliest, found = -1, None
    for protocol in PROTOCOLS:
        index = descriptor.find(f"@{protocol}:")
        if index != -1 and (earliest == -1 or index < earliest):
            earliest, found = index, protocol
    return earliest, found


def _descriptor_name(descriptor: str) -> str:
    index, _ = _earliest_protocol(descriptor)
    if index != -1:
        return descriptor[:index]

    if descriptor.startswith("@"):
        slash = descriptor.find("/")
        if slash != -1:
            at = descriptor.find("@", slash)
            if at != -1:
                return descriptor[:at]

    at = descriptor.find("@")
    return descriptor[:at] if at != -1 else descriptor


def parse_key(key: str) -> str:
    """Return the package name of a yarn berry entry key.

        lodash@npm:^4.17.21                              -> lodash
        @babel/core@npm:^7.0.0, @babel/core@npm:^7.12.3  -> @babel/core
        pkg@patch:pkg@npm:1.1.0#./patches/pkg.patch      -> pkg

    For aliases (``alias@npm:real@^1``) this is the alias; prefer
    :func:`parse_resolution` when the entry has a ``resolution``.
    """
    return _descriptor_name(key.split(",", 1)[0].strip())


def parse_resolution(resolution: str) -> str:
    """Return the real package name from a ``resolution`` locator.

    >>> parse_resolution("string-width@npm:4.2.3")
    'string-width'
    """
    return _descriptor_name(resolution.strip())


def parse_protocol(descriptor: str) -> str | None:
    """Return the protocol of a descriptor or locator (``npm``, ``workspace``, ...)."""
    return _earliest_protocol(descriptor.strip())[1]


def descriptors(key: str) -> list[str]:
    """Split a comma-joined key into its descriptors."""
    return [part.strip() for part in key.split(",") if part.strip()]


def load(content: str) -> dict[str, Any]:
    """Decode berry lockfile YAML, raising ParseError for anything but a mapping."""
    import yaml

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ParseError(f"Invalid yarn berry lockfile: {exc}") from exc
    if not isinstance(data, dict):
        raise ParseError("yarn berry lockfile must be a YAML mapping")
    return data


def is_local(entry: Mapping[str, Any]) -> bool:
    resolution = entry.get("resolution")
    return isinstance(resolution, str) and parse_protocol(resolution) in LOCAL_PROTOCOLS


def workspace_entries(lockfile: Mapping[str, Any]) -> dict[str, tuple[str, dict[str, Any]]]:
    """Map each workspace path to (package name, entry).

    The path comes from the ``resolution`` locator (``name@workspace:<path>``);
    key descriptors such as ``name@workspace:^`` hold ranges, not paths.
    """
    workspaces: dict[str, tuple[str, dict[str, Any]]] = {}
    for key, entry in lockfile.items():
        if key == METADATA_KEY or not isinstance(entry, dict):
            continue
        resolution = entry.get("resolution")
        if not isinstance(resolution, str):
            continue
        locator = resolution.strip()
        index, protocol = _earliest_protocol(locator)
        if protocol != "workspace":
            continue
        workspaces[locator[index + len("@workspace:") :]] = (locator[:index], entry)
    return workspaces


def iter_dependencies(lockfile: Mapping[str, Any]) -> Iterator[Dependency]:
    """Yield dependencies from a decoded berry lockfile.

    ``__metadata`` is skipped, as are workspace, portal, link and file entries.
    The canonical name comes from ``resolution`` so aliased keys still report
    the real package.
    """
    count = 0
    for key, entry in lockfile.items():
        if key == METADATA_KEY or not isinstance(entry, dict):
            continue
        if is_local(entry):
            continue

        resolution = entry.get("resolution")
        if isinstance(resolution, str) and resolution:
            name = parse_resolution(resolution)
        else:
            name = parse_key(str(key))
        version = entry.get("version")

        if name and version is not None and str(version):
            count += 1
            yield Dependency(
                name=name,
                version=str(version),
                integrity=entry.get("checksum") or None,
                resolved=resolution or None,
            )
    logger.debug("yarn berry lockfile yielded %d dependencies", count)


def parse(content: str) -> Iterator[Dependency]:
    """Return a generator of dependencies from yarn berry lockfile text."""
    lockfile = load(content)
    yield from iter_dependencies(lockfile)
