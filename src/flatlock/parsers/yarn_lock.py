"""Parse yarn.lock (classic, v1) to capture resolved dependencies."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from ..models import Dependency
from .yarn_syntax import parse_syntax

logger = logging.getLogger(__name__)

_LOCAL_PREFIXES = ("file:", "link:")


def parse_key(key: str) -> str:
    """Return the package name of a yarn classic entry key.

    Keys list every range the entry satisfies:

        lodash@^4.17.21                  -> lodash
        @babel/core@^7.0.0               -> @babel/core
        lodash@^4.17.21, lodash@^4.0.0   -> lodash

    With ``npm:`` aliasing (``alias@npm:real@^1.0.0``) the alias is returned,
    not the real package; yarn classic records nothing better in the key.
    """
    first = key.split(",", 1)[0].strip()

    alias_index = first.find("@npm:")
    if alias_index != -1:
        return first[:alias_index]

    if first.startswith("@"):
        slash = first.find("/")
        if slash != -1:
            at = first.find("@", slash)
            if at != -1:
                return first[:at]
        last_at = first.rfind("@")
        return first[:last_at] if last_at > 0 else first

    at = first.find("@")
    return first[:at] if at != -1 else first


def descriptors(key: str) -> list[str]:
    """Split a comma-joined key into its ``name@range`` descriptors."""
    return [part.strip() for part in key.split(",") if part.strip()]


def load(content: str) -> dict[str, Any]:
    return parse_syntax(content)


def is_local(entry: Mapping[str, Any]) -> bool:
    resolved = entry.get("resolved")
    return isinstance(resolved, str) and resolved.startswith(_LOCAL_PREFIXES)


def iter_dependencies(lockfile: Mapping[str, Any]) -> Iterator[Dependency]:
    """Yield dependencies from a parsed yarn.lock; ``file:``/``link:`` entries are dropped."""
    count = 0
    for key, entry in lockfile.items():
        if not isinstance(entry, dict) or is_local(entry):
            continue
        name = parse_key(key)
        version = entry.get("version")
        if name and version:
            count += 1
            yield Dependency(
                name=name,
                version=str(version),
                integrity=entry.get("integrity") or None,
                resolved=entry.get("resolved") or None,
            )
    logger.debug("yarn classic lockfile yielded %d dependencies", count)


def parse(content: str) -> Iterator[Dependency]:
    """Return a generator of dependencies from yarn.lock text."""
    lockfile = load(content)
    yield from iter_dependencies(lockfile)
