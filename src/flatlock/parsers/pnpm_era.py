"""Detect the historical era of a pnpm lockfile.

pnpm has shipped five lockfile layouts:

- shrinkwrap.yaml v3/v4 (2016-2019): ``shrinkwrapVersion`` field
- pnpm-lock.yaml v5.x (2019-2022): numeric ``lockfileVersion``
- pnpm-lock.yaml 5.4-inlineSpecifiers (experimental)
- pnpm-lock.yaml v6.0 (2023)
- pnpm-lock.yaml v9.0 (2024+)

Each era encodes package keys and importer entries differently, so the parsers
select their grammar from the detected era.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


class PnpmEra(str, enum.Enum):
    SHRINKWRAP = "shrinkwrap"
    V5 = "v5"
    V5_INLINE = "v5-inline"
    V6 = "v6"
    V9 = "v9"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class DetectedVersion:
    """Era of a pnpm lockfile together with its raw version value."""

    era: PnpmEra
    version: Any
    is_shrinkwrap: bool = False

    @property
    def uses_at_separator(self) -> bool:
        """Package keys use ``name@version`` rather than ``name/version``."""
        return self.era in (PnpmEra.V6, PnpmEra.V9)

    @property
    def uses_snapshots_split(self) -> bool:
        """Dependency relationships live in ``snapshots``, metadata in ``packages``."""
        return self.era is PnpmEra.V9

    @property
    def uses_inline_specifiers(self) -> bool:
        """Importer entries are ``{specifier, version}`` objects."""
        return self.era in (PnpmEra.V5_INLINE, PnpmEra.V6, PnpmEra.V9)

    @property
    def has_leading_slash(self) -> bool:
        return self.era is not PnpmEra.V9


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# Ordered decision table over string versions; first match wins.
_STRING_ERAS: tuple[tuple[Callable[[str], bool], PnpmEra], ...] = (
    (lambda v: "inlineSpecifiers" in v, PnpmEra.V5_INLINE),
    (lambda v: v.startswith("9"), PnpmEra.V9),
    (lambda v: v.startswith("6"), PnpmEra.V6),
)


def detect_version(lockfile: Any) -> DetectedVersion:
    """Return the era of a decoded pnpm lockfile.

    >>> detect_version({"lockfileVersion": 5.4}).era
    <PnpmEra.V5: 'v5'>
    >>> detect_version({"lockfileVersion": "9.0"}).era
    <PnpmEra.V9: 'v9'>
    """
    if not isinstance(lockfile, dict):
        return DetectedVersion(era=PnpmEra.UNKNOWN, version="")

    if "shrinkwrapVersion" in lockfile:
        return DetectedVersion(
            era=PnpmEra.SHRINKWRAP,
            version=lockfile["shrinkwrapVersion"],
            is_shrinkwrap=True,
        )

    version = lockfile.get("lockfileVersion")
    if version is None:
        return DetectedVersion(era=PnpmEra.UNKNOWN, version="")

    if _is_number(version):
        return DetectedVersion(era=PnpmEra.V5, version=version)

    if isinstance(version, str):
        for matches, era in _STRING_ERAS:
            if matches(version):
                return DetectedVersion(era=era, version=version)

    return DetectedVersion(era=PnpmEra.UNKNOWN, version=version)
