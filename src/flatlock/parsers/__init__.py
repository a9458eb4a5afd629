"""Per-format lockfile parsers.

Each format module exposes the same surface: ``load(content)`` decodes text
into the lockfile document, ``iter_dependencies(lockfile)`` walks it and
yields :class:`~flatlock.models.Dependency` records, and ``parse(content)``
chains both. Key grammars are exposed as ``parse_key`` (plus ``parse_spec``
for pnpm and ``parse_resolution`` for yarn berry).
"""

from __future__ import annotations

from .package_lock import parse_key as parse_npm_key
from .pnpm_spec import parse_key as parse_pnpm_key
from .pnpm_spec import parse_spec as parse_pnpm_spec
from .yarn_berry_lock import parse_key as parse_yarn_berry_key
from .yarn_berry_lock import parse_resolution as parse_yarn_berry_resolution
from .yarn_lock import parse_key as parse_yarn_classic_key

__all__ = [
    "parse_npm_key",
    "parse_pnpm_key",
    "parse_pnpm_spec",
    "parse_yarn_berry_key",
    "parse_yarn_berry_resolution",
    "parse_yarn_classic_key",
]
