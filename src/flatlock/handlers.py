"""Registry binding each lockfile format to its loader and extractor."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

from .detect import LockfileFormat, coerce_format
from .models import Dependency
from .parsers import package_lock, pnpm_lock, yarn_berry_lock, yarn_lock

LoadFunction: TypeAlias = Callable[[str], Mapping[str, Any]]
ExtractFunction: TypeAlias = Callable[[Mapping[str, Any]], Iterator[Dependency]]


@dataclass(slots=True, frozen=True)
class FormatHandler:
    """Handler binding a lockfile format to its load/extract functions."""

    format: LockfileFormat
    display_name: str
    load: LoadFunction
    iter_dependencies: ExtractFunction


FORMAT_HANDLERS: dict[LockfileFormat, FormatHandler] = {
    LockfileFormat.NPM: FormatHandler(
        format=LockfileFormat.NPM,
        display_name="npm package-lock.json",
        load=package_lock.load,
        iter_dependencies=package_lock.iter_dependencies,
    ),
    LockfileFormat.PNPM: FormatHandler(
        format=LockfileFormat.PNPM,
        display_name="pnpm-lock.yaml",
        load=pnpm_lock.load,
        iter_dependencies=pnpm_lock.iter_dependencies,
    ),
    LockfileFormat.YARN_CLASSIC: FormatHandler(
        format=LockfileFormat.YARN_CLASSIC,
        display_name="yarn.lock (classic)",
        load=yarn_lock.load,
        iter_dependencies=yarn_lock.iter_dependencies,
    ),
    LockfileFormat.YARN_BERRY: FormatHandler(
        format=LockfileFormat.YARN_BERRY,
        display_name="yarn.lock (berry)",
        load=yarn_berry_lock.load,
        iter_dependencies=yarn_berry_lock.iter_dependencies,
    ),
}


def get_format_handler(fmt: LockfileFormat | str) -> FormatHandler:
    """Return the handler for ``fmt``, raising DetectionError for unknown formats."""
    return FORMAT_HANDLERS[coerce_format(fmt)]
