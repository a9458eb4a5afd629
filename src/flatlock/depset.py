"""Immutable set of dependencies extracted from one lockfile."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from .config import ResolveOptions
from .detect import LockfileFormat, coerce_format, sniff
from .errors import TraversalError
from .handlers import get_format_handler
from .models import Dependency
from .parsers.package_json import declared_dependencies, validate_manifest
from .resolve import LockfileGraph, build_resolver

logger = logging.getLogger(__name__)

_INTERNAL = object()


class DependencySet:
    """Dependencies keyed by ``name@version``, in lockfile order.

    Sets are built with :meth:`from_string` or :meth:`from_path`. A set built
    that way keeps the raw lockfile tables and can compute the transitive
    dependencies of a workspace with :meth:`dependencies_of`. Sets produced
    by set algebra or by :meth:`dependencies_of` carry no lockfile and cannot.

    Instances are never mutated after construction and may be shared freely
    between threads.
    """

    __slots__ = ("_records", "_format", "_graph", "_by_name")

    def __init__(
        self,
        token: object,
        records: Mapping[str, Dependency],
        fmt: LockfileFormat | None,
        graph: LockfileGraph | None = None,
    ) -> None:
        if token is not _INTERNAL:
            raise TypeError(
                "DependencySet cannot be constructed directly; "
                "use DependencySet.from_string() or DependencySet.from_path()"
            )
        self._records = dict(records)
        self._format = fmt
        self._graph = graph
        self._by_name: dict[str, Dependency] = {}
        if graph is not None:
            for dep in self._records.values():
                self._by_name.setdefault(dep.name, dep)

    # ---- Construction ------------------------------------------------------------------

    @classmethod
    def from_string(
        cls,
        content: str,
        *,
        format: LockfileFormat | str | None = None,
        path: str | Path | None = None,
    ) -> DependencySet:
        """Parse lockfile text; the format is detected from content unless given.

        ``path`` is only used in log messages.
        """
        if format is None:
            detection = sniff(content, path)
            fmt, document = detection.format, detection.document
        else:
            fmt = coerce_format(format)
            document = get_format_handler(fmt).load(content)

        handler = get_format_handler(fmt)
        records: dict[str, Dependency] = {}
        for dep in handler.iter_dependencies(document):
            records.setdefault(dep.key, dep)

        logger.debug(
            "Parsed %s%s: %d dependencies",
            handler.display_name,
            f" at {path}" if path else "",
            len(records),
        )
        return cls(_INTERNAL, records, fmt, LockfileGraph.build(fmt, document))

    @classmethod
    def from_path(cls, path: str | Path, *, format: LockfileFormat | str | None = None) -> DependencySet:
        """Read and parse a lockfile from disk."""
        lockfile = Path(path)
        content = lockfile.read_text(encoding="utf-8")
        return cls.from_string(content, format=format, path=lockfile)

    def _derive(self, records: Mapping[str, Dependency]) -> DependencySet:
        return DependencySet(_INTERNAL, records, self._format)

    # ---- Inspection --------------------------------------------------------------------

    @property
    def size(self) -> int:
        return len(self._records)

    @property
    def format(self) -> LockfileFormat | None:
        """Lockfile format the set came from; derived sets keep their left operand's."""
        return self._format

    @property
    def can_traverse(self) -> bool:
        return self._graph is not None

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Dependency]:
        return iter(self._records.values())

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Dependency):
            return item.key in self._records
        if isinstance(item, str):
            return item in self._records
        return False

    def __repr__(self) -> str:
        fmt = self._format.value if self._format else None
        return f"DependencySet(format={fmt!r}, size={len(self._records)})"

    def has(self, key: str) -> bool:
        return key in self._records

    def get(self, key: str, default: Dependency | None = None) -> Dependency | None:
        return self._records.get(key, default)

    def keys(self) -> Iterator[str]:
        return iter(self._records.keys())

    def values(self) -> Iterator[Dependency]:
        return iter(self._records.values())

    def items(self) -> Iterator[tuple[str, Dependency]]:
        return iter(self._records.items())

    def to_list(self) -> list[Dependency]:
        return list(self._records.values())

    def workspace_paths(self) -> list[str]:
        """Workspace paths recorded in the lockfile, excluding the root."""
        if self._graph is None:
            return []
        return self._graph.workspace_paths()

    # ---- Set algebra -------------------------------------------------------------------

    def union(self, other: DependencySet) -> DependencySet:
        """Entries of either set; ``self`` wins for keys present in both."""
        records = dict(self._records)
        for key, dep in other._records.items():
            records.setdefault(key, dep)
        return self._derive(records)

    def intersection(self, other: DependencySet) -> DependencySet:
        """Entries of ``self`` whose key is also in ``other``."""
        return self._derive({key: dep for key, dep in self._records.items() if key in other._records})

    def difference(self, other: DependencySet) -> DependencySet:
        """Entries of ``self`` whose key is not in ``other``."""
        return self._derive(
            {key: dep for key, dep in self._records.items() if key not in other._records}
        )

    def issubset(self, other: DependencySet) -> bool:
        return all(key in other._records for key in self._records)

    def issuperset(self, other: DependencySet) -> bool:
        return other.issubset(self)

    def isdisjoint(self, other: DependencySet) -> bool:
        return not any(key in other._records for key in self._records)

    def __or__(self, other: object) -> DependencySet:
        if not isinstance(other, DependencySet):
            return NotImplemented
        return self.union(other)

    def __and__(self, other: object) -> DependencySet:
        if not isinstance(other, DependencySet):
            return NotImplemented
        return self.intersection(other)

    def __sub__(self, other: object) -> DependencySet:
        if not isinstance(other, DependencySet):
            return NotImplemented
        return self.difference(other)

    def __le__(self, other: object) -> bool:
        if not isinstance(other, DependencySet):
            return NotImplemented
        return self.issubset(other)

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, DependencySet):
            return NotImplemented
        return self.issuperset(other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DependencySet):
            return NotImplemented
        return self._records.keys() == other._records.keys()

    __hash__ = None  # type: ignore[assignment]

    # ---- Resolution --------------------------------------------------------------------

    def dependencies_of(
        self,
        manifest: Mapping[str, Any],
        workspace_path: str | None = None,
        dev: bool = False,
        optional: bool = True,
        peer: bool = False,
        strict: bool = False,
        workspace_packages: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> DependencySet:
        """Return the transitive dependencies of a workspace.

        ``manifest`` is the workspace's parsed package.json. Its
        ``dependencies`` always seed the walk; ``devDependencies``,
        ``optionalDependencies`` and ``peerDependencies`` are added when
        ``dev``, ``optional`` and ``peer`` are set. Declared names the
        lockfile cannot resolve are skipped, or raise TraversalError when
        ``strict`` is set.

        ``workspace_packages`` maps the monorepo's workspace paths to their
        package.json (see :func:`~flatlock.parsers.package_json.read_workspace_manifests`).
        A declared name that matches a sibling workspace is walked into
        through that manifest and is not emitted. Yarn classic lockfiles
        record no workspaces, so siblings there are only found this way.

        Raises:
            TraversalError: if this set has no lockfile to walk, the manifest
                or options are malformed, or (strict) a name is unresolved.
        """
        if self._graph is None:
            raise TraversalError(
                "dependencies_of() requires a set created by from_string() or from_path(); "
                "sets produced by union, intersection or difference cannot be traversed"
            )
        options = ResolveOptions(
            workspace_path=workspace_path, dev=dev, optional=optional, peer=peer, strict=strict
        )
        validate_manifest(manifest)
        if workspace_packages is not None:
            if not isinstance(workspace_packages, Mapping):
                raise TraversalError("'workspace_packages' must map workspace paths to manifests")
            for sibling in workspace_packages.values():
                validate_manifest(sibling)

        declared = declared_dependencies(manifest, _seed_sections(options))
        resolver = build_resolver(
            self._graph, self._records, self._by_name, options, workspace_packages
        )
        resolved, unresolved = resolver.closure(declared)

        if unresolved:
            logger.debug(
                "%d declared or transitive name(s) not found in lockfile: %s",
                len(unresolved),
                ", ".join(unresolved),
            )
            if options.strict:
                raise TraversalError(
                    f"Unresolved dependencies for workspace '{options.root_workspace}': "
                    + ", ".join(sorted(unresolved))
                )
        return self._derive(resolved)


def _seed_sections(options: ResolveOptions) -> tuple[str, ...]:
    sections = ["dependencies"]
    if options.dev:
        sections.append("devDependencies")
    if options.optional:
        sections.append("optionalDependencies")
    if options.peer:
        sections.append("peerDependencies")
    return tuple(sections)
