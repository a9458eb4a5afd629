"""Transitive dependency resolution over a parsed lockfile.

Two strategies compute the closure of a workspace's declared dependencies:

- hoisting (npm, yarn classic, yarn berry): a name is located where the
  package manager would install or record it, falling back to any record with
  that name;
- importer-pinned (pnpm): the workspace's importer entry pins an exact version
  per name.

Both walk breadth-first and expand each name once, so diamond dependencies
collapse to a single version per name. That matches each package manager's
"one resolved version per name in this scope" view, not npm's nested
multi-version ``node_modules`` layout.
"""

from __future__ import annotations

import abc
import logging
import posixpath
import re
from collections import deque
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, NamedTuple

from .config import ResolveOptions, normalize_workspace_path
from .detect import LockfileFormat
from .models import Dependency
from .parsers import package_lock, pnpm_lock, yarn_berry_lock, yarn_lock
from .parsers.package_json import declared_dependencies
from .parsers.pnpm_era import DetectedVersion, PnpmEra, detect_version
from .parsers.pnpm_spec import parse_spec, parse_spec_for_era, strip_peer_suffix

logger = logging.getLogger(__name__)

# (name, hint): the hint is a lockfile path (npm), a range (yarn) or a pinned
# version/link reference (pnpm).
QueueItem = tuple[str, "str | None"]

_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+")


class Step(NamedTuple):
    """Outcome of locating one name: the record to emit (if any) and its children."""

    dependency: Dependency | None
    children: list[QueueItem]


@dataclass
class LockfileGraph:
    """Raw lockfile tables plus lookup indexes, built once per parsed lockfile."""

    format: LockfileFormat
    packages: dict[str, Any]
    importers: dict[str, Any] = field(default_factory=dict)
    snapshots: dict[str, Any] = field(default_factory=dict)
    era: DetectedVersion | None = None
    # (name, version) -> raw entries (pnpm: every peer variant) or npm paths
    by_version: dict[tuple[str, str], list[Any]] = field(default_factory=dict)
    # yarn descriptor ("name@range") -> raw entry
    by_descriptor: dict[str, dict[str, Any]] = field(default_factory=dict)
    # yarn berry workspace package name -> raw entry
    workspaces: dict[str, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def build(cls, fmt: LockfileFormat, document: Mapping[str, Any]) -> LockfileGraph:
        if fmt is LockfileFormat.NPM:
            graph = cls(format=fmt, packages=package_lock.packages_table(document))
            graph._index_npm()
        elif fmt is LockfileFormat.PNPM:
            graph = cls(
                format=fmt,
                packages=pnpm_lock.packages_table(document),
                importers=pnpm_lock.importers_table(document),
                snapshots=pnpm_lock.snapshots_table(document),
                era=detect_version(document),
            )
            graph._index_pnpm()
        else:
            packages = {
                str(key): entry
                for key, entry in document.items()
                if key != yarn_berry_lock.METADATA_KEY and isinstance(entry, dict)
            }
            graph = cls(format=fmt, packages=packages)
            graph._index_yarn()
        return graph

    def _add(self, name: str | None, version: Any, value: Any) -> None:
        if name and version is not None and str(version):
            self.by_version.setdefault((name, str(version)), []).append(value)

    def _index_npm(self) -> None:
        for path, entry in self.packages.items():
            if "node_modules/" in path and isinstance(entry, dict):
                self._add(package_lock.entry_name(path, entry), entry.get("version"), path)

    def _index_pnpm(self) -> None:
        era = self.era.era if self.era is not None else PnpmEra.UNKNOWN
        for spec, entry in self.packages.items():
            if isinstance(entry, dict):
                name, version = pnpm_lock.entry_identity(spec, entry, era)
                self._add(name, version, entry)
        parse = parse_spec_for_era(era)
        for spec, entry in self.snapshots.items():
            if isinstance(entry, dict):
                name, version = parse(spec)
                self._add(name, version, entry)

    def _index_yarn(self) -> None:
        berry = self.format is LockfileFormat.YARN_BERRY
        for key, entry in self.packages.items():
            split = yarn_berry_lock.descriptors if berry else yarn_lock.descriptors
            for descriptor in split(key):
                self.by_descriptor.setdefault(descriptor, entry)
            if berry:
                name = canonical_yarn_berry_name(key, entry)
                if yarn_berry_lock.is_local(entry):
                    self.workspaces.setdefault(name, entry)
            else:
                name = yarn_lock.parse_key(key)
            self._add(name, entry.get("version"), entry)

    def entries(self, name: str, version: str) -> list[Any]:
        return self.by_version.get((name, version), [])

    def workspace_paths(self) -> list[str]:
        """Workspace paths recorded in the lockfile, excluding the root."""
        if self.format is LockfileFormat.NPM:
            return [path for path in self.packages if path and "node_modules/" not in path]
        if self.format is LockfileFormat.PNPM:
            return [path for path in self.importers if path != "."]
        if self.format is LockfileFormat.YARN_BERRY:
            paths = yarn_berry_lock.workspace_entries(self.packages)
            return [path for path in paths if path != "."]
        return []


def canonical_yarn_berry_name(key: str, entry: Mapping[str, Any]) -> str:
    resolution = entry.get("resolution")
    if isinstance(resolution, str) and resolution:
        return yarn_berry_lock.parse_resolution(resolution)
    return yarn_berry_lock.parse_key(key)


class Resolver(abc.ABC):
    """Breadth-first closure with a visited-by-name set.

    Sibling workspaces named in ``workspace_packages`` (path -> package.json)
    are walked into through their manifest and never emitted, even when the
    lockfile has no entry for them.
    """

    def __init__(
        self,
        graph: LockfileGraph,
        records: Mapping[str, Dependency],
        by_name: Mapping[str, Dependency],
        options: ResolveOptions,
        workspace_packages: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> None:
        self.graph = graph
        self.records = records
        self.by_name = by_name
        self.options = options
        # package name -> (workspace path, manifest)
        self.siblings: dict[str, tuple[str, Mapping[str, Any]]] = {}
        for path, manifest in (workspace_packages or {}).items():
            path = normalize_workspace_path(path)
            name = manifest.get("name")
            if isinstance(name, str) and name and path != options.root_workspace:
                self.siblings.setdefault(name, (path, manifest))

    def seed(self, name: str, spec: str) -> QueueItem:
        return (name, None)

    @abc.abstractmethod
    def locate(self, name: str, hint: str | None) -> Step | None:
        """Find the entry for ``name``; ``None`` when the lockfile has no such name."""

    def follow_workspace(self, path: str, manifest: Mapping[str, Any]) -> Step:
        declared = declared_dependencies(manifest, self.dependency_sections())
        return Step(None, [self.seed(child, spec) for child, spec in declared])

    def dependency_sections(self) -> tuple[str, ...]:
        if self.options.optional:
            return ("dependencies", "optionalDependencies")
        return ("dependencies",)

    def children_of(self, entry: Mapping[str, Any]) -> Iterator[tuple[str, Any]]:
        for section in self.dependency_sections():
            deps = entry.get(section)
            if isinstance(deps, dict):
                yield from deps.items()

    def record(self, name: str, version: Any) -> Dependency | None:
        return self.records.get(f"{name}@{version}")

    def closure(self, declared: list[tuple[str, str]]) -> tuple[dict[str, Dependency], list[str]]:
        """Return (resolved records keyed by name@version, unresolved names)."""
        result: dict[str, Dependency] = {}
        unresolved: list[str] = []
        visited: set[str] = set()
        queue: deque[QueueItem] = deque(self.seed(name, spec) for name, spec in declared)

        while queue:
            name, hint = queue.popleft()
            if name in visited:
                continue
            visited.add(name)

            sibling = self.siblings.get(name)
            step = self.follow_workspace(*sibling) if sibling else self.locate(name, hint)
            if step is None:
                logger.debug("Could not resolve %s in %s lockfile", name, self.graph.format.value)
                unresolved.append(name)
                continue

            if step.dependency is not None:
                result[step.dependency.key] = step.dependency
            queue.extend(child for child in step.children if child[0] not in visited)

        return result, unresolved


class NpmResolver(Resolver):
    """Hoisting resolution over ``node_modules`` paths.

    A name is looked up in the ``node_modules`` of the package that declared
    it, then each enclosing package directory, then the workspace-local
    ``node_modules``, then the hoisted root ``node_modules``.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        workspace = self.options.root_workspace
        self.workspace = "" if workspace == "." else workspace

    def seed(self, name: str, spec: str) -> QueueItem:
        return (name, self.workspace)

    def candidate_paths(self, name: str, context: str) -> Iterator[str]:
        path = context
        while path:
            yield f"{path}/node_modules/{name}"
            index = path.rfind("/node_modules/")
            if index != -1:
                path = path[:index]
            elif path.startswith("node_modules/"):
                path = ""
            else:
                break
        if self.workspace:
            yield f"{self.workspace}/node_modules/{name}"
        yield f"node_modules/{name}"

    def expand(self, path: str, entry: Mapping[str, Any]) -> list[QueueItem]:
        return [(child, path) for child, _ in self.children_of(entry)]

    def follow_workspace(self, path: str, manifest: Mapping[str, Any]) -> Step:
        declared = declared_dependencies(manifest, self.dependency_sections())
        return Step(None, [(child, path) for child, _ in declared])

    def locate(self, name: str, hint: str | None) -> Step | None:
        for path in self.candidate_paths(name, hint or ""):
            entry = self.graph.packages.get(path)
            if not isinstance(entry, dict):
                continue

            if entry.get("link"):
                target_path = entry.get("resolved")
                target = self.graph.packages.get(target_path) if target_path else None
                if isinstance(target, dict):
                    # Workspace symlink: walk into it, never emit it
                    return Step(None, self.expand(target_path, target))
                return Step(None, [])

            version = entry.get("version")
            if not version:
                continue
            if package_lock.is_local(entry):
                return Step(None, self.expand(path, entry))
            dep = self.record(package_lock.entry_name(path, entry), version)
            return Step(dep, self.expand(path, entry))

        dep = self.by_name.get(name)
        if dep is None:
            return None
        paths = self.graph.entries(dep.name, dep.version)
        if not paths:
            return Step(dep, [])
        return Step(dep, self.expand(paths[0], self.graph.packages[paths[0]]))


class YarnResolver(Resolver):
    """Hoisting resolution for yarn classic and berry.

    Lockfile keys are the descriptors (``name@range``) dependents ask for, so
    the range that requested a name selects the exact entry; names asked for
    without a matching descriptor fall back to any record with that name.
    """

    @property
    def berry(self) -> bool:
        return self.graph.format is LockfileFormat.YARN_BERRY

    def seed(self, name: str, spec: str) -> QueueItem:
        return (name, spec)

    def descriptor_candidates(self, name: str, spec: str) -> list[str]:
        candidates = [f"{name}@{spec}"]
        if self.berry and yarn_berry_lock.parse_protocol(f"{name}@{spec}") is None:
            candidates.append(f"{name}@npm:{spec}")
        return candidates

    def identity(self, name: str, entry: Mapping[str, Any]) -> tuple[str, bool]:
        """Return (canonical name, is_local) for a located entry."""
        if self.berry:
            resolution = entry.get("resolution")
            if isinstance(resolution, str) and resolution:
                name = yarn_berry_lock.parse_resolution(resolution)
            return name, yarn_berry_lock.is_local(entry)
        return name, yarn_lock.is_local(entry)

    def expand(self, entry: Mapping[str, Any]) -> list[QueueItem]:
        return [(child, str(spec)) for child, spec in self.children_of(entry)]

    def locate(self, name: str, hint: str | None) -> Step | None:
        entry = None
        if hint:
            for descriptor in self.descriptor_candidates(name, hint):
                entry = self.graph.by_descriptor.get(descriptor)
                if entry is not None:
                    break

        if entry is not None:
            canonical, local = self.identity(name, entry)
            if local:
                return Step(None, self.expand(entry))
            return Step(self.record(canonical, entry.get("version")), self.expand(entry))

        dep = self.by_name.get(name)
        if dep is not None:
            entries = self.graph.entries(dep.name, dep.version)
            return Step(dep, self.expand(entries[0]) if entries else [])

        workspace = self.graph.workspaces.get(name)
        if workspace is not None:
            return Step(None, self.expand(workspace))
        return None


class PnpmResolver(Resolver):
    """Importer-pinned resolution.

    The workspace's importer pins an exact version (or workspace link) per
    name; package entries pin the versions of their own dependencies. Names
    pinned nowhere fall back to any record with that name.
    """

    LINK = "link:"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.workspace = self.options.root_workspace
        importer = self.graph.importers.get(self.workspace)
        self.pinned: dict[str, str] = {}
        if isinstance(importer, dict):
            for name, ref in self.importer_refs(self.workspace, importer, pnpm_lock.IMPORTER_SECTIONS):
                self.pinned.setdefault(name, ref)

    def importer_refs(
        self, path: str, importer: Mapping[str, Any], sections: tuple[str, ...]
    ) -> list[QueueItem]:
        refs: list[QueueItem] = []
        for section in sections:
            deps = importer.get(section)
            if not isinstance(deps, dict):
                continue
            for name, value in deps.items():
                ref = value.get("version") if isinstance(value, dict) else value
                if ref is None:
                    continue
                ref = str(ref)
                if ref.startswith(self.LINK):
                    target = posixpath.normpath(posixpath.join(path, ref[len(self.LINK) :]))
                    ref = f"{self.LINK}{target}"
                refs.append((name, ref))
        return refs

    def pinned_identity(self, name: str, ref: str) -> tuple[str, str] | None:
        """Turn an importer/package reference into (real name, version).

        References are a plain version (``4.17.21``, ``1.0.0_react@17.0.2``,
        ``7.0.0(react@18.2.0)``) or, for aliases, a package key of any era
        (``/real/1.0.0``, ``/real@1.0.0``, ``real@1.0.0``, ``npm:real@1.0.0``).
        """
        if ref.startswith(("file:", "link:")):
            return None
        if _VERSION_RE.match(ref):
            return name, strip_peer_suffix(ref)
        bare = ref[len("npm:") :] if ref.startswith("npm:") else ref
        parsed_name, parsed_version = parse_spec(bare)
        if parsed_name and parsed_version:
            return parsed_name, parsed_version
        return name, strip_peer_suffix(ref)

    def expand(self, name: str, version: str) -> list[QueueItem]:
        children: list[QueueItem] = []
        for entry in self.graph.entries(name, version):
            children.extend((child, str(ref)) for child, ref in self.children_of(entry))
        return children

    def follow_workspace(self, path: str, manifest: Mapping[str, Any]) -> Step:
        importer = self.graph.importers.get(path)
        if isinstance(importer, dict):
            return Step(None, self.importer_refs(path, importer, self.dependency_sections()))
        return super().follow_workspace(path, manifest)

    def locate(self, name: str, hint: str | None) -> Step | None:
        ref = hint or self.pinned.get(name)

        if ref is not None and ref.startswith(self.LINK):
            linked = ref[len(self.LINK) :]
            importer = self.graph.importers.get(linked)
            if not isinstance(importer, dict):
                return Step(None, [])
            # Consumers of a workspace get its runtime deps, not its devDependencies
            sections = self.dependency_sections()
            return Step(None, self.importer_refs(linked, importer, sections))

        if ref is not None:
            identity = self.pinned_identity(name, ref)
            if identity is None:
                return Step(None, [])
            real_name, version = identity
            dep = self.record(real_name, version)
            if dep is not None:
                return Step(dep, self.expand(real_name, version))

        dep = self.by_name.get(name)
        if dep is None:
            return None
        return Step(dep, self.expand(dep.name, dep.version))


def build_resolver(
    graph: LockfileGraph,
    records: Mapping[str, Dependency],
    by_name: Mapping[str, Dependency],
    options: ResolveOptions,
    workspace_packages: Mapping[str, Mapping[str, Any]] | None = None,
) -> Resolver:
    """Select the resolution strategy for a lockfile format."""
    if graph.format is LockfileFormat.PNPM:
        cls: type[Resolver] = PnpmResolver
    elif graph.format is LockfileFormat.NPM:
        cls = NpmResolver
    else:
        cls = YarnResolver
    return cls(graph, records, by_name, options, workspace_packages)
