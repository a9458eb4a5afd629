#!/usr/bin/env python3
"""Local CLI entrypoint to list the dependencies recorded in lockfiles.

Usage:
  python scripts/flatlock.py LOCKFILE [--workspace packages/foo] [--workspace-package packages/bar]
                               [--dev] [--peer] [--strict]
  python scripts/flatlock.py --root .

With a single lockfile, prints its dependencies as JSON. With ``--workspace``,
prints the transitive dependencies of that workspace, reading its
package.json next to the lockfile. Sibling workspaces (those the lockfile
records, plus any ``--workspace-package`` directories) are read the same way so
their dependencies are followed. With ``--root``, prints every lockfile
found under the directory.

Flags default from FLATLOCK_DEV, FLATLOCK_PEER and FLATLOCK_STRICT.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from flatlock.config import env_flag
from flatlock.core import scan_repository
from flatlock.depset import DependencySet
from flatlock.errors import FlatlockError
from flatlock.parsers.package_json import load_manifest, read_workspace_manifests


def _flag(explicit: bool, env_name: str) -> bool:
    # Explicit argument > environment variable > default
    return True if explicit else env_flag(env_name)


def _dump(depset: DependencySet) -> list[dict]:
    return [dep.to_dict() for dep in depset]


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("lockfile", type=Path, nargs="?")
    parser.add_argument("--root", type=Path, default=None)
    parser.add_argument("--workspace", type=str, default=None)
    parser.add_argument("--workspace-package", action="append", default=[])
    parser.add_argument("--dev", action="store_true")
    parser.add_argument("--peer", action="store_true")
    parser.add_argument("--no-optional", action="store_true")
    parser.add_argument("--strict", action="store_true")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.root is None and args.lockfile is None:
        parser.error("either LOCKFILE or --root is required")

    try:
        if args.root is not None:
            report = {path: _dump(depset) for path, depset in scan_repository(args.root).items()}
        else:
            depset = DependencySet.from_path(args.lockfile)
            if args.workspace is not None:
                workspace_dir = args.lockfile.parent / args.workspace
                manifest = load_manifest(workspace_dir / "package.json")
                siblings = sorted(set(depset.workspace_paths()) | set(args.workspace_package))
                workspace_packages = read_workspace_manifests(siblings, args.lockfile.parent)
                depset = depset.dependencies_of(
                    manifest,
                    workspace_path=args.workspace,
                    dev=_flag(args.dev, "FLATLOCK_DEV"),
                    optional=not args.no_optional,
                    peer=_flag(args.peer, "FLATLOCK_PEER"),
                    strict=_flag(args.strict, "FLATLOCK_STRICT"),
                    workspace_packages=workspace_packages,
                )
            report = _dump(depset)
    except (FlatlockError, OSError) as exc:
        print(f"flatlock: {exc}", file=sys.stderr)
        return 2

    print(json.dumps(report, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
