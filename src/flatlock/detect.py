"""Lockfile format detection.

Content is the primary signal: every probe decodes the content and inspects
the decoded structure, so a package name that happens to contain a marker such
as ``__metadata`` or ``lockfileVersion`` cannot change the outcome. The path is
consulted only when no content is available.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import cached_property
from pathlib import PurePath
from typing import Any

from .errors import DetectionError, ParseError
from .parsers import package_lock, yarn_berry_lock, yarn_syntax

logger = logging.getLogger(__name__)


class LockfileFormat(str, enum.Enum):
    NPM = "npm"
    PNPM = "pnpm"
    YARN_CLASSIC = "yarn-classic"
    YARN_BERRY = "yarn-berry"


@dataclass(frozen=True)
class Detection:
    """Detected format together with the document decoded while probing."""

    format: LockfileFormat
    document: Any


class _Candidate:
    """Lazily decoded views of the content, shared between probes."""

    def __init__(self, content: str) -> None:
        self.content = content

    @cached_property
    def json_document(self) -> Any:
        try:
            return package_lock.load(self.content)
        except ParseError:
            return None

    @cached_property
    def yaml_document(self) -> Any:
        try:
            return yarn_berry_lock.load(self.content)
        except ParseError:
            return None

    @cached_property
    def yarn_document(self) -> Any:
        try:
            return yarn_syntax.parse_syntax(self.content)
        except ParseError:
            return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _probe_npm(candidate: _Candidate) -> Any:
    doc = candidate.json_document
    if isinstance(doc, dict) and _is_number(doc.get("lockfileVersion")):
        return doc
    return None


def _probe_yarn_berry(candidate: _Candidate) -> Any:
    doc = candidate.yaml_document
    if isinstance(doc, dict):
        metadata = doc.get(yarn_berry_lock.METADATA_KEY)
        if isinstance(metadata, dict) and "version" in metadata:
            return doc
    return None


def _probe_pnpm(candidate: _Candidate) -> Any:
    doc = candidate.yaml_document
    if (
        isinstance(doc, dict)
        and ("lockfileVersion" in doc or "shrinkwrapVersion" in doc)
        and yarn_berry_lock.METADATA_KEY not in doc
    ):
        return doc
    return None


def _probe_yarn_classic(candidate: _Candidate) -> Any:
    doc = candidate.yarn_document
    if (
        isinstance(doc, dict)
        and yarn_berry_lock.METADATA_KEY not in doc
        and any(isinstance(entry, dict) for entry in doc.values())
    ):
        return doc
    return None


# Ordered decision table; first match wins.
_CONTENT_PROBES: tuple[tuple[LockfileFormat, Callable[[_Candidate], Any]], ...] = (
    (LockfileFormat.NPM, _probe_npm),
    (LockfileFormat.YARN_BERRY, _probe_yarn_berry),
    (LockfileFormat.PNPM, _probe_pnpm),
    (LockfileFormat.YARN_CLASSIC, _probe_yarn_classic),
)

_PATH_HINTS: tuple[tuple[str, LockfileFormat], ...] = (
    ("package-lock.json", LockfileFormat.NPM),
    ("npm-shrinkwrap.json", LockfileFormat.NPM),
    ("pnpm-lock.yaml", LockfileFormat.PNPM),
    ("shrinkwrap.yaml", LockfileFormat.PNPM),
    # Without content, classic is the historical default for yarn.lock
    ("yarn.lock", LockfileFormat.YARN_CLASSIC),
)

LOCKFILE_NAMES = frozenset(name for name, _ in _PATH_HINTS)


def coerce_format(value: LockfileFormat | str) -> LockfileFormat:
    """Accept a LockfileFormat or its string value."""
    try:
        return LockfileFormat(value)
    except ValueError as exc:
        known = ", ".join(f.value for f in LockfileFormat)
        raise DetectionError(f"Unknown lockfile format '{value}'. Known formats: {known}") from exc


def sniff(content: str, path: str | PurePath | None = None) -> Detection:
    """Detect the format of ``content`` and return it with the decoded document.

    ``path`` only labels log and error messages; it never affects the result.

    Raises:
        DetectionError: if no format's structure matches.
    """
    candidate = _Candidate(content)
    for fmt, probe in _CONTENT_PROBES:
        document = probe(candidate)
        if document is not None:
            logger.debug("Detected %s lockfile from content%s", fmt.value, f" ({path})" if path else "")
            return Detection(format=fmt, document=document)
    where = f" {path}" if path else ""
    raise DetectionError(f"Unable to detect lockfile type{where}: content does not match any known format")


def detect_from_path(path: str | PurePath) -> LockfileFormat:
    """Guess the format from a lockfile path alone."""
    name = PurePath(path).name
    for suffix, fmt in _PATH_HINTS:
        if name.endswith(suffix):
            return fmt
    raise DetectionError(f"Unable to detect lockfile type from path: {path}")


def detect_format(content: str | None = None, path: str | PurePath | None = None) -> LockfileFormat:
    """Return the lockfile format of ``content``, or of ``path`` when content is absent.

    Content that matches no format is an error even when the path looks like a
    lockfile; the path never overrides what the content says.
    """
    if content:
        return sniff(content).format
    if path:
        return detect_from_path(path)
    raise DetectionError("Unable to detect lockfile type: no content or path given")
