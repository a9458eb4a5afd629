"""Reader for the yarn v1 lockfile syntax.

yarn.lock (classic) is not YAML. Each entry is a header listing the ranges it
satisfies, followed by indented ``key value`` lines and nested sections::

    # yarn lockfile v1

    "@babel/code-frame@^7.0.0", "@babel/code-frame@^7.10.4":
      version "7.12.13"
      resolved "https://registry.yarnpkg.com/@babel/code-frame/-/code-frame-7.12.13.tgz#dcfc826b"
      integrity sha512-HV1Cm0Q3ZrpCR93tkWOYiuYIgLxZXZFVG2VgK+MBWjUqZTundupbfx2aXarXuw5Ko5aMcjtJgbSs4vUGBS5v6g==
      dependencies:
        "@babel/highlight" "^7.12.13"

Headers keep their comma-joined form (quotes removed) as the mapping key.
"""

from __future__ import annotations

import json
from typing import Any

from ..errors import ParseError

_CONFLICT_MARKERS = ("<<<<<<<", "=======", ">>>>>>>")


def _unquote(token: str, lineno: int) -> str:
    try:
        value = json.loads(token)
    except json.JSONDecodeError as exc:
        raise ParseError(f"yarn.lock line {lineno}: invalid quoted string {token!r}") from exc
    if not isinstance(value, str):
        raise ParseError(f"yarn.lock line {lineno}: expected a string, got {token!r}")
    return value


def _read_token(text: str, start: int, lineno: int) -> tuple[str, int, bool]:
    """Read one quoted or bare token; return (value, end index, was_quoted)."""
    if text.startswith('"', start):
        index = start + 1
        while index < len(text):
            char = text[index]
            if char == "\\":
                index += 2
                continue
            if char == '"':
                return _unquote(text[start : index + 1], lineno), index + 1, True
            index += 1
        raise ParseError(f"yarn.lock line {lineno}: unterminated string")

    index = start
    while index < len(text) and not text[index].isspace() and text[index] not in ',"':
        index += 1
    return text[start:index], index, False


def _split_header(text: str, lineno: int) -> str:
    keys: list[str] = []
    index = 0
    while index < len(text):
        while index < len(text) and text[index] == " ":
            index += 1
        token, index, quoted = _read_token(text, index, lineno)
        if not token and not quoted:
            raise ParseError(f"yarn.lock line {lineno}: empty key in header")
        keys.append(token)
        while index < len(text) and text[index] == " ":
            index += 1
        if index < len(text):
            if text[index] != ",":
                raise ParseError(f"yarn.lock line {lineno}: expected ',' between keys")
            index += 1
    return ", ".join(keys)


def _parse_value(text: str, lineno: int) -> str | bool:
    if text.startswith('"'):
        value, end, _ = _read_token(text, 0, lineno)
        if text[end:].strip():
            raise ParseError(f"yarn.lock line {lineno}: trailing content after value")
        return value
    if text == "true":
        return True
    if text == "false":
        return False
    return text


def _parse_line(text: str, lineno: int) -> tuple[str, Any]:
    """Return (key, value) where value is None when the line opens a section."""
    if text.endswith(":"):
        return _split_header(text[:-1].rstrip(), lineno), None

    key, end, quoted = _read_token(text, 0, lineno)
    if not quoted and (not key or key.endswith(":")):
        raise ParseError(f"yarn.lock line {lineno}: unexpected ':' in {text!r}")
    rest = text[end:].strip()
    if not rest:
        raise ParseError(f"yarn.lock line {lineno}: missing value for {key!r}")
    return key, _parse_value(rest, lineno)


def parse_syntax(content: str) -> dict[str, Any]:
    """Parse yarn v1 lockfile text into nested dicts.

    Raises ParseError on merge-conflict markers, tabs, inconsistent
    indentation and malformed lines.
    """
    root: dict[str, Any] = {}
    # Each frame: [indent of the owning header, mapping, indent of its children]
    stack: list[list[Any]] = [[-1, root, None]]

    for lineno, raw in enumerate(content.splitlines(), start=1):
        line = raw.rstrip()
        stripped = line.lstrip(" ")
        if not stripped or stripped.startswith("#"):
            continue
        if line.startswith(_CONFLICT_MARKERS):
            raise ParseError(f"yarn.lock line {lineno}: unresolved merge conflict")
        if stripped.startswith("\t"):
            raise ParseError(f"yarn.lock line {lineno}: tabs are not allowed for indentation")

        indent = len(line) - len(stripped)
        while indent <= stack[-1][0]:
            stack.pop()

        frame = stack[-1]
        if frame[2] is None:
            frame[2] = indent
        elif frame[2] != indent:
            raise ParseError(f"yarn.lock line {lineno}: inconsistent indentation")

        key, value = _parse_line(stripped, lineno)
        if value is None:
            child: dict[str, Any] = {}
            frame[1][key] = child
            stack.append([indent, child, None])
        else:
            frame[1][key] = value

    return root
