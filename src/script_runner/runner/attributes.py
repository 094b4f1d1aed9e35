"""Base attribute loading from Java-style ``.properties`` files."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from pathlib import Path

from script_runner.runner.errors import AttributeFileError

logger = logging.getLogger(__name__)

_WHITESPACE = " \t\f"
_SEPARATORS = "=:"
_COMMENT_MARKERS = "#!"
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def load_attribute_file(path: str | Path | None) -> dict[str, str]:
    """Load base attributes; no path means no base attributes."""

    if path is None or not str(path):
        return {}
    attr_path = Path(path)
    if not attr_path.exists():
        raise AttributeFileError(f"Attribute file does not exist: {path}")
    try:
        text = attr_path.read_text("utf-8")
        attributes = parse_properties(text)
    except (OSError, UnicodeDecodeError, ValueError) as error:
        raise AttributeFileError(
            f"Could not read properties file: {path}, reason: {error}",
        ) from error
    logger.debug("Loaded %d base attributes from %s", len(attributes), attr_path)
    return attributes


def seed_attributes(
    *,
    core: Mapping[str, str],
    base: Mapping[str, str],
    derived: Mapping[str, str],
) -> dict[str, str]:
    """Merge attribute layers; later layers win (core < base < item-derived)."""

    return {**core, **base, **derived}


def parse_properties(text: str) -> dict[str, str]:
    """Parse ``.properties`` text into a flat mapping; later duplicates win."""

    properties: dict[str, str] = {}
    for line in _logical_lines(_LINE_BREAK.split(text)):
        key, value = _split_entry(line)
        properties[_unescape(key)] = _unescape(value)
    return properties


def _logical_lines(lines: list[str]) -> Iterator[str]:
    pending: str | None = None
    for raw_line in lines:
        line = raw_line.lstrip(_WHITESPACE)
        if pending is None and (not line or line[0] in _COMMENT_MARKERS):
            continue
        continued = _has_continuation(line)
        if continued:
            line = line[:-1]
        pending = line if pending is None else pending + line
        if not continued:
            yield pending
            pending = None
    if pending is not None:
        yield pending


def _has_continuation(line: str) -> bool:
    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def _split_entry(line: str) -> tuple[str, str]:
    index = 0
    escaped = False
    while index < len(line):
        char = line[index]
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char in _SEPARATORS or char in _WHITESPACE:
            break
        index += 1

    key = line[:index]
    rest = line[index:].lstrip(_WHITESPACE)
    if rest and rest[0] in _SEPARATORS:
        rest = rest[1:].lstrip(_WHITESPACE)
    return key, rest


def _unescape(value: str) -> str:
    if "\\" not in value:
        return value

    chars: list[str] = []
    index = 0
    while index < len(value):
        char = value[index]
        index += 1
        if char != "\\":
            chars.append(char)
            continue
        if index >= len(value):
            break
        char = value[index]
        index += 1
        if char == "u":
            digits = value[index : index + 4]
            if len(digits) != 4 or not set(digits) <= _HEX_DIGITS:
                raise ValueError("Malformed \\uxxxx encoding.")
            chars.append(chr(int(digits, 16)))
            index += 4
            continue
        chars.append(_ESCAPES.get(char, char))
    return "".join(chars)
