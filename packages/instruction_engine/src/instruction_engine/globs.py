"""Glob compilation for path-specific match patterns.

Patterns are matched against the whole repository-relative path:

- ``*`` matches any run of characters inside one segment
- ``?`` matches one character inside one segment
- ``**`` as a full segment matches zero or more segments
- ``[...]`` and ``[!...]`` are character classes
- ``{a,b}`` expands to alternatives inside one segment

A pattern may hold several comma-separated globs; it matches if any of them does.
Commas inside a character class are literal. Patterns may not contain ``..``
segments; target paths have theirs resolved before matching.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from instruction_engine.errors import InvalidGlobPatternError
from instruction_engine.paths import normalize_path

_WILDCARD_CHARS = frozenset("*?[")


@dataclass(frozen=True)
class GlobPattern:
    """A compiled match pattern."""

    pattern: str
    alternatives: tuple[re.Pattern[str], ...]
    wildcard_segments: int

    def matches(self, path: str) -> bool:
        """Return True if the repository-relative path matches any alternative."""
        normalized = normalize_path(path)
        return any(regex.fullmatch(normalized) for regex in self.alternatives)


def _split_top_level(text: str, pattern: str) -> list[str]:
    """Split on commas that are not inside a brace group or a character class."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    class_body_start: int | None = None
    for index, char in enumerate(text):
        if class_body_start is not None:
            if index == class_body_start and char in "!^":
                class_body_start += 1
            # A ']' right after the opener is a literal class member.
            elif char == "]" and index > class_body_start:
                class_body_start = None
            current.append(char)
            continue
        if char == "[":
            class_body_start = index + 1
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth < 0:
                raise InvalidGlobPatternError(pattern, "unbalanced '}'")
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    if class_body_start is not None:
        raise InvalidGlobPatternError(pattern, "unterminated character class")
    if depth != 0:
        raise InvalidGlobPatternError(pattern, "unterminated '{'")
    parts.append("".join(current))
    return parts


def _find_closing(segment: str, start: int, opener: str, closer: str) -> int:
    depth = 0
    for index in range(start, len(segment)):
        if segment[index] == opener:
            depth += 1
        elif segment[index] == closer:
            depth -= 1
            if depth == 0:
                return index
    return -1


def _translate_class(segment: str, start: int, pattern: str) -> tuple[str, int]:
    index = start + 1
    if index < len(segment) and segment[index] in "!^":
        index += 1
    # A leading ']' is a literal member of the class.
    if index < len(segment) and segment[index] == "]":
        index += 1
    end = segment.find("]", index)
    if end == -1:
        raise InvalidGlobPatternError(pattern, "unterminated character class")
    body = segment[start + 1 : end]
    # Negated classes never match the segment separator.
    if body[:1] in ("!", "^"):
        body = "^" + body[1:] + "/"
    body = body.replace("\\", "\\\\")
    return f"[{body}]", end + 1


def _translate_segment(segment: str, pattern: str) -> str:
    out: list[str] = []
    index = 0
    while index < len(segment):
        char = segment[index]
        if char == "*":
            out.append("[^/]*")
            index += 1
        elif char == "?":
            out.append("[^/]")
            index += 1
        elif char == "[":
            translated, index = _translate_class(segment, index, pattern)
            out.append(translated)
        elif char == "{":
            end = _find_closing(segment, index, "{", "}")
            if end == -1:
                raise InvalidGlobPatternError(pattern, "unterminated '{'")
            options = _split_top_level(segment[index + 1 : end], pattern)
            out.append("(?:" + "|".join(_translate_segment(opt, pattern) for opt in options) + ")")
            index = end + 1
        elif char == "}":
            raise InvalidGlobPatternError(pattern, "unbalanced '}'")
        else:
            out.append(re.escape(char))
            index += 1
    return "".join(out)


def _translate(glob: str, pattern: str) -> str:
    if ".." in glob.replace("\\", "/").split("/"):
        raise InvalidGlobPatternError(pattern, "'..' segments are not allowed")
    normalized = normalize_path(glob)
    if not normalized:
        raise InvalidGlobPatternError(pattern, "pattern is empty")
    segments = normalized.split("/")
    last = len(segments) - 1
    regex: list[str] = []
    for index, segment in enumerate(segments):
        if segment == "**":
            regex.append(".+" if index == last else "(?:[^/]+/)*")
            continue
        regex.append(_translate_segment(segment, pattern))
        if index != last:
            regex.append("/")
    return "".join(regex)


def _wildcard_segment_count(glob: str) -> int:
    return sum(
        1 for segment in normalize_path(glob).split("/") if _WILDCARD_CHARS.intersection(segment)
    )


def compile_glob(pattern: str) -> GlobPattern:
    """Compile a match pattern, raising InvalidGlobPatternError if it cannot be parsed."""
    globs = [glob.strip() for glob in _split_top_level(pattern, pattern)]
    globs = [glob for glob in globs if glob]
    if not globs:
        raise InvalidGlobPatternError(pattern, "pattern is empty")

    alternatives: list[re.Pattern[str]] = []
    for glob in globs:
        try:
            alternatives.append(re.compile(_translate(glob, pattern)))
        except re.error as exc:
            raise InvalidGlobPatternError(pattern, str(exc)) from exc

    return GlobPattern(
        pattern=pattern,
        alternatives=tuple(alternatives),
        wildcard_segments=max(_wildcard_segment_count(glob) for glob in globs),
    )


def pattern_specificity(pattern: str) -> int:
    """Return the number of wildcard segments; lower means more specific."""
    return compile_glob(pattern).wildcard_segments
