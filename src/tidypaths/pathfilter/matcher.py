"""
Glob and gitignore-style pattern matching using pathspec.

Patterns use gitignore wildmatch syntax (`*`, `?`, `[...]`, `**`, trailing `/`
for directories, leading `/` to anchor) extended with `{a,b}` brace
alternation, which is expanded before the pattern is compiled.
"""

from __future__ import annotations

import re
from functools import lru_cache

import pathspec

from tidypaths.errors import PatternError


def match(pattern: str, path: str, *, is_dir: bool = False) -> bool:
    """
    Check whether a relative POSIX `path` matches `pattern`.

    Directory-only patterns (ending in `/`) match a directory itself only when
    `is_dir` is true; they always match paths beneath that directory.
    Raises `PatternError` if the pattern is invalid.
    """
    spec = compile_pattern(pattern)
    candidate = path + "/" if is_dir and not path.endswith("/") else path
    return spec.match_file(candidate)


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> pathspec.GitIgnoreSpec:
    """Compile a single pattern (after brace expansion) into a `GitIgnoreSpec`."""
    alternatives = expand_braces(pattern)
    for alternative in alternatives:
        _check_syntax(alternative, pattern)
    try:
        return pathspec.GitIgnoreSpec.from_lines(alternatives)
    except (ValueError, re.error) as e:
        raise PatternError(pattern, str(e)) from e


def _check_syntax(pattern: str, original: str) -> None:
    """
    Reject patterns pathspec would silently compile into something that never
    matches: an empty path segment (`a//b`) or an unclosed `[` class.
    """
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "\\":
            i += 2
            continue
        if c == "/" and pattern.startswith("//", i):
            raise PatternError(original, "empty path segment")
        if c == "[":
            j = i + 1
            if j < len(pattern) and pattern[j] in "!^":
                j += 1
            # A leading `]` is part of the class
            if j < len(pattern) and pattern[j] == "]":
                j += 1
            close = pattern.find("]", j)
            if close == -1:
                raise PatternError(original, "unclosed '['")
            i = close + 1
            continue
        i += 1


def expand_braces(pattern: str) -> list[str]:
    """
    Expand `{a,b}` alternation into a list of plain patterns.

    Groups may nest and a pattern may hold several groups. A group with no
    top-level comma is kept literally, as shells do. Backslash-escaped braces
    are literal.
    """
    return _expand(pattern, pattern)


def _expand(pattern: str, original: str) -> list[str]:
    start = _find_group_start(pattern, original)
    if start is None:
        return [pattern]

    end, commas = _find_group_end(pattern, start, original)
    prefix = pattern[:start]
    suffix_expansions = _expand(pattern[end + 1 :], original)

    results: list[str] = []
    if not commas:
        # Literal group like `{x}`
        for inner in _expand(pattern[start + 1 : end], original):
            for suffix in suffix_expansions:
                results.append(prefix + "{" + inner + "}" + suffix)
    else:
        bounds = [start, *commas, end]
        for lo, hi in zip(bounds, bounds[1:]):
            for alternative in _expand(pattern[lo + 1 : hi], original):
                for suffix in suffix_expansions:
                    results.append(prefix + alternative + suffix)

    # Preserve order, drop repeats like `{a,a}`
    return list(dict.fromkeys(results))


def _find_group_start(pattern: str, original: str) -> int | None:
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "\\":
            i += 2
            continue
        if c == "{":
            return i
        if c == "}":
            raise PatternError(original, "unbalanced '}'")
        i += 1
    return None


def _find_group_end(pattern: str, start: int, original: str) -> tuple[int, list[int]]:
    depth = 0
    commas: list[int] = []
    i = start
    while i < len(pattern):
        c = pattern[i]
        if c == "\\":
            i += 2
            continue
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                return i, commas
        elif c == "," and depth == 1:
            commas.append(i)
        i += 1
    raise PatternError(original, "unbalanced '{'")
