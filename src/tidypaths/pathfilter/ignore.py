"""Gitignore-style ignore files, each scoped to the directory that holds it."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from pathlib import Path

import pathspec

from tidypaths.errors import IgnoreFileError


def _read_ignore_file(path: Path) -> list[str]:
    """
    Read the pattern lines of an ignore file, dropping blank lines and `#` comments.
    Raises `IgnoreFileError` if the file is missing, unreadable or not UTF-8.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise IgnoreFileError(str(path), "file is not valid UTF-8") from e
    except OSError as e:
        raise IgnoreFileError(str(path), e.strerror or str(e)) from e
    return [line for line in text.splitlines() if line.strip() and not line.lstrip().startswith("#")]


class IgnoreFileRegistry:
    """
    A set of compiled ignore files, keyed by the directory each one governs.

    A path is only checked against the ignore files whose directory contains it,
    and it is matched relative to that directory so that anchored rules like
    `/build` behave as they do in git.

    All applicable ignore files are consulted independently and any match
    excludes. A deeper ignore file does not override a shallower one, so a `!`
    rule in `sub/.gitignore` cannot re-include a path that `.gitignore` ignores.
    """

    def __init__(
        self,
        specs: dict[Path, list[pathspec.GitIgnoreSpec]] | None = None,
        files: Iterable[Path] = (),
    ) -> None:
        self._specs: dict[Path, list[pathspec.GitIgnoreSpec]] = dict(specs or {})
        self._files: list[Path] = list(files)

    @classmethod
    def load(cls, ignore_files: Iterable[str | os.PathLike[str]]) -> IgnoreFileRegistry:
        """Compile every ignore file, failing on the first one that can't be loaded."""
        specs: dict[Path, list[pathspec.GitIgnoreSpec]] = {}
        files: list[Path] = []
        for raw in ignore_files:
            path = Path(os.path.abspath(raw))
            lines = _read_ignore_file(path)
            try:
                spec = pathspec.GitIgnoreSpec.from_lines(lines)
            except (ValueError, re.error) as e:
                raise IgnoreFileError(str(path), str(e)) from e
            specs.setdefault(path.parent, []).append(spec)
            files.append(path)
        return cls(specs, files)

    @property
    def files(self) -> list[Path]:
        """The loaded ignore files, in load order."""
        return list(self._files)

    def __len__(self) -> int:
        return sum(len(specs) for specs in self._specs.values())

    def is_excluded(self, path: str | os.PathLike[str], *, is_dir: bool = False) -> bool:
        """Check whether any ignore file governing `path` excludes it."""
        target = Path(os.path.abspath(path))
        for directory, specs in self._specs.items():
            if target == directory or directory not in target.parents:
                continue
            rel = target.relative_to(directory).as_posix()
            if is_dir:
                rel += "/"
            if any(spec.match_file(rel) for spec in specs):
                return True
        return False
