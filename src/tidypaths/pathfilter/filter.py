"""
PathFilter: include/exclude patterns layered on top of ignore files.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from pathlib import Path

from tidypaths.pathfilter.ignore import IgnoreFileRegistry
from tidypaths.pathfilter.matcher import match


class PathFilter:
    """
    Filters path lists with exclude rules (ignore files and exclude patterns)
    and, optionally, include patterns.

    Include and exclude patterns are matched against each path relative to
    `root`. A path outside `root` is matched as its absolute POSIX path without
    the leading `/`. Exclusion always wins over inclusion.
    """

    def __init__(
        self,
        include: Sequence[str] = (),
        exclude: Sequence[str] = (),
        ignore: IgnoreFileRegistry | None = None,
        root: str | os.PathLike[str] | None = None,
    ) -> None:
        self._include: tuple[str, ...] = tuple(include)
        self._exclude: tuple[str, ...] = tuple(exclude)
        self._ignore: IgnoreFileRegistry = ignore if ignore is not None else IgnoreFileRegistry()
        self._root: Path = Path(os.path.abspath(root if root is not None else os.getcwd()))

    @classmethod
    def from_config(
        cls,
        include: Sequence[str] = (),
        exclude: Sequence[str] = (),
        ignore_files: Iterable[str | os.PathLike[str]] = (),
        root: str | os.PathLike[str] | None = None,
    ) -> PathFilter:
        """Build a filter, loading and compiling the given ignore files."""
        return cls(include, exclude, IgnoreFileRegistry.load(ignore_files), root)

    @property
    def include(self) -> tuple[str, ...]:
        return self._include

    @property
    def exclude(self) -> tuple[str, ...]:
        return self._exclude

    @property
    def ignore(self) -> IgnoreFileRegistry:
        return self._ignore

    @property
    def root(self) -> Path:
        return self._root

    def apply_exclude_rules(self, paths: Iterable[str]) -> list[str]:
        """Drop every path excluded by an ignore file or an exclude pattern."""
        return [p for p in paths if not self.is_excluded(p)]

    def apply_all_rules(self, paths: Iterable[str]) -> list[str]:
        """Apply exclude rules, then keep only paths matching an include pattern (if any)."""
        return [p for p in self.apply_exclude_rules(paths) if self.is_included(p)]

    def is_excluded(self, path: str | os.PathLike[str], *, is_dir: bool | None = None) -> bool:
        """
        Check a single path against the exclude rules. When `is_dir` is `None` the
        filesystem is asked whether the path is a directory.
        """
        if is_dir is None:
            is_dir = os.path.isdir(path)
        if self._ignore.is_excluded(path, is_dir=is_dir):
            return True
        rel = self._relative(path)
        if rel == ".":
            return False
        return any(match(pattern, rel, is_dir=is_dir) for pattern in self._exclude)

    def is_included(self, path: str | os.PathLike[str], *, is_dir: bool | None = None) -> bool:
        """Check a single path against the include patterns. No patterns means everything."""
        if not self._include:
            return True
        if is_dir is None:
            is_dir = os.path.isdir(path)
        rel = self._relative(path)
        return any(match(pattern, rel, is_dir=is_dir) for pattern in self._include)

    def _relative(self, path: str | os.PathLike[str]) -> str:
        absolute = Path(os.path.abspath(path))
        try:
            return absolute.relative_to(self._root).as_posix()
        except ValueError:
            return absolute.as_posix().lstrip("/")
