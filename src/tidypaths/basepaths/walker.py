"""
Expands starting paths into files, pruning excluded directories during the walk.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator

from tidypaths.errors import PathNotFoundError, WalkError
from tidypaths.pathfilter import PathFilter

logger = logging.getLogger(__name__)


class DirectoryWalker:
    """
    Walks starting paths with exclude-only filtering.

    Files are passed through unchanged. Directories are walked top-down, and each
    directory is checked before it is entered: an excluded directory is pruned
    without listing or stat'ing anything beneath it.

    Symlinked directories are not followed unless `follow_symlinks` is set, in
    which case a directory whose real path was already walked is skipped so that
    symlink cycles terminate.
    """

    def __init__(self, path_filter: PathFilter, *, follow_symlinks: bool = False) -> None:
        self._filter: PathFilter = path_filter
        self._follow_symlinks: bool = follow_symlinks

    def walk(self, starting_paths: Iterable[str]) -> list[str]:
        found: list[str] = []
        for raw_path in starting_paths:
            path = os.path.abspath(raw_path)
            if not os.path.exists(path):
                raise PathNotFoundError(str(raw_path))
            if os.path.isdir(path):
                found.extend(self._walk_directory(path))
            else:
                found.append(path)
        return found

    def _walk_directory(self, root: str) -> Iterator[str]:
        if self._filter.is_excluded(root, is_dir=True):
            logger.debug("Skipping excluded directory %s", root)
            return

        def on_error(error: OSError) -> None:
            raise WalkError(error.filename or root, error.strerror or str(error)) from error

        visited: set[str] = set()
        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error, followlinks=self._follow_symlinks):
            if self._follow_symlinks:
                real = os.path.realpath(dirpath)
                if real in visited:
                    logger.debug("Skipping already visited directory %s (%s)", dirpath, real)
                    dirnames[:] = []
                    continue
                visited.add(real)

            # Prune in place so os.walk never enters excluded directories
            kept: list[str] = []
            for name in sorted(dirnames):
                if self._filter.is_excluded(os.path.join(dirpath, name), is_dir=True):
                    logger.debug("Pruning %s", os.path.join(dirpath, name))
                    continue
                kept.append(name)
            dirnames[:] = kept

            for name in sorted(filenames):
                filepath = os.path.join(dirpath, name)
                if not self._filter.is_excluded(filepath, is_dir=False):
                    yield filepath
