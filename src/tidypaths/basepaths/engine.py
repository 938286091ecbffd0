"""
BasePaths: the sorted, deduplicated list of candidate files for one invocation.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Sequence
from types import TracebackType

from tidypaths.basepaths.git import GitRepo, StagedStash
from tidypaths.basepaths.mode import SelectionMode
from tidypaths.basepaths.resolver import check_path_source, resolve_starting_paths
from tidypaths.basepaths.walker import DirectoryWalker
from tidypaths.pathfilter import PathFilter

logger = logging.getLogger(__name__)


class BasePaths:
    """
    Resolves, walks and filters the starting paths for a selection mode.

    The result is computed once, on the first call to `paths()`, and every later
    call returns the same list even if the filesystem has changed. Concurrent
    first callers wait for a single computation.

    In `SelectionMode.GIT_STAGED` the working tree is switched to the staged
    content before paths are resolved. Use the instance as a context manager, or
    call `unstash_if_needed()` when done, to restore unstaged changes.
    """

    def __init__(
        self,
        mode: SelectionMode,
        cli_paths: Sequence[str] = (),
        exclude: Sequence[str] = (),
        ignore_files: Sequence[str | os.PathLike[str]] = (),
        *,
        root: str | os.PathLike[str] | None = None,
        git: GitRepo | None = None,
        follow_symlinks: bool = False,
    ) -> None:
        check_path_source(mode, cli_paths)
        self._mode: SelectionMode = mode
        self._cli_paths: list[str] = list(cli_paths)
        self._cwd: str = os.getcwd()
        self._filter: PathFilter = PathFilter.from_config(exclude=exclude, ignore_files=ignore_files, root=root)
        self._git: GitRepo = git if git is not None else GitRepo(self._cwd)
        self._walker: DirectoryWalker = DirectoryWalker(self._filter, follow_symlinks=follow_symlinks)
        self._stash: StagedStash | None = None
        self._paths: list[str] | None = None
        self._lock: threading.Lock = threading.Lock()

    @property
    def mode(self) -> SelectionMode:
        return self._mode

    @property
    def path_filter(self) -> PathFilter:
        return self._filter

    def paths(self) -> list[str]:
        """Return the sorted, deduplicated base paths, computing them on first use."""
        with self._lock:
            if self._paths is None:
                self._paths = self._compute()
            return list(self._paths)

    def _compute(self) -> list[str]:
        if self._mode is SelectionMode.GIT_STAGED:
            self._stash = StagedStash(self._git)
            self._stash.stash()
        try:
            start = resolve_starting_paths(self._mode, self._cli_paths, cwd=self._cwd, git=self._git)
            found = self._walker.walk(start)
            filtered = self._filter.apply_exclude_rules(found)
        except BaseException:
            self.unstash_if_needed()
            raise
        # The ignore files are configuration, not candidates for checking
        ignore_files = {str(p) for p in self._filter.ignore.files}
        paths = sorted({p for p in filtered if p not in ignore_files})
        logger.info("Found %d base paths", len(paths))
        return paths

    def unstash_if_needed(self) -> None:
        """Restore unstaged changes stashed for staged mode. Safe to call more than once."""
        if self._stash is not None:
            self._stash.unstash()

    def __enter__(self) -> BasePaths:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.unstash_if_needed()
