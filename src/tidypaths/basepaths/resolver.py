"""Starting paths for each selection mode, before any directory expansion."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence

from tidypaths.basepaths.git import GitRepo
from tidypaths.basepaths.mode import SelectionMode
from tidypaths.errors import ConflictingPathSourceError

logger = logging.getLogger(__name__)


def check_path_source(mode: SelectionMode, explicit_paths: Sequence[str]) -> None:
    """Explicit paths may only be combined with `SelectionMode.EXPLICIT_PATHS`."""
    if mode is not SelectionMode.EXPLICIT_PATHS and explicit_paths:
        raise ConflictingPathSourceError(
            "You cannot provide paths on the command line along with the --all, --git, or --staged flags"
        )


def resolve_starting_paths(
    mode: SelectionMode,
    explicit_paths: Sequence[str] = (),
    *,
    cwd: str | None = None,
    git: GitRepo | None = None,
) -> list[str]:
    """
    Return the paths to expand for `mode`. Explicit paths are returned verbatim;
    their existence is checked later, when they are walked.
    """
    check_path_source(mode, explicit_paths)
    workdir = cwd if cwd is not None else os.getcwd()
    resolver = _RESOLVERS[mode]
    return resolver(explicit_paths, workdir, git if git is not None else GitRepo(workdir))


def _explicit(explicit_paths: Sequence[str], cwd: str, git: GitRepo) -> list[str]:
    logger.debug("Using explicit list of starting paths: %s", list(explicit_paths))
    return list(explicit_paths)


def _all_files(explicit_paths: Sequence[str], cwd: str, git: GitRepo) -> list[str]:
    logger.info("Using %s as starting path", cwd)
    return [cwd]


def _git_modified(explicit_paths: Sequence[str], cwd: str, git: GitRepo) -> list[str]:
    logger.info("Using git modified paths as starting paths")
    return git.modified_files()


def _git_staged(explicit_paths: Sequence[str], cwd: str, git: GitRepo) -> list[str]:
    logger.info("Using git staged paths as starting paths")
    return git.staged_files()


_RESOLVERS: dict[SelectionMode, Callable[[Sequence[str], str, GitRepo], list[str]]] = {
    SelectionMode.EXPLICIT_PATHS: _explicit,
    SelectionMode.ALL_FILES: _all_files,
    SelectionMode.GIT_MODIFIED: _git_modified,
    SelectionMode.GIT_STAGED: _git_staged,
}
