"""Path selection mode."""

from __future__ import annotations

from enum import Enum


class SelectionMode(str, Enum):
    """
    Where the starting paths for an invocation come from.

    Attributes
    ----------
    EXPLICIT_PATHS
        Paths given on the command line.
    ALL_FILES
        The current working directory and everything below it.
    GIT_MODIFIED
        Files modified relative to the last commit, plus untracked files.
    GIT_STAGED
        Files staged for the next commit, checked with their staged content.
    """

    EXPLICIT_PATHS = "explicit"
    ALL_FILES = "all"
    GIT_MODIFIED = "git"
    GIT_STAGED = "staged"
