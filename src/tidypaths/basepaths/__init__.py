"""
Base path resolution: which files an invocation considers at all, before any
per-check include/exclude rules are applied.

Usage::

    from tidypaths.basepaths import BasePaths, SelectionMode

    with BasePaths(SelectionMode.ALL_FILES, exclude=["vendor/"], ignore_files=[".gitignore"]) as bp:
        for path in bp.paths():
            ...
"""

from tidypaths.basepaths.engine import BasePaths
from tidypaths.basepaths.git import GitRepo, StagedStash
from tidypaths.basepaths.mode import SelectionMode
from tidypaths.basepaths.resolver import resolve_starting_paths
from tidypaths.basepaths.walker import DirectoryWalker

__all__ = [
    "BasePaths",
    "DirectoryWalker",
    "GitRepo",
    "SelectionMode",
    "StagedStash",
    "resolve_starting_paths",
]
