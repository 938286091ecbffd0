"""
tidypaths: resolves and filters the files that tidy and lint checks run on.
"""

from tidypaths.basepaths import BasePaths, SelectionMode
from tidypaths.pathfilter import IgnoreFileRegistry, PathFilter

__all__ = [
    "BasePaths",
    "IgnoreFileRegistry",
    "PathFilter",
    "SelectionMode",
]
