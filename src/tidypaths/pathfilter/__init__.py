"""
Pattern matching and path filtering with gitignore-compatible semantics.

Usage::

    from tidypaths.pathfilter import PathFilter

    path_filter = PathFilter.from_config(
        include=["*.py"],
        exclude=["build/", "*.tmp"],
        ignore_files=[".gitignore"],
    )
    kept = path_filter.apply_all_rules(paths)
"""

from tidypaths.pathfilter.filter import PathFilter
from tidypaths.pathfilter.ignore import IgnoreFileRegistry
from tidypaths.pathfilter.matcher import expand_braces, match

__all__ = [
    "IgnoreFileRegistry",
    "PathFilter",
    "expand_braces",
    "match",
]
