"""
Default exclude patterns, used when a configuration does not set `exclude`.

These patterns use gitignore syntax. Directory patterns end with `/`.
"""

from __future__ import annotations

# Version control metadata directories
DEFAULT_EXCLUDES: list[str] = [
    ".git/",
    ".hg/",
    ".svn/",
]

# A directory containing one of these is the root of a checkout.
VCS_DIRS: list[str] = [".git", ".hg", ".svn"]
