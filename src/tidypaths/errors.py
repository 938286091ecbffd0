"""
Error types raised while resolving and filtering paths.

Every error is terminal for the current computation: the engine either returns
a complete, filtered path list or raises one of these.
"""

from __future__ import annotations

from collections.abc import Sequence


class TidyPathsError(Exception):
    """Base class for all tidypaths errors."""


class ConflictingPathSourceError(TidyPathsError):
    """Explicit paths were given together with `--all`, `--git` or `--staged`."""


class PathNotFoundError(TidyPathsError):
    """A starting path does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Path not found: {path}")
        self.path: str = path


class PatternError(TidyPathsError, ValueError):
    """A glob or gitignore-style pattern is syntactically invalid."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")
        self.pattern: str = pattern
        self.reason: str = reason


class IgnoreFileError(TidyPathsError):
    """An ignore file could not be read or compiled."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Could not load ignore file {path}: {reason}")
        self.path: str = path
        self.reason: str = reason


class GitQueryError(TidyPathsError):
    """A git subprocess failed or produced output we could not parse."""

    def __init__(self, command: Sequence[str], stderr: str = "") -> None:
        cmd = " ".join(command)
        message = f"git command failed: {cmd}"
        if stderr.strip():
            message += f"\n{stderr.strip()}"
        super().__init__(message)
        self.command: list[str] = list(command)
        self.stderr: str = stderr


class StashRestoreError(TidyPathsError):
    """Unstaged changes stashed for staged mode could not be re-applied."""

    def __init__(self, patch_file: str, reason: str) -> None:
        super().__init__(
            f"Could not restore unstaged changes: {reason}\n"
            f"They are saved in {patch_file}; restore them with `git apply {patch_file}`"
        )
        self.patch_file: str = patch_file
        self.reason: str = reason


class WalkError(TidyPathsError):
    """A directory beneath a starting path could not be listed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Could not read directory {path}: {reason}")
        self.path: str = path


class ConfigError(TidyPathsError):
    """The configuration file is unreadable or has invalid values."""

    def __init__(self, path: str, messages: Sequence[str]) -> None:
        self.path: str = path
        self.messages: list[str] = list(messages)
        if len(self.messages) == 1:
            text = f"Invalid configuration file at {path}: {self.messages[0]}"
        else:
            text = f"There were {len(self.messages)} errors in the configuration file at {path}:\n"
            text += "\n".join(f"  - {m}" for m in self.messages)
        super().__init__(text)
