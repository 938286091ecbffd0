"""
Check definitions and per-check path planning.

A check is one configured tidier or linter. Each check layers its own
include/exclude/ignore rules on top of the base paths to get the files it would
be run on.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from tidypaths.pathfilter import PathFilter


class FilterType(str, Enum):
    """What a check does: reformat files, report problems, or both."""

    TIDY = "tidy"
    LINT = "lint"
    BOTH = "both"

    @classmethod
    def parse(cls, value: str) -> FilterType:
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(repr(t.value) for t in cls)
            raise ValueError(f"{value!r} is not a valid check type (expected one of {choices})") from None


@dataclass
class CheckConfig:
    """
    A single named check from the configuration file.

    Commands are run once per file (or once per directory when `on_dir` is set).
    Servers are long-running processes reached on `port`.
    """

    name: str
    type: FilterType
    cmd: list[str]
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    ignore: list[str] = field(default_factory=list)
    args: list[str] = field(default_factory=list)
    on_dir: bool = False
    path_flag: str = ""
    ok_exit_codes: list[int] = field(default_factory=lambda: [0])
    port: int | None = None

    @property
    def is_server(self) -> bool:
        return self.port is not None

    def runs_for(self, action: FilterType) -> bool:
        """True if this check should run for `action` (`TIDY` or `LINT`)."""
        return self.type is FilterType.BOTH or self.type is action

    def path_filter(self, root: str | os.PathLike[str] | None = None) -> PathFilter:
        return PathFilter.from_config(self.include, self.exclude, self.ignore, root)


def plan_checks(
    checks: Iterable[CheckConfig],
    base_paths: Sequence[str],
    action: FilterType,
    root: str | os.PathLike[str] | None = None,
) -> dict[str, list[str]]:
    """
    Map each check that runs for `action` to the paths it would operate on, in
    configuration order. `on_dir` checks get the directories holding those files.
    """
    plan: dict[str, list[str]] = {}
    for check in checks:
        if not check.runs_for(action):
            continue
        paths = check.path_filter(root).apply_all_rules(base_paths)
        if check.on_dir:
            paths = sorted({str(Path(p).parent) for p in paths})
        plan[check.name] = paths
    return plan
