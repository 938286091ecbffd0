"""
TOML-based config file loading for tidypaths.

Searches for `tidypaths.toml`, `.tidypaths.toml`, or `pyproject.toml [tool.tidypaths]`
walking up from the current directory, stopping at the root of the checkout.
The config supplies the global exclude patterns and ignore files, plus one table
per check under `[commands.NAME]` or `[servers.NAME]`.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]

from tidypaths.checks import CheckConfig, FilterType
from tidypaths.errors import ConfigError
from tidypaths.pathfilter.defaults import DEFAULT_EXCLUDES, VCS_DIRS

logger = logging.getLogger(__name__)


@dataclass
class TidyPathsConfig:
    """
    Parsed config. `exclude=None` means use `DEFAULT_EXCLUDES`; providing a list
    replaces them entirely. Ignore file paths are absolute.
    """

    exclude: list[str] | None = None
    extend_exclude: list[str] = field(default_factory=list)
    ignore: list[str] = field(default_factory=list)
    checks: list[CheckConfig] = field(default_factory=list)
    path: Path | None = None

    @property
    def effective_exclude(self) -> list[str]:
        """Combined exclude patterns: defaults (or `exclude`) + `extend_exclude`."""
        base = self.exclude if self.exclude is not None else list(DEFAULT_EXCLUDES)
        return base + self.extend_exclude

    @property
    def root(self) -> Path:
        """Directory patterns are relative to: the config file's directory, else the cwd."""
        if self.path is not None:
            return self.path.parent
        return Path.cwd()

    def check(self, name: str) -> CheckConfig | None:
        for check in self.checks:
            if check.name == name:
                return check
        return None


# Config file search order (first match wins within each directory level)
_CONFIG_FILENAMES = ["tidypaths.toml", ".tidypaths.toml", "pyproject.toml"]

_TOP_LEVEL_KEYS = {"exclude", "extend_exclude", "ignore", "commands", "servers"}

_CHECK_KEYS = {
    "type",
    "include",
    "exclude",
    "ignore",
    "cmd",
    "args",
    "on_dir",
    "path_flag",
    "ok_exit_codes",
    "port",
}


def is_checkout_root(directory: Path) -> bool:
    return any((directory / vcs).exists() for vcs in VCS_DIRS)


def find_config_file(start_dir: Path) -> Path | None:
    """
    Walk up from `start_dir` looking for a config file. Returns the first found,
    or `None`. The search stops after the checkout root (a directory containing
    `.git`, `.hg` or `.svn`). Search order per directory: `tidypaths.toml` >
    `.tidypaths.toml` > `pyproject.toml` (only if it has `[tool.tidypaths]`).
    """
    current = start_dir.resolve()
    while True:
        for filename in _CONFIG_FILENAMES:
            candidate = current / filename
            if candidate.is_file():
                if filename == "pyproject.toml":
                    # Only use pyproject.toml if it has [tool.tidypaths]
                    if _pyproject_has_tidypaths_section(candidate):
                        return candidate
                else:
                    return candidate
        if is_checkout_root(current):
            break
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def _pyproject_has_tidypaths_section(path: Path) -> bool:
    """Check if a pyproject.toml has a [tool.tidypaths] section."""
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
        return "tidypaths" in data.get("tool", {})
    except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError):
        return False


def load_config(config_path: Path) -> TidyPathsConfig:
    """
    Load a `TidyPathsConfig` from a TOML file. Supports standalone
    `tidypaths.toml` / `.tidypaths.toml` and `pyproject.toml` (extracts
    `[tool.tidypaths]`). All problems are reported together in one `ConfigError`.
    """
    config_path = Path(os.path.abspath(config_path))
    logger.info("Loading config from %s", config_path)
    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(str(config_path), [e.strerror or str(e)]) from e
    except UnicodeDecodeError as e:
        raise ConfigError(str(config_path), ["file is not valid UTF-8"]) from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(str(config_path), [f"invalid TOML: {e}"]) from e

    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("tidypaths", {})

    return _parse_config_data(data, config_path)


def _parse_config_data(data: dict[str, Any], config_path: Path) -> TidyPathsConfig:
    """Validate the TOML table and build a `TidyPathsConfig`, collecting every error."""
    msgs: list[str] = []
    config_dir = config_path.parent
    table = _snake_keys(data)

    for key in sorted(set(table) - _TOP_LEVEL_KEYS):
        msgs.append(f"Unknown top-level key {key!r}")

    config = TidyPathsConfig(path=config_path)
    if "exclude" in table:
        config.exclude = _get_string_list("global", table, "exclude", msgs)
    config.extend_exclude = _get_string_list("global", table, "extend_exclude", msgs)
    config.ignore = [str(config_dir / p) for p in _get_string_list("global", table, "ignore", msgs)]

    if "commands" not in table and "servers" not in table:
        msgs.append("You must define at least one [commands.NAME] or [servers.NAME] table")

    for section in ("commands", "servers"):
        if section not in table:
            continue
        raw = table[section]
        if not isinstance(raw, dict):
            msgs.append(f"The {section} key must be a table of named checks ([{section}.NAME])")
            continue
        for name, check_table in cast(dict[str, Any], raw).items():
            if not isinstance(check_table, dict):
                msgs.append(f"The {section}.{name} entry must be a table")
                continue
            check_keys = _snake_keys(cast(dict[str, Any], check_table))
            check = _parse_check(name, check_keys, section == "servers", config_dir, msgs)
            if check is not None:
                logger.debug("Found %s %s", section[:-1], name)
                config.checks.append(check)

    if msgs:
        raise ConfigError(str(config_path), msgs)
    return config


def _parse_check(
    name: str, table: dict[str, Any], is_server: bool, config_dir: Path, msgs: list[str]
) -> CheckConfig | None:
    start = len(msgs)
    for key in sorted(set(table) - _CHECK_KEYS):
        msgs.append(f"Unknown key {key!r} in {name}")

    check_type = FilterType.BOTH
    raw_type = _get_string(name, table, "type", msgs)
    if "type" not in table:
        msgs.append(f"The {name}.type key is required")
    elif isinstance(table["type"], str):
        try:
            check_type = FilterType.parse(raw_type)
        except ValueError as e:
            msgs.append(f"The {name}.type key is invalid: {e}")

    cmd = _get_string_list(name, table, "cmd", msgs)
    if "cmd" not in table:
        msgs.append(f"The {name}.cmd key is required")

    port: int | None = None
    if is_server:
        if "port" not in table:
            msgs.append(f"The {name}.port key is required for servers")
        else:
            port = _get_int(name, table, "port", msgs)
    elif "port" in table:
        msgs.append(f"The {name}.port key is only valid for servers")

    check = CheckConfig(
        name=name,
        type=check_type,
        cmd=cmd,
        include=_get_string_list(name, table, "include", msgs),
        exclude=_get_string_list(name, table, "exclude", msgs),
        ignore=[str(config_dir / p) for p in _get_string_list(name, table, "ignore", msgs)],
        args=[a.replace("$CONFIG_DIR", str(config_dir)) for a in _get_string_list(name, table, "args", msgs)],
        on_dir=_get_bool(name, table, "on_dir", msgs),
        path_flag=_get_string(name, table, "path_flag", msgs),
        ok_exit_codes=_get_int_list(name, table, "ok_exit_codes", msgs) or [0],
        port=port,
    )
    return check if len(msgs) == start else None


def _snake_keys(table: dict[str, Any]) -> dict[str, Any]:
    """Map TOML kebab-case keys to Python snake_case."""
    return {key.replace("-", "_"): value for key, value in table.items()}


def _type_name(value: object) -> str:
    return type(value).__name__


def _get_string(name: str, table: dict[str, Any], key: str, msgs: list[str]) -> str:
    if key not in table:
        return ""
    raw = table[key]
    if isinstance(raw, str):
        return raw
    msgs.append(f"The {name}.{key} key must be a string, not a {_type_name(raw)}")
    return ""


def _get_string_list(name: str, table: dict[str, Any], key: str, msgs: list[str]) -> list[str]:
    """A string or an array of strings; a lone string becomes a one-element list."""
    if key not in table:
        return []
    raw = table[key]
    if isinstance(raw, str):
        return [raw]
    if isinstance(raw, list) and all(isinstance(v, str) for v in cast(list[Any], raw)):
        return list(cast(list[str], raw))
    msgs.append(f"The {name}.{key} key must be a string or array of strings, not a {_type_name(raw)}")
    return []


def _get_bool(name: str, table: dict[str, Any], key: str, msgs: list[str]) -> bool:
    if key not in table:
        return False
    raw = table[key]
    if isinstance(raw, bool):
        return raw
    msgs.append(f"The {name}.{key} key must be a boolean, not a {_type_name(raw)}")
    return False


def _get_int(name: str, table: dict[str, Any], key: str, msgs: list[str]) -> int:
    raw = table.get(key, 0)
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    msgs.append(f"The {name}.{key} key must be an integer, not a {_type_name(raw)}")
    return 0


def _get_int_list(name: str, table: dict[str, Any], key: str, msgs: list[str]) -> list[int]:
    """An integer or an array of integers."""
    if key not in table:
        return []
    raw = table[key]
    if isinstance(raw, int) and not isinstance(raw, bool):
        return [raw]
    if isinstance(raw, list) and all(
        isinstance(v, int) and not isinstance(v, bool) for v in cast(list[Any], raw)
    ):
        return list(cast(list[int], raw))
    msgs.append(f"The {name}.{key} key must be an integer or array of integers, not a {_type_name(raw)}")
    return []
