#!/usr/bin/env python3
"""
tidypaths: Decide which files each tidier and linter should run on

Common usage:
  tidypaths tidy --all
  tidypaths lint --git
  tidypaths tidy --staged
  tidypaths lint src/ README.md
  tidypaths tidy --all --list-files

Checks, global excludes and ignore files are read from `tidypaths.toml`,
`.tidypaths.toml` or `[tool.tidypaths]` in `pyproject.toml`, searched for from the
current directory up to the root of the checkout.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from tidypaths.basepaths import BasePaths, SelectionMode
from tidypaths.checks import CheckConfig, FilterType, plan_checks
from tidypaths.config import TidyPathsConfig, find_config_file, load_config
from tidypaths.errors import TidyPathsError

logger = logging.getLogger(__name__)


@dataclass
class Options:
    """Command-line options for the tidypaths tool."""

    command: str | None
    paths: list[str]
    config: str | None
    mode: SelectionMode
    list_files: bool
    checks: list[str]
    follow_symlinks: bool
    log_level: int
    version: bool


def _add_shared_args(parser: argparse.ArgumentParser, action: str) -> None:
    parser.add_argument(
        "paths",
        nargs="*",
        type=str,
        default=[],
        metavar="PATHS",
        help=f"A list of files or directories to {action}",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        default=None,
        help="Path to config file (default: searched for up to the checkout root)",
    )
    modes = parser.add_mutually_exclusive_group()
    modes.add_argument(
        "-a",
        "--all",
        action="store_const",
        dest="mode",
        const=SelectionMode.ALL_FILES,
        help=f"{action.capitalize()} everything in the current directory and below",
    )
    modes.add_argument(
        "-g",
        "--git",
        action="store_const",
        dest="mode",
        const=SelectionMode.GIT_MODIFIED,
        help=f"{action.capitalize()} files that have been modified according to git",
    )
    modes.add_argument(
        "-s",
        "--staged",
        action="store_const",
        dest="mode",
        const=SelectionMode.GIT_STAGED,
        help=f"{action.capitalize()} file content that is staged for a git commit "
        "(use this for commit hooks)",
    )
    parser.add_argument(
        "--list-files",
        action="store_true",
        dest="list_files",
        help="Print the base paths after global excludes, without per-check filtering",
    )
    parser.add_argument(
        "--check",
        action="append",
        default=[],
        dest="checks",
        metavar="NAME",
        help="Only show the named check. Can be repeated",
    )
    parser.add_argument(
        "--follow-symlinks",
        action="store_true",
        dest="follow_symlinks",
        help="Descend into symlinked directories (each real directory is visited once)",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v",
        "--verbose",
        action="store_const",
        dest="log_level",
        const=logging.INFO,
        help="Enable verbose output",
    )
    verbosity.add_argument(
        "-d",
        "--debug",
        action="store_const",
        dest="log_level",
        const=logging.DEBUG,
        help="Enable debugging output",
    )
    verbosity.add_argument(
        "-q",
        "--quiet",
        action="store_const",
        dest="log_level",
        const=logging.ERROR,
        help="Suppress most output",
    )


def _parse_args(args: list[str] | None = None) -> Options:
    """Parse command-line arguments."""
    # Use the module's docstring as the description
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        prog="tidypaths",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="{tidy,lint}")
    tidy = subparsers.add_parser("tidy", help="Show the files each tidier would tidy")
    _add_shared_args(tidy, "tidy")
    lint = subparsers.add_parser("lint", help="Show the files each linter would lint")
    _add_shared_args(lint, "lint")

    opts = parser.parse_args(args)
    if opts.command is None and not opts.version:
        parser.error("a command is required (tidy or lint)")

    return Options(
        command=opts.command,
        paths=getattr(opts, "paths", []),
        config=getattr(opts, "config", None),
        mode=getattr(opts, "mode", None) or SelectionMode.EXPLICIT_PATHS,
        list_files=getattr(opts, "list_files", False),
        checks=getattr(opts, "checks", []),
        follow_symlinks=getattr(opts, "follow_symlinks", False),
        log_level=getattr(opts, "log_level", None) or logging.WARNING,
        version=opts.version,
    )


def _load_config(options: Options) -> TidyPathsConfig:
    """Load the config named with `--config`, else the nearest one, else defaults."""
    if options.config:
        return load_config(Path(options.config))
    config_path = find_config_file(Path.cwd())
    if config_path is None:
        logger.info("No config file found, using defaults")
        return TidyPathsConfig()
    return load_config(config_path)


def _select_checks(config: TidyPathsConfig, names: list[str]) -> list[CheckConfig] | None:
    if not names:
        return config.checks
    selected: list[CheckConfig] = []
    for name in names:
        check = config.check(name)
        if check is None:
            print(f"Error: No check named {name!r} in the config file", file=sys.stderr)
            return None
        selected.append(check)
    return selected


def _run(options: Options) -> int:
    config = _load_config(options)
    checks = _select_checks(config, options.checks)
    if checks is None:
        return 1

    with BasePaths(
        options.mode,
        options.paths,
        config.effective_exclude,
        config.ignore,
        root=config.root,
        follow_symlinks=options.follow_symlinks,
    ) as base_paths:
        paths = base_paths.paths()

        if options.list_files:
            for path in paths:
                print(path)
            return 0

        assert options.command is not None
        plan = plan_checks(checks, paths, FilterType(options.command), root=config.root)
        for name, files in plan.items():
            print(f"{name}:")
            for f in files:
                print(f"  {f}")
    return 0


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the tidypaths CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    options = _parse_args(args)

    # Display version information if requested
    if options.version:
        try:
            version = importlib.metadata.version("tidypaths")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    logging.basicConfig(level=options.log_level, format="%(levelname)s: %(message)s", stream=sys.stderr)

    if options.mode is SelectionMode.EXPLICIT_PATHS and not options.paths:
        print(
            "Error: No paths specified. Provide files or directories, or use --all, --git"
            " or --staged. Use --help for more options.",
            file=sys.stderr,
        )
        return 1

    try:
        return _run(options)
    except TidyPathsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
