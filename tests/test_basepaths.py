"""Tests for starting-path resolution and the BasePaths engine."""

from __future__ import annotations

import os
import threading
import time
from collections.abc import Sequence
from pathlib import Path

import pytest

import tidypaths.basepaths.engine as engine_module
from tidypaths.basepaths import BasePaths, GitRepo, SelectionMode, resolve_starting_paths
from tidypaths.errors import ConflictingPathSourceError, PathNotFoundError, PatternError


class FakeGit(GitRepo):
    """A GitRepo that answers queries without running git."""

    def __init__(self, modified: list[str], staged: list[str]) -> None:
        super().__init__("/nonexistent")
        self._modified = modified
        self._staged = staged

    def modified_files(self) -> list[str]:
        return list(self._modified)

    def staged_files(self) -> list[str]:
        return list(self._staged)

    def unstaged_diff(self) -> bytes:
        return b""


def _make_repo(root: Path) -> None:
    src = root / "src"
    src.mkdir()
    (src / "a.go").write_text("package a\n")
    build = root / "build"
    build.mkdir()
    (build / "out.o").write_bytes(b"\x7fELF")
    (root / "x.tmp").write_text("scratch\n")
    (root / ".ignore").write_text("build/\n")


def test_resolve_explicit_paths_verbatim() -> None:
    paths = ["does/not/exist.py", "src"]
    assert resolve_starting_paths(SelectionMode.EXPLICIT_PATHS, paths) == paths


def test_resolve_all_files_uses_cwd(tmp_path: Path) -> None:
    assert resolve_starting_paths(SelectionMode.ALL_FILES, cwd=str(tmp_path)) == [str(tmp_path)]


def test_resolve_git_modes_use_git_queries() -> None:
    git = FakeGit(modified=["/repo/a.py"], staged=["/repo/b.py"])
    assert resolve_starting_paths(SelectionMode.GIT_MODIFIED, git=git) == ["/repo/a.py"]
    assert resolve_starting_paths(SelectionMode.GIT_STAGED, git=git) == ["/repo/b.py"]


@pytest.mark.parametrize(
    "mode", [SelectionMode.ALL_FILES, SelectionMode.GIT_MODIFIED, SelectionMode.GIT_STAGED]
)
def test_explicit_paths_conflict_with_other_modes(mode: SelectionMode) -> None:
    with pytest.raises(ConflictingPathSourceError):
        BasePaths(mode, ["src"])
    with pytest.raises(ConflictingPathSourceError):
        resolve_starting_paths(mode, ["src"])


def test_ignore_file_and_exclude_pattern_example(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _make_repo(tmp_path)
    monkeypatch.chdir(tmp_path)
    base = BasePaths(
        SelectionMode.ALL_FILES,
        exclude=["*.tmp"],
        ignore_files=[tmp_path / ".ignore"],
        root=tmp_path,
    )
    assert base.paths() == [os.path.join(os.getcwd(), "src", "a.go")]


def test_paths_sorted_and_deduplicated(tmp_path: Path) -> None:
    for name in ["c.py", "a.py", "b.py"]:
        (tmp_path / name).write_text("")
    sub = tmp_path / "a-b"
    sub.mkdir()
    (sub / "z.py").write_text("")
    a = str(tmp_path / "a.py")

    base = BasePaths(SelectionMode.EXPLICIT_PATHS, [a, str(tmp_path), a], root=tmp_path)
    result = base.paths()
    assert result == sorted(set(result))
    assert result.count(a) == 1
    assert len(result) == 4
    # Plain string order: "a-b/z.py" sorts before "a.py"
    assert result[0] == str(sub / "z.py")


def test_paths_memoized(tmp_path: Path) -> None:
    (tmp_path / "a.py").write_text("")
    base = BasePaths(SelectionMode.EXPLICIT_PATHS, [str(tmp_path)], root=tmp_path)
    first = base.paths()
    (tmp_path / "b.py").write_text("")
    assert base.paths() == first
    assert first == [str(tmp_path / "a.py")]


def test_paths_returns_copy(tmp_path: Path) -> None:
    (tmp_path / "a.py").write_text("")
    base = BasePaths(SelectionMode.EXPLICIT_PATHS, [str(tmp_path)], root=tmp_path)
    base.paths().append("/bogus")
    assert base.paths() == [str(tmp_path / "a.py")]


def test_paths_computed_once_under_concurrency(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "a.py").write_text("")
    calls: list[int] = []
    real_resolve = engine_module.resolve_starting_paths

    def slow_resolve(mode: SelectionMode, explicit: Sequence[str], **kwargs: object) -> list[str]:
        calls.append(1)
        time.sleep(0.05)
        return real_resolve(mode, explicit, **kwargs)  # type: ignore[arg-type]

    monkeypatch.setattr(engine_module, "resolve_starting_paths", slow_resolve)
    base = BasePaths(SelectionMode.EXPLICIT_PATHS, [str(tmp_path)], root=tmp_path)

    results: list[list[str]] = []
    threads = [threading.Thread(target=lambda: results.append(base.paths())) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(calls) == 1
    assert len(results) == 8
    assert all(r == [str(tmp_path / "a.py")] for r in results)


def test_explicit_file_excluded_by_global_rules(tmp_path: Path) -> None:
    f = tmp_path / "scratch.tmp"
    f.write_text("")
    base = BasePaths(SelectionMode.EXPLICIT_PATHS, [str(f)], exclude=["*.tmp"], root=tmp_path)
    assert base.paths() == []


def test_missing_explicit_path(tmp_path: Path) -> None:
    base = BasePaths(SelectionMode.EXPLICIT_PATHS, [str(tmp_path / "missing.py")], root=tmp_path)
    with pytest.raises(PathNotFoundError):
        base.paths()


def test_invalid_exclude_pattern_fails_paths(tmp_path: Path) -> None:
    (tmp_path / "a.py").write_text("")
    base = BasePaths(SelectionMode.EXPLICIT_PATHS, [str(tmp_path)], exclude=["{a,b"], root=tmp_path)
    with pytest.raises(PatternError):
        base.paths()


def test_git_modified_paths_filtered_and_sorted(tmp_path: Path) -> None:
    (tmp_path / "b.py").write_text("")
    (tmp_path / "a.py").write_text("")
    (tmp_path / "c.tmp").write_text("")
    git = FakeGit(
        modified=[str(tmp_path / "b.py"), str(tmp_path / "c.tmp"), str(tmp_path / "a.py")],
        staged=[],
    )
    base = BasePaths(SelectionMode.GIT_MODIFIED, exclude=["*.tmp"], root=tmp_path, git=git)
    assert base.paths() == [str(tmp_path / "a.py"), str(tmp_path / "b.py")]


def test_unstash_is_noop_without_staged_mode(tmp_path: Path) -> None:
    (tmp_path / "a.py").write_text("")
    with BasePaths(SelectionMode.EXPLICIT_PATHS, [str(tmp_path)], root=tmp_path) as base:
        assert base.paths() == [str(tmp_path / "a.py")]
    base.unstash_if_needed()
    base.unstash_if_needed()


def test_staged_mode_without_unstaged_changes(tmp_path: Path) -> None:
    (tmp_path / "a.py").write_text("")
    git = FakeGit(modified=[], staged=[str(tmp_path / "a.py")])
    with BasePaths(SelectionMode.GIT_STAGED, root=tmp_path, git=git) as base:
        assert base.paths() == [str(tmp_path / "a.py")]


def test_only_loaded_ignore_files_are_dropped(tmp_path: Path) -> None:
    (tmp_path / ".ignore").write_text("*.o\n")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / ".ignore").write_text("*.tmp\n")
    (sub / "a.go").write_text("package a\n")
    (sub / "b.tmp").write_text("")

    base = BasePaths(
        SelectionMode.EXPLICIT_PATHS,
        [str(tmp_path)],
        ignore_files=[tmp_path / ".ignore"],
        root=tmp_path,
    )
    # sub/.ignore is not loaded, so it neither filters b.tmp nor leaves the output
    assert base.paths() == [
        str(sub / ".ignore"),
        str(sub / "a.go"),
        str(sub / "b.tmp"),
    ]
