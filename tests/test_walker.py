"""Tests for the directory walker."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from tidypaths.basepaths import DirectoryWalker
from tidypaths.errors import PathNotFoundError, WalkError
from tidypaths.pathfilter import PathFilter


def _make_tree(root: Path) -> None:
    (root / "README.md").write_text("# Root\n")
    src = root / "src" / "pkg"
    src.mkdir(parents=True)
    (src / "a.py").write_text("a = 1\n")
    (root / "src" / "b.py").write_text("b = 2\n")
    nm = root / "node_modules" / "dep" / "lib"
    nm.mkdir(parents=True)
    (nm / "index.js").write_text("module.exports = {}\n")


def test_walk_recurses_into_directories(tmp_path: Path) -> None:
    _make_tree(tmp_path)
    walker = DirectoryWalker(PathFilter(root=tmp_path))
    result = sorted(walker.walk([str(tmp_path)]))
    assert result == sorted(
        [
            str(tmp_path / "README.md"),
            str(tmp_path / "node_modules" / "dep" / "lib" / "index.js"),
            str(tmp_path / "src" / "b.py"),
            str(tmp_path / "src" / "pkg" / "a.py"),
        ]
    )


def test_walk_prunes_excluded_directories_without_listing_them(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _make_tree(tmp_path)
    listed: list[str] = []
    real_scandir = os.scandir

    def spy_scandir(path: str = "."):
        listed.append(os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", spy_scandir)
    walker = DirectoryWalker(PathFilter(exclude=["node_modules/"], root=tmp_path))
    result = walker.walk([str(tmp_path)])

    assert not any("node_modules" in p for p in result)
    assert listed, "expected the walk to list directories"
    assert not any("node_modules" in p for p in listed)


def test_walk_never_returns_paths_under_excluded_directory(tmp_path: Path) -> None:
    _make_tree(tmp_path)
    path_filter = PathFilter(exclude=["pkg/"], root=tmp_path)
    result = DirectoryWalker(path_filter).walk([str(tmp_path)])
    assert str(tmp_path / "src" / "b.py") in result
    assert not any(p.startswith(str(tmp_path / "src" / "pkg")) for p in result)


def test_walk_excluded_starting_directory_yields_nothing(tmp_path: Path) -> None:
    _make_tree(tmp_path)
    walker = DirectoryWalker(PathFilter(exclude=["node_modules/"], root=tmp_path))
    assert walker.walk([str(tmp_path / "node_modules")]) == []


def test_walk_filters_files_found_during_walk(tmp_path: Path) -> None:
    (tmp_path / "keep.py").write_text("")
    (tmp_path / "skip.tmp").write_text("")
    walker = DirectoryWalker(PathFilter(exclude=["*.tmp"], root=tmp_path))
    assert walker.walk([str(tmp_path)]) == [str(tmp_path / "keep.py")]


def test_walk_passes_starting_files_through(tmp_path: Path) -> None:
    f = tmp_path / "skip.tmp"
    f.write_text("")
    walker = DirectoryWalker(PathFilter(exclude=["*.tmp"], root=tmp_path))
    assert walker.walk([str(f)]) == [str(f)]


def test_walk_makes_paths_absolute(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "a.py").write_text("")
    monkeypatch.chdir(tmp_path)
    expected = os.path.join(os.getcwd(), "a.py")
    walker = DirectoryWalker(PathFilter())
    assert walker.walk(["a.py", "."]) == [expected, expected]


def test_walk_missing_path(tmp_path: Path) -> None:
    walker = DirectoryWalker(PathFilter(root=tmp_path))
    missing = str(tmp_path / "nope.py")
    with pytest.raises(PathNotFoundError) as exc:
        walker.walk([missing])
    assert exc.value.path == missing


def test_walk_symlink_cycle_terminates(tmp_path: Path) -> None:
    a = tmp_path / "a"
    a.mkdir()
    (a / "file.txt").write_text("x")
    (a / "loop").symlink_to(a, target_is_directory=True)

    for follow in (False, True):
        walker = DirectoryWalker(PathFilter(root=tmp_path), follow_symlinks=follow)
        assert walker.walk([str(tmp_path)]) == [str(a / "file.txt")]


def test_walk_follows_symlinked_directory_when_asked(tmp_path: Path) -> None:
    real = tmp_path / "real"
    real.mkdir()
    (real / "x.py").write_text("")
    tree = tmp_path / "tree"
    tree.mkdir()
    (tree / "link").symlink_to(real, target_is_directory=True)

    assert DirectoryWalker(PathFilter(root=tmp_path)).walk([str(tree)]) == []
    followed = DirectoryWalker(PathFilter(root=tmp_path), follow_symlinks=True).walk([str(tree)])
    assert followed == [str(tree / "link" / "x.py")]


def test_walk_unreadable_directory(tmp_path: Path) -> None:
    if os.getuid() == 0:
        pytest.skip("root can list any directory regardless of permissions")
    locked = tmp_path / "locked"
    locked.mkdir()
    (locked / "a.py").write_text("")
    locked.chmod(0o000)
    try:
        with pytest.raises(WalkError) as exc:
            DirectoryWalker(PathFilter(root=tmp_path)).walk([str(tmp_path)])
        assert "locked" in str(exc.value)
    finally:
        locked.chmod(0o755)
