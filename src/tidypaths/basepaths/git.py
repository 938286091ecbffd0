"""
Git queries for the modified and staged selection modes, and the stash that
puts staged content on disk while checks run.
"""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from pathlib import Path
from types import TracebackType

from tidypaths.errors import GitQueryError, StashRestoreError

logger = logging.getLogger(__name__)


def _split_nul(output: str) -> list[str]:
    return [line for line in output.split("\0") if line]


class GitRepo:
    """Runs git commands against the repository containing `cwd`."""

    def __init__(self, cwd: str | os.PathLike[str] | None = None) -> None:
        self._cwd: Path = Path(cwd if cwd is not None else os.getcwd())
        self._toplevel: Path | None = None

    def run(self, *args: str, ok_codes: tuple[int, ...] = (0,), cwd: Path | None = None) -> bytes:
        """Run `git <args>` and return stdout. Raises `GitQueryError` on failure."""
        command = ["git", "-c", "core.quotepath=off", *args]
        logger.debug("Running %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                cwd=cwd if cwd is not None else self._cwd,
                capture_output=True,
                check=False,
            )
        except OSError as e:
            raise GitQueryError(command, str(e)) from e
        if result.returncode not in ok_codes:
            raise GitQueryError(command, result.stderr.decode("utf-8", errors="replace"))
        return result.stdout

    def run_text(self, *args: str) -> str:
        """Like `run()`, but decodes stdout as UTF-8 and runs from the top level."""
        output = self.run(*args, cwd=self.toplevel())
        try:
            return output.decode("utf-8")
        except UnicodeDecodeError as e:
            raise GitQueryError(["git", *args], "output is not valid UTF-8") from e

    def toplevel(self) -> Path:
        """Absolute path of the repository's working tree root."""
        if self._toplevel is None:
            output = self.run("rev-parse", "--show-toplevel")
            try:
                top = output.decode("utf-8").strip()
            except UnicodeDecodeError as e:
                raise GitQueryError(["git", "rev-parse", "--show-toplevel"], "output is not valid UTF-8") from e
            if not top:
                raise GitQueryError(["git", "rev-parse", "--show-toplevel"], "empty output")
            self._toplevel = Path(top)
        return self._toplevel

    def has_head(self) -> bool:
        """True once the repository has at least one commit."""
        output = self.run("rev-parse", "--verify", "--quiet", "HEAD", ok_codes=(0, 1))
        return bool(output.strip())

    def modified_files(self) -> list[str]:
        """
        Files that differ between the working tree and `HEAD`, plus untracked files
        that are not ignored. Deleted files are skipped.
        """
        if self.has_head():
            names = _split_nul(self.run_text("diff", "--name-only", "-z", "--diff-filter=d", "HEAD"))
        else:
            # No commits yet: everything staged plus unstaged edits on top of it.
            names = _split_nul(self.run_text("diff", "--cached", "--name-only", "-z", "--diff-filter=d"))
            names += _split_nul(self.run_text("diff", "--name-only", "-z", "--diff-filter=d"))
        names += _split_nul(self.run_text("ls-files", "--others", "--exclude-standard", "-z"))
        return self._absolute(names)

    def staged_files(self) -> list[str]:
        """Files staged for the next commit. Deleted files are skipped."""
        names = _split_nul(self.run_text("diff", "--cached", "--name-only", "-z", "--diff-filter=d"))
        return self._absolute(names)

    def unstaged_diff(self) -> bytes:
        """
        Binary patch of unstaged changes to tracked files (working tree vs index).

        Built with the `diff-files` plumbing command and explicit `a/` and `b/`
        prefixes so user diff settings such as `diff.noprefix` cannot produce a
        patch that `git apply` rejects.
        """
        top = self.toplevel()
        # Stat-only changes would otherwise show up as empty diff headers
        self.run("update-index", "-q", "--refresh", ok_codes=(0, 1), cwd=top)
        return self.run(
            "diff-files",
            "--binary",
            "--no-color",
            "--no-ext-diff",
            "--ignore-submodules",
            "--src-prefix=a/",
            "--dst-prefix=b/",
            cwd=top,
        )

    def _absolute(self, names: list[str]) -> list[str]:
        top = self.toplevel()
        return [os.path.join(top, name) for name in dict.fromkeys(names)]


class StagedStash:
    """
    Makes the working tree hold exactly the staged content of every tracked file.

    Unstaged changes are saved as a patch in a temporary file and removed from the
    working tree; `unstash()` re-applies the patch and deletes the file. If checks
    modified files in a way that conflicts with the patch, their modifications are
    discarded and the patch is applied to the staged content again.
    """

    def __init__(self, repo: GitRepo) -> None:
        self._repo: GitRepo = repo
        self._patch_file: Path | None = None

    @property
    def active(self) -> bool:
        return self._patch_file is not None

    def stash(self) -> bool:
        """Stash unstaged changes. Returns `False` when there was nothing to stash."""
        if self.active:
            return True
        patch = self._repo.unstaged_diff()
        if not patch.strip():
            logger.debug("No unstaged changes, nothing to stash")
            return False

        fd, name = tempfile.mkstemp(prefix="tidypaths-", suffix=".patch")
        with os.fdopen(fd, "wb") as f:
            f.write(patch)
        self._patch_file = Path(name)
        logger.info("Stashed unstaged changes to %s", name)

        try:
            self._repo.run("checkout", "--", ".", cwd=self._repo.toplevel())
        except GitQueryError:
            # The working tree was left untouched
            self._patch_file.unlink()
            self._patch_file = None
            raise
        return True

    def unstash(self) -> None:
        """Restore unstashed changes. Does nothing if `stash()` stashed nothing."""
        if not self.active:
            return
        self._restore()

    def _restore(self) -> None:
        assert self._patch_file is not None
        patch = str(self._patch_file)
        top = self._repo.toplevel()
        try:
            self._repo.run("apply", "--whitespace=nowarn", patch, cwd=top)
        except GitQueryError:
            logger.warning("Stashed changes conflicted with changes made by checks; discarding the latter")
            try:
                self._repo.run("checkout", "--", ".", cwd=top)
                self._repo.run("apply", "--whitespace=nowarn", patch, cwd=top)
            except GitQueryError as e:
                # Leave the patch on disk; it is the only copy of the unstaged changes
                self._patch_file = None
                raise StashRestoreError(patch, str(e)) from e
        self._patch_file.unlink()
        self._patch_file = None
        logger.info("Restored unstaged changes")

    def __enter__(self) -> StagedStash:
        self.stash()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.unstash()
