"""Local git repository discovery and inspection."""

from __future__ import annotations

import logging
import os
import stat
import subprocess
from dataclasses import dataclass
from pathlib import Path

from propener.errors import ProError

logger = logging.getLogger(__name__)

BRANCH_REF_PREFIX = "refs/heads/"


class RepositoryNotFound(ProError):
    """Raised when no repository encloses the starting directory."""


class LocatorError(ProError):
    """Raised when a directory cannot be inspected during the search."""


class RepositoryStateError(ProError):
    """Raised when repository state (HEAD, config) cannot be read."""


class RemoteNotFound(ProError):
    """Raised when the requested remote has no configured URL."""


@dataclass(frozen=True)
class Branch:
    """The checked out HEAD of a repository."""

    name: str
    is_named_branch: bool


@dataclass(frozen=True)
class Repository:
    """A git repository rooted at an absolute working tree path."""

    root: Path
    git_dir: Path

    def current_branch(self) -> Branch:
        """Read HEAD and report the checked out branch.

        A HEAD pointing at a commit (or at a ref outside refs/heads/) is
        reported as an unnamed branch.
        """
        head_path = self.git_dir / "HEAD"
        try:
            content = head_path.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as e:
            raise RepositoryStateError(f"Unable to read {head_path}: {e}") from e

        if not content:
            raise RepositoryStateError(f"Empty HEAD file: {head_path}")

        if content.startswith("ref:"):
            ref = content[len("ref:") :].strip()
            if ref.startswith(BRANCH_REF_PREFIX) and len(ref) > len(BRANCH_REF_PREFIX):
                return Branch(name=ref[len(BRANCH_REF_PREFIX) :], is_named_branch=True)
            return Branch(name=ref, is_named_branch=False)

        return Branch(name=content, is_named_branch=False)

    def remote_urls(self, name: str = "origin") -> list[str]:
        """Return the URLs configured for a remote, in config order."""
        try:
            result = subprocess.run(
                ["git", "config", "--get-all", f"remote.{name}.url"],
                cwd=self.root,
                capture_output=True,
                check=False,
            )
        except OSError as e:
            raise RepositoryStateError(f"Unable to run git: {e}") from e

        try:
            stdout = result.stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise RepositoryStateError(f"Remote {name!r} has a URL that is not valid UTF-8: {e}") from e

        if result.returncode == 1:
            raise RemoteNotFound(f'No remote named "{name}" found.')
        if result.returncode != 0:
            message = result.stderr.decode("utf-8", errors="replace").strip() or f"git exited with status {result.returncode}"
            raise RepositoryStateError(f"Unable to read remote {name!r}: {message}")

        urls = [line.strip() for line in stdout.splitlines() if line.strip()]
        if not urls:
            raise RemoteNotFound(f'No remote named "{name}" found.')
        return urls


def _stat_or_none(path: Path) -> os.stat_result | None:
    try:
        return path.stat()
    except (FileNotFoundError, NotADirectoryError):
        return None


def _git_dir_for(directory: Path) -> Path | None:
    """Return the git directory if ``directory`` is a repository root."""
    dot_git = directory / ".git"
    st = _stat_or_none(dot_git)
    if st is None:
        return None

    if stat.S_ISDIR(st.st_mode):
        head = _stat_or_none(dot_git / "HEAD")
        if head is not None and stat.S_ISREG(head.st_mode):
            return dot_git
        return None

    if stat.S_ISREG(st.st_mode):
        # worktrees and submodules use a file pointing at the real git dir
        with open(dot_git, encoding="utf-8", errors="replace") as f:
            first_line = f.readline().strip()
        if not first_line.startswith("gitdir:"):
            return None
        target = Path(first_line[len("gitdir:") :].strip())
        if not target.is_absolute():
            target = directory / target
        target_st = _stat_or_none(target)
        if target_st is None or not stat.S_ISDIR(target_st.st_mode):
            raise LocatorError(f"{dot_git} points at a missing git directory: {target}")
        return target.resolve()

    return None


def find_repository(start: Path | str = ".") -> Repository:
    """Find the repository enclosing ``start``.

    Checks ``start`` itself, then each parent directory up to and including
    the filesystem root.

    Raises:
        RepositoryNotFound: If no ancestor is a repository root.
        LocatorError: If a directory cannot be inspected, or a .git file points
            at a git directory that does not exist.
    """
    try:
        start_path = Path(start).resolve()
    except OSError as e:
        raise LocatorError(f"Unable to resolve {start}: {e}") from e

    for directory in (start_path, *start_path.parents):
        try:
            git_dir = _git_dir_for(directory)
        except OSError as e:
            raise LocatorError(f"Unable to inspect {directory}: {e}") from e
        if git_dir is not None:
            logger.debug("Found repository at %s (git dir %s)", directory, git_dir)
            return Repository(root=directory, git_dir=git_dir)

    raise RepositoryNotFound(f"No git repository found in {start_path} or any parent directory")
