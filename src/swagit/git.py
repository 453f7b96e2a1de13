"""Git repository operations."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

logger = logging.getLogger(__name__)

LOCAL_PREFIX = "refs/heads/"
REMOTE_PREFIX = "refs/remotes/"

# Fields are separated by NUL so commit subjects can contain anything
BRANCH_FORMAT = "%00".join(
    [
        "%(HEAD)",
        "%(refname)",
        "%(objectname:short)",
        "%(upstream)",
        "%(contents:subject)",
    ]
)


class SyncStatus(Enum):
    """Result of comparing a local branch with its upstream."""

    UPDATED = "updated"
    BEHIND = "behind"
    AHEAD = "ahead"
    DIVERGED = "diverged"
    MERGED = "merged"
    GONE = "gone"


@dataclass(frozen=True)
class Branch:
    """A branch as reported by git.

    Only ``name`` identifies a branch; the other fields are decoration.
    ``upstream`` is a full refname such as ``refs/remotes/origin/main``.
    """

    name: str
    is_current: bool = field(default=False, compare=False)
    short_commit: Optional[str] = field(default=None, compare=False)
    label: Optional[str] = field(default=None, compare=False)
    remote: bool = field(default=False, compare=False)
    upstream: Optional[str] = field(default=None, compare=False)


class GitError(Exception):
    """Git operation error."""

    def __init__(self, message: str) -> None:
        """Initialize error.

        Args:
            message: Error message, as close to git's own output as possible
        """
        super().__init__(message)
        self.message = message


class NotARepositoryError(GitError):
    """The path is not inside a usable git work tree."""


class CheckoutConflictError(GitError):
    """Git refused to switch branches."""

    def __init__(self, branch: str, message: str) -> None:
        super().__init__(message)
        self.branch = branch


class BranchDeleteError(GitError):
    """One or more branches of a batch delete were not deleted."""

    def __init__(self, message: str, deleted: list[str], failed: list[str]) -> None:
        """Initialize error.

        Args:
            message: Git's error output
            deleted: Branches that were deleted before git gave up
            failed: Branches that are still there
        """
        super().__init__(message)
        self.deleted = deleted
        self.failed = failed


def parse_branch_line(line: str) -> Optional[Branch]:
    """Parse one line of ``git for-each-ref`` output in ``BRANCH_FORMAT``."""
    parts = line.split("\0")
    if len(parts) != 5:
        return None
    head, refname, commit, upstream, subject = parts

    if refname.startswith(LOCAL_PREFIX):
        name = refname[len(LOCAL_PREFIX) :]
        remote = False
    elif refname.startswith(REMOTE_PREFIX):
        name = refname[len(REMOTE_PREFIX) :]
        remote = True
    else:
        return None

    return Branch(
        name=name,
        is_current=head == "*",
        short_commit=commit or None,
        label=subject or None,
        remote=remote,
        upstream=upstream or None,
    )


class GitRepo:
    """Git repository operations."""

    def __init__(self, path: Path) -> None:
        """Open the repository containing ``path``.

        Raises:
            NotARepositoryError: If ``path`` is not inside a git work tree
        """
        try:
            self.repo: Repo = Repo(path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError, GitCommandError, ValueError) as err:
            raise NotARepositoryError(f"Not a git repository: {path}") from err
        if self.repo.bare:
            raise NotARepositoryError("Cannot operate on bare repository")

    def _run(self, *args: str) -> tuple[int, str, str]:
        """Run a git command without raising, returning (status, stdout, stderr)."""
        logger.debug("git %s", " ".join(args))
        status, stdout, stderr = self.repo.git.execute(
            ["git", *args],
            with_extended_output=True,
            with_exceptions=False,
        )
        return status, stdout, stderr

    def current_branch(self) -> str:
        """Get current branch name.

        Raises:
            NotARepositoryError: If the current branch cannot be determined
        """
        try:
            return self.repo.active_branch.name
        except TypeError as err:
            # Detached HEAD
            raise NotARepositoryError("Could not determine the current branch (HEAD is detached)") from err
        except (GitCommandError, ValueError) as err:
            raise NotARepositoryError(f"Failed to get current branch: {err}") from err

    def _for_each_ref(self, *patterns: str, merged: Optional[str] = None) -> list[Branch]:
        args = ["for-each-ref", f"--format={BRANCH_FORMAT}"]
        if merged:
            args.append(f"--merged={merged}")
        status, stdout, stderr = self._run(*args, *patterns)
        if status != 0:
            raise GitError(stderr.strip() or "Failed to list branches")

        branches = []
        # Records end with a newline only; subjects may hold other separators
        for line in stdout.split("\n"):
            branch = parse_branch_line(line)
            if branch is None:
                continue
            # Symbolic refs such as origin/HEAD are not branches
            if branch.remote and branch.name.endswith("/HEAD"):
                continue
            branches.append(branch)
        return dedupe(branches)

    def list_branches(self) -> list[Branch]:
        """List local branches and remote-tracking references, in git's order."""
        branches = self._for_each_ref("refs/heads", "refs/remotes")
        logger.debug("found %d branches", len(branches))
        return branches

    def merged_branches(self, into: str) -> list[Branch]:
        """List local branches whose tip is reachable from ``into``."""
        return self._for_each_ref("refs/heads", merged=into)

    def checkout(self, name: str) -> None:
        """Switch the work tree to ``name``.

        Raises:
            CheckoutConflictError: If git refuses the switch
        """
        status, _, stderr = self._run("checkout", name)
        if status != 0:
            raise CheckoutConflictError(name, stderr.strip() or f"Failed to checkout branch {name}")

    def delete_branches(self, names: Iterable[str]) -> list[str]:
        """Force delete all ``names`` with a single ``git branch -D`` call.

        Returns:
            The deleted branch names

        Raises:
            BranchDeleteError: If any branch was not deleted
        """
        names = list(names)
        if not names:
            return []

        existing = {head.name for head in self.repo.heads}
        status, _, stderr = self._run("branch", "-D", *names)
        if status != 0:
            # Git's messages may be translated; compare the refs instead
            remaining = {head.name for head in self.repo.heads}
            deleted = [name for name in names if name in existing and name not in remaining]
            failed = [name for name in names if name not in deleted]
            raise BranchDeleteError(stderr.strip() or "Failed to delete branches", deleted, failed)
        return names

    def fetch(self, remote: str, prune: bool = True) -> None:
        """Fetch ``remote``, pruning vanished remote-tracking references.

        Raises:
            GitError: If the remote does not exist or the fetch fails
        """
        if remote not in [r.name for r in self.repo.remotes]:
            raise GitError(f"No remote named '{remote}'")
        args = ["fetch", remote]
        if prune:
            args.insert(1, "--prune")
        status, _, stderr = self._run(*args)
        if status != 0:
            raise GitError(stderr.strip() or f"Failed to fetch from {remote}")

    def default_branch(self, remote: str) -> str:
        """Get the default branch from ``<remote>/HEAD``, falling back to main or master.

        Raises:
            GitError: If no default branch can be found
        """
        status, stdout, _ = self._run("symbolic-ref", "--short", f"refs/remotes/{remote}/HEAD")
        if status == 0 and stdout.strip():
            return stdout.strip()[len(remote) + 1 :]

        heads = [head.name for head in self.repo.heads]
        for candidate in ("main", "master"):
            if candidate in heads:
                return candidate
        raise GitError("Could not determine default branch")

    def _ahead_behind(self, branch: str, upstream: str) -> tuple[int, int]:
        # Full refnames so a tag with the same name is never picked
        status, stdout, stderr = self._run(
            "rev-list", "--left-right", "--count", f"{LOCAL_PREFIX}{branch}...{upstream}"
        )
        if status != 0:
            raise GitError(stderr.strip() or f"Failed to compare {branch} with {upstream}")
        ahead, behind = stdout.split()
        return int(ahead), int(behind)

    def _ref_exists(self, refname: str) -> bool:
        status, _, _ = self._run("rev-parse", "--verify", "--quiet", refname)
        return status == 0

    def sync_status(self, default: Optional[str] = None) -> list[tuple[str, SyncStatus]]:
        """Compare every local branch that has an upstream with it.

        Branches that are in sync are left out. The current branch is
        fast-forwarded when it is only behind its upstream.

        Args:
            default: Branch used to decide whether a gone branch was merged

        Returns:
            (branch name, status) pairs in git's order
        """
        current = self.current_branch()
        merged = {branch.name for branch in self.merged_branches(default)} if default else set()
        statuses: list[tuple[str, SyncStatus]] = []

        for branch in self._for_each_ref("refs/heads"):
            # Branches tracking another local branch have nothing to sync
            if not branch.upstream or not branch.upstream.startswith(REMOTE_PREFIX):
                continue

            if not self._ref_exists(branch.upstream):
                state = SyncStatus.MERGED if branch.name in merged else SyncStatus.GONE
                statuses.append((branch.name, state))
                continue

            ahead, behind = self._ahead_behind(branch.name, branch.upstream)
            if ahead == 0 and behind == 0:
                continue
            if ahead == 0:
                if branch.name == current:
                    status, _, stderr = self._run("merge", "--ff-only", branch.upstream)
                    if status != 0:
                        raise GitError(stderr.strip() or f"Failed to fast-forward {branch.name}")
                    statuses.append((branch.name, SyncStatus.UPDATED))
                else:
                    statuses.append((branch.name, SyncStatus.BEHIND))
            elif behind == 0:
                statuses.append((branch.name, SyncStatus.AHEAD))
            else:
                statuses.append((branch.name, SyncStatus.DIVERGED))

        return statuses


def dedupe(branches: Iterable[Branch]) -> list[Branch]:
    """Drop repeated branch names, keeping the first occurrence."""
    seen: set[str] = set()
    result = []
    for branch in branches:
        if branch.name in seen:
            continue
        seen.add(branch.name)
        result.append(branch)
    return result
