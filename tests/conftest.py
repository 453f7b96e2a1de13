"""Test configuration and fixtures."""

from pathlib import Path
from typing import Generator

import pytest
from git import Actor, Repo

from swagit.git import GitRepo

AUTHOR = Actor("Test User", "test@example.com")


def commit_file(repo: Repo, filename: str, content: str, message: str) -> None:
    """Write a file in the work tree and commit it."""
    path = Path(repo.working_tree_dir) / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([filename])
    repo.index.commit(message, author=AUTHOR, committer=AUTHOR)


def init_repo(path: Path) -> Repo:
    """Initialize a repository with one commit on main."""
    repo = Repo.init(path)
    repo.config_writer().set_value("user", "name", AUTHOR.name).release()
    repo.config_writer().set_value("user", "email", AUTHOR.email).release()
    commit_file(repo, "README.md", "# Test Repository", "Initial commit")
    if repo.active_branch.name != "main":
        repo.active_branch.rename("main")
    return repo


def create_branch(repo: Repo, name: str, push: bool = False) -> None:
    """Create a branch off main with one commit of its own, then return to main."""
    main = repo.heads.main
    main.checkout()
    branch = repo.create_head(name)
    branch.checkout()
    commit_file(repo, f"{name.replace('/', '_')}.txt", f"{name} content", f"Add {name}")
    if push:
        origin = repo.remote("origin")
        origin.push(name)
        branch.set_tracking_branch(origin.refs[name])
    main.checkout()


@pytest.fixture
def test_env(tmp_path: Path) -> Generator[tuple[Path, Path], None, None]:
    """Create a test environment with local and remote repositories.

    The local repository is on main and has bugfix/z, feature/x (pushed) and
    feature/y.

    Returns:
        Tuple of (local_repo_path, remote_repo_path)
    """
    remote_path = tmp_path / "remote"
    local_path = tmp_path / "local"
    remote_path.mkdir()
    local_path.mkdir()

    remote_repo = Repo.init(remote_path, bare=True)
    local_repo = init_repo(local_path)

    origin = local_repo.create_remote("origin", url=str(remote_path))
    origin.push("main")
    local_repo.heads.main.set_tracking_branch(origin.refs.main)
    # Clones of the remote should check out main
    remote_repo.git.symbolic_ref("HEAD", "refs/heads/main")

    create_branch(local_repo, "feature/x", push=True)
    create_branch(local_repo, "feature/y")
    create_branch(local_repo, "bugfix/z")

    yield local_path, remote_path


@pytest.fixture
def test_repo(test_env: tuple[Path, Path]) -> Path:
    """Path of the local repository."""
    local_path, _ = test_env
    return local_path


@pytest.fixture
def single_branch_repo(tmp_path: Path) -> Path:
    """A repository whose only branch is the current one."""
    path = tmp_path / "single"
    path.mkdir()
    init_repo(path)
    return path


class RecordingRepo(GitRepo):
    """GitRepo that remembers every mutating call it receives."""

    def __init__(self, path: Path) -> None:
        super().__init__(path)
        self.checkouts: list[str] = []
        self.deletions: list[list[str]] = []

    def checkout(self, name: str) -> None:
        self.checkouts.append(name)
        super().checkout(name)

    def delete_branches(self, names):
        names = list(names)
        self.deletions.append(names)
        return super().delete_branches(names)


@pytest.fixture
def recording_repo(test_repo: Path) -> RecordingRepo:
    """The test repository wrapped so checkout and delete calls are recorded."""
    return RecordingRepo(test_repo)
