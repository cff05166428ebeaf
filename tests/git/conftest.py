"""Test fixtures for git module."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pygit2
import pytest

from teamsync.git import GitOps

if TYPE_CHECKING:
    from collections.abc import Generator


def commit_file(repo: pygit2.Repository, name: str, content: str, message: str) -> pygit2.Oid:
    """Write, stage and commit one file on HEAD."""
    workdir = Path(repo.workdir)
    (workdir / name).parent.mkdir(parents=True, exist_ok=True)
    (workdir / name).write_text(content)
    repo.index.add(name)
    repo.index.write()
    tree = repo.index.write_tree()
    sig = pygit2.Signature("Test User", "test@example.com")
    parents = [] if repo.head_is_unborn else [repo.head.target]
    return repo.create_commit("HEAD", sig, sig, message, tree, parents)


@pytest.fixture
def temp_repo(tmp_path: Path) -> Generator[pygit2.Repository, None, None]:
    """Create a temporary git repository with initial commit."""
    repo_path = tmp_path / "repo"
    repo_path.mkdir()

    repo = pygit2.init_repository(str(repo_path), initial_head="main")

    # Configure user
    repo.config["user.name"] = "Test User"
    repo.config["user.email"] = "test@example.com"

    commit_file(repo, "README.md", "# Test Repo\n", "Initial commit")
    yield repo


@pytest.fixture
def bare_repo(tmp_path: Path) -> Generator[pygit2.Repository, None, None]:
    """Create a bare repository for remote testing."""
    bare_path = tmp_path / "origin.git"
    yield pygit2.init_repository(str(bare_path), bare=True, initial_head="main")


@pytest.fixture
def repo_with_remote(
    temp_repo: pygit2.Repository,
    bare_repo: pygit2.Repository,
) -> pygit2.Repository:
    """Repository with a configured remote."""
    temp_repo.remotes.create("origin", str(Path(bare_repo.path).resolve()))

    # Push initial commit
    remote = temp_repo.remotes["origin"]
    remote.push(["refs/heads/main:refs/heads/main"])

    return temp_repo


@pytest.fixture
def git_repo(temp_repo: pygit2.Repository) -> tuple[Path, GitOps]:
    """GitOps wrapper around a fresh repository with initial commit."""
    repo_path = Path(temp_repo.workdir)
    return repo_path, GitOps(repo_path)


@pytest.fixture
def committer():
    """``committer(repo, name, content, message)`` commits one file."""
    return commit_file
