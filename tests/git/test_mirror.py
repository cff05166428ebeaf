"""Tests for MirrorCache against local bare repositories."""

from __future__ import annotations

from pathlib import Path

import pygit2
import pytest

from teamsync.git import MirrorCache
from teamsync.github.models import RepoRef


def _ref(name: str, bare: Path) -> RepoRef:
    # https clone urls are "<url>.git"; a local path works the same way
    return RepoRef(
        name=name,
        url=str(bare.with_suffix("")),
        ssh_url=str(bare),
        default_branch="main",
    )


class TestMirrorCache:
    """Tests for MirrorCache."""

    def test_paths(self, tmp_path: Path) -> None:
        cache = MirrorCache(tmp_path)
        assert cache.path_for("svc") == tmp_path / "svc"
        assert not cache.is_cloned("svc")

    def test_clone_urls(self, tmp_path: Path) -> None:
        ref = RepoRef(
            name="svc",
            url="https://github.com/acme/svc",
            ssh_url="git@github.com:acme/svc.git",
            default_branch="main",
        )
        assert MirrorCache(tmp_path).clone_url(ref) == "git@github.com:acme/svc.git"
        assert MirrorCache(tmp_path, protocol="https").clone_url(ref) == "https://github.com/acme/svc.git"

    def test_clone_then_update(self, tmp_path: Path, repo_with_remote, bare_repo, committer) -> None:
        bare = Path(bare_repo.path).resolve()
        cache = MirrorCache(tmp_path / "mirrors", protocol="https")
        ref = _ref("svc", bare)

        assert cache.ensure_clone(ref, shallow=False) == "cloned"
        assert (cache.path_for("svc") / "README.md").exists()

        committer(repo_with_remote, "new.txt", "new\n", "new")
        repo_with_remote.remotes["origin"].push(["refs/heads/main:refs/heads/main"])

        assert cache.ensure_clone(ref, shallow=False) == "updated"
        assert (cache.path_for("svc") / "new.txt").read_text() == "new\n"

    def test_failure_is_reported(self, tmp_path: Path) -> None:
        cache = MirrorCache(tmp_path / "mirrors", protocol="https")
        assert cache.ensure_clone(_ref("ghost", tmp_path / "missing.git"), shallow=False) == "failed"

    @pytest.mark.asyncio
    async def test_ensure_all(self, tmp_path: Path, repo_with_remote, bare_repo) -> None:
        cache = MirrorCache(tmp_path / "mirrors", protocol="https")
        refs = [_ref("svc", Path(bare_repo.path).resolve()), _ref("ghost", tmp_path / "missing.git")]
        outcomes = await cache.ensure_all(refs, shallow=False)
        assert outcomes == {"svc": "cloned", "ghost": "failed"}
        assert isinstance(cache.client("svc").repo, pygit2.Repository)
