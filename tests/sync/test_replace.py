"""Tests for sync.replace.

Covers:
- prompt_options: answer mapping and history recording
- find_repo_matches: type filter and missing clones
- sync_replace with force: writes files, tracks them, saves the session
- sync_replace searching only tracked repos
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from teamsync.sync import prompts
from teamsync.sync.applier import ReplaceOptions
from teamsync.sync.replace import find_repo_matches, prompt_options, sync_replace
from teamsync.sync.state import SessionState


def _clone(ctx, name: str, files: dict[str, str]) -> Path:
    root = ctx.mirrors.path_for(name)
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


class TestPromptOptions:
    """Tests for prompt_options."""

    @pytest.mark.asyncio
    async def test_block_with_excluded_boundaries(self, sync_ctx) -> None:
        with (
            patch.object(prompts, "text_with_history", AsyncMock(side_effect=["begin", " end ", "*.kt"])),
            patch.object(prompts, "checkbox", AsyncMock(return_value=["start"])),
            patch.object(prompts, "confirm", AsyncMock(return_value=True)),
            patch.object(prompts, "replacement_input", AsyncMock(return_value="new body")),
            patch.object(prompts, "select", AsyncMock(return_value="jvm")),
        ):
            options, file_pattern, repo_type = await prompt_options(sync_ctx)

        assert options == ReplaceOptions(
            start_pattern="begin",
            end_pattern="end",
            replacement="new body",
            exclude_start=True,
            exclude_end=False,
            inline=False,
        )
        assert file_pattern == "*.kt"
        assert repo_type == "jvm"
        history = sync_ctx.history.load()
        assert history.start_pattern == ["begin"]
        assert history.end_pattern == ["end"]
        assert history.replacement == ["new body"]
        assert history.file_pattern == ["*.kt"]

    @pytest.mark.asyncio
    async def test_single_line_delete(self, sync_ctx) -> None:
        """No end pattern asks about inline; declining replacement means delete."""
        confirm = AsyncMock(side_effect=[True, False])
        checkbox = AsyncMock()
        with (
            patch.object(prompts, "text_with_history", AsyncMock(side_effect=["", "old", "", "**/*"])),
            patch.object(prompts, "checkbox", checkbox),
            patch.object(prompts, "confirm", confirm),
            patch.object(prompts, "select", AsyncMock(return_value="all")),
        ):
            options, _, _ = await prompt_options(sync_ctx)

        checkbox.assert_not_awaited()
        assert options.start_pattern == "old"
        assert options.end_pattern is None
        assert options.inline is True
        assert options.replacement is None
        assert sync_ctx.history.load().end_pattern == []


class TestFindRepoMatches:
    """Tests for find_repo_matches."""

    @pytest.mark.asyncio
    async def test_filters_type_and_missing(self, sync_ctx) -> None:
        _clone(sync_ctx, "api", {"package.json": "{}", "a.js": "const x = old()\n"})
        _clone(sync_ctx, "lib", {"build.gradle": "", "A.kt": "val x = old()\n"})
        options = ReplaceOptions(start_pattern="old()")

        found = await find_repo_matches(sync_ctx, ["api", "lib", "ghost"], options, "**/*", "node")

        assert list(found) == ["api"]
        assert [c.file for c in found["api"]] == ["a.js"]


class TestSyncReplace:
    """Tests for sync_replace."""

    @pytest.mark.asyncio
    async def test_force_writes_and_tracks(self, sync_ctx, repo_factory, terminal) -> None:
        root = _clone(sync_ctx, "svc", {"app.txt": "keep\nold line\nkeep\n", "other.txt": "nothing\n"})
        sync_ctx.list_repos = AsyncMock(return_value=[repo_factory("svc")])
        options = ReplaceOptions(start_pattern="old", replacement="new line")

        with (
            patch.object(prompts, "checkbox", AsyncMock(return_value=[":all"])),
            patch.object(prompts, "select", AsyncMock(return_value="exit")),
        ):
            state = await sync_replace(sync_ctx, options, force=True, terminal=terminal)

        assert (root / "app.txt").read_text(encoding="utf-8") == "keep\nnew line\nkeep\n"
        assert state.modified_files == {"svc": ["app.txt"]}
        assert sync_ctx.session.load().modified_files == {"svc": ["app.txt"]}

    @pytest.mark.asyncio
    async def test_no_matches(self, sync_ctx, repo_factory) -> None:
        _clone(sync_ctx, "svc", {"app.txt": "nothing here\n"})
        sync_ctx.list_repos = AsyncMock(return_value=[repo_factory("svc")])
        checkbox = AsyncMock()
        with patch.object(prompts, "checkbox", checkbox):
            state = await sync_replace(sync_ctx, ReplaceOptions(start_pattern="absent"), force=True)
        assert state.is_empty
        checkbox.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_search_only_tracked(self, sync_ctx, repo_factory, terminal) -> None:
        """An active session can restrict the search to tracked repos."""
        _clone(sync_ctx, "tracked", {"a.txt": "old\n"})
        _clone(sync_ctx, "untracked", {"a.txt": "old\n"})
        sync_ctx.session.save(SessionState(modified_files={"tracked": ["b.txt"]}))
        sync_ctx.list_repos = AsyncMock(return_value=[repo_factory("tracked"), repo_factory("untracked")])

        with (
            patch.object(prompts, "confirm", AsyncMock(return_value=True)),
            patch.object(prompts, "checkbox", AsyncMock(return_value=[":all"])),
            patch.object(prompts, "select", AsyncMock(return_value="exit")),
        ):
            state = await sync_replace(
                sync_ctx, ReplaceOptions(start_pattern="old", replacement="new"), force=True, terminal=terminal
            )

        sync_ctx.list_repos.assert_not_awaited()
        assert state.modified_files == {"tracked": ["b.txt", "a.txt"]}
        untracked = sync_ctx.mirrors.path_for("untracked") / "a.txt"
        assert untracked.read_text(encoding="utf-8") == "old\n"
