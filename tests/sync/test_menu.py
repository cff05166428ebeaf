"""Tests for the sync-replace menu."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from teamsync.sync import menu, prompts
from teamsync.sync.menu import choose_action, run_action
from teamsync.sync.state import SessionState


class TestChooseAction:
    """Tests for choose_action."""

    @pytest.mark.asyncio
    async def test_empty_session_refreshes_and_hides_session_actions(self, sync_ctx, repo_factory) -> None:
        repos = [repo_factory("a")]
        sync_ctx.list_repos = AsyncMock(return_value=repos)
        sync_ctx.mirrors = MagicMock()
        sync_ctx.mirrors.ensure_all = AsyncMock(return_value={})
        select = AsyncMock(return_value="new")

        with patch.object(prompts, "select", select):
            assert await choose_action(sync_ctx) == "new"

        sync_ctx.mirrors.ensure_all.assert_awaited_once_with(repos)
        values = [c.value for c in select.await_args.args[1]]
        assert values == ["status", "new", "reset", "commit"]

    @pytest.mark.asyncio
    async def test_tracked_session_offers_everything(self, sync_ctx) -> None:
        sync_ctx.session.save(SessionState(modified_files={"a": ["x", "y"]}))
        select = AsyncMock(return_value="review")

        with patch.object(prompts, "select", select):
            await choose_action(sync_ctx)

        sync_ctx.list_repos.assert_not_awaited()
        values = [c.value for c in select.await_args.args[1]]
        assert values == ["status", "new", "review", "rediff", "open", "run", "reset", "commit"]
        assert "1 repo with 2 tracked files" in sync_ctx.console.file.getvalue()


class TestRunAction:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("action", "target"),
        [("review", "review"), ("rediff", "rediff"), ("open", "open_in_editor"),
         ("run", "run_tracked"), ("commit", "commit_tracked")],
    )
    async def test_dispatch(self, sync_ctx, action: str, target: str) -> None:
        handler = AsyncMock()
        with patch.object(menu, target, handler):
            await run_action(sync_ctx, action)  # type: ignore[arg-type]
        handler.assert_awaited_once_with(sync_ctx)

    @pytest.mark.asyncio
    async def test_reset(self, sync_ctx) -> None:
        sync_ctx.session.save(SessionState(modified_files={"a": ["x"]}))
        await run_action(sync_ctx, "reset")
        assert sync_ctx.session.load().is_empty
