"""Tests for the Textual prompts."""

import pytest
from textual.widgets import OptionList

from swagit import prompts
from swagit.git import Branch
from swagit.prompts import CancelToken, TextualPrompter
from swagit.tui import BranchChecklist, BranchPicker, ConfirmPrompt

BRANCHES = [Branch("feature/x"), Branch("feature/y"), Branch("main")]


def shown(app: BranchPicker) -> list[str]:
    option_list = app.query_one("#branches", OptionList)
    return [option_list.get_option_at_index(i).id for i in range(option_list.option_count)]


class TestBranchPicker:
    """Tests for the single choice branch picker."""

    @pytest.mark.asyncio
    async def test_typing_narrows_results(self) -> None:
        """Typing in the search input narrows displayed branches in list order."""
        app = BranchPicker("Which branch?", BRANCHES)

        async with app.run_test() as pilot:
            await pilot.pause()
            assert shown(app) == ["feature/x", "feature/y", "main"]

            await pilot.press("f", "e", "a", "t")
            await pilot.pause()

            assert shown(app) == ["feature/x", "feature/y"]

    @pytest.mark.asyncio
    async def test_enter_picks_highlighted_match(self) -> None:
        app = BranchPicker("Which branch?", BRANCHES)

        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("f", "e", "a", "t")
            await pilot.press("down")
            await pilot.press("enter")

        assert app.return_value == "feature/y"
        assert not app.cancelled

    @pytest.mark.asyncio
    async def test_escape_cancels(self) -> None:
        app = BranchPicker("Which branch?", BRANCHES)

        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("escape")

        assert app.return_value is None
        assert app.cancelled

    @pytest.mark.asyncio
    async def test_enter_without_matches_does_nothing(self) -> None:
        app = BranchPicker("Which branch?", BRANCHES)

        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("z", "z", "z")
            await pilot.press("enter")
            await pilot.pause()
            assert shown(app) == []
            assert app.return_value is None


class TestBranchChecklist:
    """Tests for the multiple choice checklist."""

    @pytest.mark.asyncio
    async def test_space_toggles_and_enter_submits(self) -> None:
        app = BranchChecklist("Which branches?", BRANCHES)

        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("down", "down", "space")
            await pilot.press("up", "up", "space")
            await pilot.press("enter")

        # List order, not the order they were ticked in
        assert app.return_value == ["feature/x", "main"]

    @pytest.mark.asyncio
    async def test_enter_with_nothing_ticked(self) -> None:
        app = BranchChecklist("Which branches?", BRANCHES)

        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("enter")

        assert app.return_value == []
        assert not app.cancelled

    @pytest.mark.asyncio
    async def test_escape_cancels(self) -> None:
        app = BranchChecklist("Which branches?", BRANCHES)

        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("space")
            await pilot.press("escape")

        assert app.return_value is None
        assert app.cancelled


class TestConfirmPrompt:
    """Tests for the yes/no prompt."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("key", "expected"), [("y", True), ("n", False), ("enter", False)])
    async def test_answers(self, key: str, expected: bool) -> None:
        app = ConfirmPrompt("Delete?")

        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press(key)

        assert app.return_value is expected

    @pytest.mark.asyncio
    async def test_enter_uses_default(self) -> None:
        app = ConfirmPrompt("Delete?", default=True)

        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("enter")

        assert app.return_value is True

    @pytest.mark.asyncio
    async def test_escape_cancels(self) -> None:
        app = ConfirmPrompt("Delete?")

        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("escape")

        assert app.return_value is None
        assert app.cancelled


class TestTextualPrompter:
    """Tests for how prompt results reach the cancel token."""

    def test_answer_leaves_token_alone(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(prompts, "run_prompt", lambda app: "feature/x")
        cancel = CancelToken()
        assert TextualPrompter().select_branch("Which?", BRANCHES, cancel) == "feature/x"
        assert not cancel.cancelled

    def test_no_answer_sets_token(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(prompts, "run_prompt", lambda app: None)
        cancel = CancelToken()
        assert TextualPrompter().select_branches("Which?", BRANCHES, cancel) == []
        assert cancel.cancelled

    def test_declined_confirm_is_not_a_cancel(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(prompts, "run_prompt", lambda app: False)
        cancel = CancelToken()
        assert TextualPrompter().confirm("Delete?", cancel) is False
        assert not cancel.cancelled
