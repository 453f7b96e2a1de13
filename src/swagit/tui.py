"""Textual apps used as interactive prompts."""

from typing import Optional, TypeVar

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Input, Label, OptionList, SelectionList
from textual.widgets.option_list import Option
from textual.widgets.selection_list import Selection

from swagit.branches import describe, search_branches
from swagit.git import Branch

ReturnType = TypeVar("ReturnType")


class PromptApp(App[ReturnType]):
    """Base for one-shot prompts.

    Escape or Ctrl+C exits with no result and marks the prompt as cancelled.
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", priority=True),
        Binding("ctrl+c", "cancel", "Cancel", show=False, priority=True),
    ]

    CSS = """
    Screen {
        height: auto;
    }

    #prompt {
        text-style: bold;
        margin-bottom: 1;
    }

    OptionList, SelectionList {
        height: auto;
        max-height: 15;
    }
    """

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message
        self.cancelled = False

    def action_cancel(self) -> None:
        """Leave the prompt without an answer."""
        self.cancelled = True
        self.exit(None)


class BranchPicker(PromptApp[str]):
    """Single choice list with search-as-you-type."""

    BINDINGS = [
        Binding("up", "cursor_up", "Up", show=False),
        Binding("down", "cursor_down", "Down", show=False),
    ]

    def __init__(self, message: str, branches: list[Branch]) -> None:
        super().__init__(message)
        self.branches = branches
        self.matches = branches

    def compose(self) -> ComposeResult:
        yield Label(self.message, id="prompt")
        yield Input(placeholder="Type to search", id="search")
        yield OptionList(id="branches")
        yield Footer()

    def on_mount(self) -> None:
        self._show(self.branches)
        self.query_one("#search", Input).focus()

    def _show(self, branches: list[Branch]) -> None:
        self.matches = branches
        option_list = self.query_one("#branches", OptionList)
        option_list.clear_options()
        option_list.add_options([Option(describe(branch), id=branch.name) for branch in branches])
        if branches:
            option_list.highlighted = 0

    def on_input_changed(self, event: Input.Changed) -> None:
        self._show(search_branches(self.branches, event.value))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        highlighted = self.query_one("#branches", OptionList).highlighted
        if highlighted is not None and highlighted < len(self.matches):
            self.exit(self.matches[highlighted].name)

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.exit(event.option.id)

    def action_cursor_up(self) -> None:
        self.query_one("#branches", OptionList).action_cursor_up()

    def action_cursor_down(self) -> None:
        self.query_one("#branches", OptionList).action_cursor_down()


class BranchChecklist(PromptApp[list[str]]):
    """Multiple choice checklist. Space toggles, Enter confirms."""

    BINDINGS = [
        Binding("enter", "submit", "Confirm", priority=True),
    ]

    def __init__(self, message: str, branches: list[Branch]) -> None:
        super().__init__(message)
        self.branches = branches

    def compose(self) -> ComposeResult:
        yield Label(self.message, id="prompt")
        yield SelectionList[str](
            *[Selection(describe(branch), branch.name) for branch in self.branches],
            id="branches",
        )
        yield Footer()

    def on_mount(self) -> None:
        selection_list = self.query_one("#branches", SelectionList)
        selection_list.focus()
        if self.branches:
            selection_list.highlighted = 0

    def action_submit(self) -> None:
        selected = set(self.query_one("#branches", SelectionList).selected)
        # Report in list order, not toggle order
        self.exit([branch.name for branch in self.branches if branch.name in selected])


class ConfirmPrompt(PromptApp[bool]):
    """Yes/no question."""

    BINDINGS = [
        Binding("y", "answer(True)", "Yes"),
        Binding("n", "answer(False)", "No"),
        Binding("enter", "answer_default", "Default", show=False),
    ]

    def __init__(self, message: str, default: bool = False) -> None:
        super().__init__(message)
        self.default = default

    def compose(self) -> ComposeResult:
        yield Label(self.message, id="prompt")
        yield Label("[Y/n]" if self.default else "[y/N]", id="choices", markup=False)
        yield Footer()

    def action_answer(self, answer: bool) -> None:
        self.exit(answer)

    def action_answer_default(self) -> None:
        self.exit(self.default)


def run_prompt(app: PromptApp[ReturnType]) -> Optional[ReturnType]:
    """Run a prompt inline below the current terminal line."""
    return app.run(inline=True)
