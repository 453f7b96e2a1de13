"""Prompt abstraction for testability.

The workflow talks to a ``Prompter`` instead of Textual directly, so routing
and confirmation logic can be tested without starting the Textual event loop.
"""

from abc import ABC, abstractmethod
from typing import Optional

from swagit.git import Branch
from swagit.tui import BranchChecklist, BranchPicker, ConfirmPrompt, PromptApp, ReturnType, run_prompt


class CancelToken:
    """Cancellation signal handed to a single prompt call."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class Prompter(ABC):
    """Abstract interface for asking the user questions.

    Every method takes a ``CancelToken``. When the user cancels, the prompt
    sets the token and returns an empty answer.
    """

    @abstractmethod
    def select_branch(self, message: str, branches: list[Branch], cancel: CancelToken) -> Optional[str]:
        """Let the user pick one branch, searching by name as they type."""
        ...

    @abstractmethod
    def select_branches(self, message: str, branches: list[Branch], cancel: CancelToken) -> list[str]:
        """Let the user tick any number of branches."""
        ...

    @abstractmethod
    def confirm(self, message: str, cancel: CancelToken, default: bool = False) -> bool:
        """Ask a yes/no question."""
        ...


class TextualPrompter(Prompter):
    """Production implementation that runs a Textual app per prompt."""

    def _run(self, app: PromptApp[ReturnType], cancel: CancelToken) -> Optional[ReturnType]:
        result = run_prompt(app)
        # Quitting the app any other way than answering counts as a cancel too
        if app.cancelled or result is None:
            cancel.cancel()
            return None
        return result

    def select_branch(self, message: str, branches: list[Branch], cancel: CancelToken) -> Optional[str]:
        return self._run(BranchPicker(message, branches), cancel)

    def select_branches(self, message: str, branches: list[Branch], cancel: CancelToken) -> list[str]:
        return self._run(BranchChecklist(message, branches), cancel) or []

    def confirm(self, message: str, cancel: CancelToken, default: bool = False) -> bool:
        return bool(self._run(ConfirmPrompt(message, default), cancel))


class FakePrompter(Prompter):
    """Test implementation that answers from a script.

    Args:
        selection: Answer for ``select_branch``
        selections: Answer for ``select_branches``
        confirmation: Answer for ``confirm``
        cancel_on: Prompt kind (``"select"``, ``"checklist"`` or ``"confirm"``)
            at which the user presses Escape
    """

    def __init__(
        self,
        selection: Optional[str] = None,
        selections: Optional[list[str]] = None,
        confirmation: bool = False,
        cancel_on: Optional[str] = None,
    ) -> None:
        self.selection = selection
        self.selections = selections or []
        self.confirmation = confirmation
        self.cancel_on = cancel_on
        self._prompts: list[tuple[str, str, list[str]]] = []

    @property
    def prompts(self) -> list[tuple[str, str, list[str]]]:
        """(kind, message, branch names) for every prompt shown.

        This property is for test assertions only.
        """
        return self._prompts

    def _record(self, kind: str, message: str, branches: list[Branch], cancel: CancelToken) -> bool:
        self._prompts.append((kind, message, [branch.name for branch in branches]))
        if self.cancel_on == kind:
            cancel.cancel()
            return False
        return True

    def select_branch(self, message: str, branches: list[Branch], cancel: CancelToken) -> Optional[str]:
        if not self._record("select", message, branches, cancel):
            return None
        return self.selection

    def select_branches(self, message: str, branches: list[Branch], cancel: CancelToken) -> list[str]:
        if not self._record("checklist", message, branches, cancel):
            return []
        return list(self.selections)

    def confirm(self, message: str, cancel: CancelToken, default: bool = False) -> bool:
        if not self._record("confirm", message, [], cancel):
            return False
        return self.confirmation
