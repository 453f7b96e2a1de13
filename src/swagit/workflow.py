"""Branch selection and confirmation workflow.

Turns the repository's branches into user-confirmed checkout, delete or
sync operations. Every path ends in an ``Outcome``; only the CLI decides
how to exit.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from rich.markup import escape

from swagit import messages
from swagit.branches import filter_selectable
from swagit.config import Config, Mode
from swagit.git import Branch, BranchDeleteError, GitError, GitRepo, NotARepositoryError, SyncStatus
from swagit.prompts import CancelToken, Prompter

logger = logging.getLogger(__name__)

NOT_A_REPOSITORY = "Not a git repository (or any of the parent directories)"
NO_BRANCHES = "No other branches in the repository"


class State(Enum):
    """Workflow state."""

    IDLE = "idle"
    PROMPTING = "prompting"
    CONFIRMING = "confirming"
    EXECUTING = "executing"
    DONE = "done"
    ABORTED = "aborted"


class OutcomeKind(Enum):
    """How a run ended."""

    SUCCESS = "success"
    ABORTED = "aborted"
    PRECONDITION_FAILED = "precondition_failed"
    OPERATION_FAILED = "operation_failed"


@dataclass(frozen=True)
class Outcome:
    """Result of a workflow run. ``message`` is plain text."""

    kind: OutcomeKind
    message: str = ""
    branches: tuple[str, ...] = ()

    @property
    def exit_code(self) -> int:
        return 0 if self.kind in (OutcomeKind.SUCCESS, OutcomeKind.ABORTED) else 1

    @classmethod
    def success(cls, message: str, branches: tuple[str, ...] = ()) -> "Outcome":
        return cls(OutcomeKind.SUCCESS, message, branches)

    @classmethod
    def aborted(cls, message: str = "") -> "Outcome":
        return cls(OutcomeKind.ABORTED, message)

    @classmethod
    def precondition_failed(cls, message: str) -> "Outcome":
        return cls(OutcomeKind.PRECONDITION_FAILED, message)

    @classmethod
    def operation_failed(cls, message: str, branches: tuple[str, ...] = ()) -> "Outcome":
        return cls(OutcomeKind.OPERATION_FAILED, message, branches)


def pluralize(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def delete_confirmation_message(names: list[str]) -> str:
    """Build the confirmation question for deleting ``names``."""
    if len(names) == 1:
        suffix = "this branch?"
    else:
        suffix = f"those {len(names)} branches?"
    listing = escape(", ".join(names))
    return f"Are you sure you want to [bold yellow]DELETE[/bold yellow] {suffix}\n  {listing}"


SYNC_LINES = {
    SyncStatus.UPDATED: "[green]✓[/green] Updated branch [green]{name}[/green] (fast-forward)",
    SyncStatus.BEHIND: "[yellow]![/yellow] Branch {name} is behind its upstream",
    SyncStatus.AHEAD: "[yellow]![/yellow] Branch {name} has unpushed commits",
    SyncStatus.DIVERGED: "[yellow]![/yellow] Branch {name} has diverged from its upstream",
    SyncStatus.MERGED: "[yellow]![/yellow] Branch {name} was merged to the default branch",
    SyncStatus.GONE: "[red]![/red] Branch {name} was deleted on remote but not merged",
}


class BranchWorkflow:
    """Drives one checkout, delete or sync run against a repository."""

    def __init__(self, repo: GitRepo, prompter: Prompter, remote: str = "origin") -> None:
        self.repo = repo
        self.prompter = prompter
        self.remote = remote
        self.state = State.IDLE

    def _transition(self, state: State) -> None:
        logger.debug("workflow %s -> %s", self.state.value, state.value)
        self.state = state

    def _abort(self, message: str = "") -> Outcome:
        self._transition(State.ABORTED)
        return Outcome.aborted(message)

    def _fail(self, outcome: Outcome) -> Outcome:
        self._transition(State.ABORTED)
        return outcome

    def _check_current_branch(self) -> Optional[Outcome]:
        """Report the current branch, or return the failure that stops the run."""
        try:
            current = self.repo.current_branch()
        except NotARepositoryError as err:
            logger.debug("current branch lookup failed: %s", err)
            return self._fail(Outcome.precondition_failed(err.message))
        messages.info(f"Current branch is [magenta]{escape(current)}[/magenta]")
        return None

    def _prepare(self) -> tuple[list[Branch], Optional[Outcome]]:
        """Resolve the selectable branches.

        Returns (selectable, failure); ``failure`` is set when the run has
        to stop before any prompt.
        """
        failure = self._check_current_branch()
        if failure:
            return [], failure

        try:
            selectable = filter_selectable(self.repo.list_branches())
        except GitError as err:
            return [], self._fail(Outcome.operation_failed(err.message))
        if not selectable:
            return [], self._fail(Outcome.precondition_failed(NO_BRANCHES))
        logger.debug("%d selectable branches", len(selectable))
        return selectable, None

    def run(self, mode: Mode) -> Outcome:
        """Run the flow for ``mode``."""
        handlers: dict[Mode, Callable[[], Outcome]] = {
            Mode.CHECKOUT: self.checkout,
            Mode.DELETE: self.delete,
            Mode.SYNC: self.sync,
        }
        return handlers[mode]()

    def checkout(self) -> Outcome:
        """Pick one branch and switch to it. Checkout is never confirmed."""
        branches, failure = self._prepare()
        if failure:
            return failure

        self._transition(State.PROMPTING)
        cancel = CancelToken()
        branch = self.prompter.select_branch("Which branch do you want to checkout?", branches, cancel)
        if cancel.cancelled or branch is None:
            return self._abort()

        self._transition(State.EXECUTING)
        try:
            self.repo.checkout(branch)
        except GitError as err:
            return self._fail(Outcome.operation_failed(err.message, (branch,)))

        self._transition(State.DONE)
        return Outcome.success(f"Checkout current branch to {branch}", (branch,))

    def delete(self) -> Outcome:
        """Tick branches, confirm, then force delete them in one batch."""
        branches, failure = self._prepare()
        if failure:
            return failure

        self._transition(State.PROMPTING)
        cancel = CancelToken()
        selected = self.prompter.select_branches("Which branches do you want to delete?", branches, cancel)
        if cancel.cancelled:
            return self._abort()
        if not selected:
            return self._abort("No branch selected, exit.")

        self._transition(State.CONFIRMING)
        confirmed = self.prompter.confirm(delete_confirmation_message(selected), cancel)
        if cancel.cancelled:
            return self._abort()
        if not confirmed:
            return self._abort("No branches were deleted")

        return self._delete(selected)

    def _delete(self, names: list[str], kind: str = "") -> Outcome:
        self._transition(State.EXECUTING)
        try:
            deleted = self.repo.delete_branches(names)
        except BranchDeleteError as err:
            message = err.message
            if err.deleted:
                message += f"\n{len(err.deleted)} of {len(names)} branches were deleted"
            return self._fail(Outcome.operation_failed(message, tuple(err.deleted)))
        except GitError as err:
            return self._fail(Outcome.operation_failed(err.message))

        self._transition(State.DONE)
        noun = pluralize(len(deleted), "branch", "branches")
        return Outcome.success(f"Deleted {len(deleted)} {kind}{noun}", tuple(deleted))

    def sync(self) -> Outcome:
        """Fetch, report how local branches relate to their upstreams, then offer to delete merged ones."""
        failure = self._check_current_branch()
        if failure:
            return failure
        messages.info(f"Syncing with {escape(self.remote)}...")

        try:
            self.repo.fetch(self.remote)
            default = self.repo.default_branch(self.remote)
            for name, status in self.repo.sync_status(default):
                messages.console.print(SYNC_LINES[status].format(name=escape(name)), soft_wrap=True)
            merged = [
                branch for branch in filter_selectable(self.repo.merged_branches(default)) if branch.name != default
            ]
        except GitError as err:
            return self._fail(Outcome.operation_failed(err.message))

        if not merged:
            self._transition(State.DONE)
            return Outcome.success("No merged branches to clean up")

        count = len(merged)
        messages.console.print(f"\nFound {count} merged {pluralize(count, 'branch', 'branches')} that can be deleted:")
        for branch in merged:
            messages.console.print(f"  {branch.name} [{branch.short_commit or ''}]", markup=False, soft_wrap=True)

        self._transition(State.CONFIRMING)
        cancel = CancelToken()
        question = pluralize(count, "this merged branch", f"these {count} merged branches")
        confirmed = self.prompter.confirm(f"Do you want to delete {question}?", cancel)
        if cancel.cancelled:
            return self._abort()
        if not confirmed:
            return self._abort("No branches were deleted")

        return self._delete([branch.name for branch in merged], "merged ")


def run(
    config: Config,
    prompter: Prompter,
    repo_factory: Callable[[Path], GitRepo] = GitRepo,
) -> Outcome:
    """Open the repository at ``config.path`` and run the configured flow."""
    try:
        repo = repo_factory(config.path)
    except NotARepositoryError as err:
        logger.debug("failed to open repository: %s", err)
        return Outcome.precondition_failed(NOT_A_REPOSITORY)

    return BranchWorkflow(repo, prompter, remote=config.remote).run(config.mode)
