"""Pure branch filtering and display logic."""

from rich.text import Text

from swagit.git import Branch


def is_remote_tracking(branch: Branch) -> bool:
    """Check if a branch is a remote-tracking reference rather than a local branch."""
    return branch.remote or branch.name.startswith("remotes/")


def filter_selectable(branches: list[Branch]) -> list[Branch]:
    """Drop the current branch and remote-tracking references.

    Order is preserved. Returns an empty list when nothing is left; the
    caller decides whether that is fatal.
    """
    return [branch for branch in branches if not branch.is_current and not is_remote_tracking(branch)]


def fuzzy_match(name: str, query: str) -> bool:
    """Case-insensitive match of ``query`` characters appearing in order in ``name``."""
    name = name.lower()
    position = 0
    for char in query.lower():
        position = name.find(char, position)
        if position == -1:
            return False
        position += 1
    return True


def search_branches(branches: list[Branch], query: str) -> list[Branch]:
    """Filter branches by name as the user types.

    Args:
        branches: Candidate branches
        query: Search query string

    Returns:
        Matching branches in their listed order.
        Returns all branches if query is empty.
    """
    query = query.strip()
    if not query:
        return branches
    return [branch for branch in branches if fuzzy_match(branch.name, query)]


def describe(branch: Branch) -> Text:
    """Display label for a branch: name, short commit and commit subject."""
    text = Text(branch.name, style="bold")
    if branch.short_commit:
        text.append(f" [{branch.short_commit}]", style="yellow")
    if branch.label:
        text.append(f" {branch.label}", style="dim")
    return text
