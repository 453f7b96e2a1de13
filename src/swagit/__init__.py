"""Interactive git branch switcher.

Features:
- Checkout a branch by searching for it as you type
- Pick several branches and delete them after confirmation
- Sync with a remote and clean up merged branches
"""

__version__ = "0.3.0"
