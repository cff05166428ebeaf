"""Internal pygit2 constants - keeps trivia out of public modules."""

from __future__ import annotations

import pygit2
import pygit2.enums

# Working tree status flags
STATUS_WT_NEW = pygit2.GIT_STATUS_WT_NEW
STATUS_WT_MODIFIED = pygit2.GIT_STATUS_WT_MODIFIED
STATUS_WT_DELETED = pygit2.GIT_STATUS_WT_DELETED
STATUS_WT_TYPECHANGE = pygit2.GIT_STATUS_WT_TYPECHANGE
STATUS_WT_RENAMED = pygit2.GIT_STATUS_WT_RENAMED
STATUS_IGNORED = pygit2.GIT_STATUS_IGNORED

# Reset modes
RESET_HARD = pygit2.GIT_RESET_HARD

# Checkout strategies
CHECKOUT_FORCE = pygit2.enums.CheckoutStrategy.FORCE

# HEAD-to-workdir diffs include new files and their content
DIFF_WORKDIR_FLAGS = (
    pygit2.enums.DiffOption.INCLUDE_UNTRACKED
    | pygit2.enums.DiffOption.RECURSE_UNTRACKED_DIRS
    | pygit2.enums.DiffOption.SHOW_UNTRACKED_CONTENT
)
