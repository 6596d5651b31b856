"""Defaults and user-facing texts."""

APP_NAME = "git-cleanup"

REFERENCE_BRANCH = "main"
DEFAULT_STALE_DAYS = 30
STALE_DAYS_ENVVAR = "GIT_CLEANUP_STALE_DAYS"

EXITING_MESSAGE = "Exiting..."

FILTER_DESCRIPTIONS = {
    "all_branches": "branches",
    "merged_only": "merged branches",
    "my_branches_only": "your branches",
    "my_merged_branches": "your merged branches",
}

NO_STALE_BRANCHES = "No stale branches found.\n"
NO_DELETABLE_BRANCHES = "\n⚠️  No branches available for deletion (current branch cannot be deleted).\n"
BRANCH_DELETION_COMPLETED = "\n🎉 Branch deletion completed!\n"

DELETE_CONFIRMATION = "Would you like to delete any of these stale branches?"
DELETION_METHOD = "How would you like to delete the stale branches?"
SELECT_BRANCHES = "Select branches to delete:"
BRANCH_SELECTION_REQUIRED = "You must choose at least one branch to delete."
TYPE_DELETE_TO_CONFIRM = "delete"

INTERACTIVE_METHOD_LABEL = "📋 Interactively choose specific branches to delete"
ALL_METHOD_LABEL = "🗑️  Delete all {count} stale branches"
