"""Interactive deletion of analyzed branches."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from rich.console import Console
from rich.markup import escape

from git_cleanup.analyzer import BranchInfo
from git_cleanup.constants import (
    ALL_METHOD_LABEL,
    BRANCH_DELETION_COMPLETED,
    BRANCH_SELECTION_REQUIRED,
    DELETION_METHOD,
    INTERACTIVE_METHOD_LABEL,
    NO_DELETABLE_BRANCHES,
    SELECT_BRANCHES,
    TYPE_DELETE_TO_CONFIRM,
)
from git_cleanup.git import GitError, GitRepo
from git_cleanup.prompts import CancelToken, Choice, Prompter
from git_cleanup.utils import pluralize


class DeletionMethod(Enum):
    """How the user wants to pick branches."""

    INTERACTIVE = "interactive"
    ALL = "all"


@dataclass(frozen=True)
class DeletionOutcome:
    """Result of one delete attempt."""

    branch: str
    deleted: bool
    error: Optional[str] = None


def deletable_branch_names(branches: list[BranchInfo]) -> list[str]:
    """Names of every branch except the checked out one, which git refuses to delete."""
    return [branch.name for branch in branches if not branch.is_current]


def validate_selection(answer: list[str]) -> Union[bool, str]:
    if not answer:
        return BRANCH_SELECTION_REQUIRED
    return True


def validate_confirmation(answer: str) -> Union[bool, str]:
    if answer.strip().lower() == TYPE_DELETE_TO_CONFIRM.lower():
        return True
    return f"You must type '{TYPE_DELETE_TO_CONFIRM}' to confirm this action."


class DeletionWorkflow:
    """Choose method, select branches, type ``delete``, then delete each one.

    A failed delete is reported and the loop moves on to the next branch.
    :class:`~git_cleanup.prompts.PromptAborted` propagates out of :meth:`run`
    and stops the workflow where it is.
    """

    def __init__(
        self,
        repo: GitRepo,
        prompter: Prompter,
        console: Console,
        token: Optional[CancelToken] = None,
        force: bool = True,
    ) -> None:
        self.repo = repo
        self.prompter = prompter
        self.console = console
        self.token = token or prompter.token
        self.force = force

    def run(self, branches: list[BranchInfo]) -> list[DeletionOutcome]:
        method = self.choose_method(branches)
        if method is DeletionMethod.INTERACTIVE:
            candidates = self.select_interactively(branches)
        else:
            candidates = self.select_all(branches)

        if not candidates:
            return []

        self.confirm_deletion(len(candidates))
        self.console.print(f"[yellow]\n🗑️  Deleting {pluralize('branch', len(candidates))}...\n[/yellow]")
        return self.delete_branches(candidates)

    def choose_method(self, branches: list[BranchInfo]) -> DeletionMethod:
        self.token.raise_if_cancelled()
        choices = [
            Choice(INTERACTIVE_METHOD_LABEL, DeletionMethod.INTERACTIVE),
            Choice(ALL_METHOD_LABEL.format(count=len(branches)), DeletionMethod.ALL),
        ]
        return self.prompter.select(DELETION_METHOD, choices, default=DeletionMethod.INTERACTIVE)

    def select_interactively(self, branches: list[BranchInfo]) -> list[str]:
        self.token.raise_if_cancelled()
        deletable = [branch for branch in branches if not branch.is_current]
        if not deletable:
            self.console.print(f"[yellow]{NO_DELETABLE_BRANCHES}[/yellow]")
            return []

        choices = [
            Choice(f"{branch.name} ({'merged' if branch.is_merged else 'not merged'})", branch.name)
            for branch in deletable
        ]
        return self.prompter.checkbox(SELECT_BRANCHES, choices, validate=validate_selection)

    def select_all(self, branches: list[BranchInfo]) -> list[str]:
        self.token.raise_if_cancelled()
        names = deletable_branch_names(branches)
        if not names:
            self.console.print(f"[yellow]{NO_DELETABLE_BRANCHES}[/yellow]")
        return names

    def confirm_deletion(self, branch_count: int) -> str:
        """Block until the user types ``delete``; any other answer asks again."""
        self.token.raise_if_cancelled()
        message = (
            f"This will delete {pluralize('branch', branch_count)}. "
            f"Type '[red]{TYPE_DELETE_TO_CONFIRM}[/red]' to confirm"
        )
        return self.prompter.text(message, validate=validate_confirmation)

    def delete_branches(self, branch_names: list[str]) -> list[DeletionOutcome]:
        outcomes = []
        for branch_name in branch_names:
            self.token.raise_if_cancelled()
            try:
                self.repo.delete_branch(branch_name, force=self.force)
            except GitError as err:
                reason = err.detail or str(err)
                self.console.print(f"[red]❌ Failed to delete branch: {escape(branch_name)} - {escape(reason)}[/red]", highlight=False)
                outcomes.append(DeletionOutcome(branch_name, deleted=False, error=reason))
                continue
            self.console.print(f"[green]✅ Deleted branch: {escape(branch_name)}[/green]", highlight=False)
            outcomes.append(DeletionOutcome(branch_name, deleted=True))

        self.console.print(f"[green]{BRANCH_DELETION_COMPLETED}[/green]")
        return outcomes
