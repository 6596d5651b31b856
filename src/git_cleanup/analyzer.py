"""Stale branch analysis."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional, Union

from git_cleanup.constants import REFERENCE_BRANCH
from git_cleanup.git import BranchRef, GitError, GitRepo, UserIdentity


class SkipReason(Enum):
    """Why a branch was left out of the analysis result."""

    NOT_STALE = "not stale"
    NOT_MERGED = "not merged"
    NOT_MINE = "not authored by you"
    LOOKUP_FAILED = "lookup failed"


@dataclass(frozen=True)
class BranchInfo:
    """A stale branch that passed every active filter.

    ``commits_behind_main`` holds ``rev-list --count main..<branch>``, which
    counts commits on the branch that main does not have.
    """

    name: str
    last_commit_date: datetime
    last_commit_hash: Optional[str]
    is_merged: bool
    commits_behind_main: int
    is_stale: bool
    is_current: bool


@dataclass(frozen=True)
class Skipped:
    """A branch excluded from the result."""

    name: str
    reason: SkipReason
    detail: str = ""


BranchOutcome = Union[BranchInfo, Skipped]


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


class BranchAnalyzer:
    """Compute staleness, merge status and authorship for local branches."""

    def __init__(
        self,
        repo: GitRepo,
        reference_branch: str = REFERENCE_BRANCH,
        clock: Callable[[], datetime] = now_utc,
        on_skip: Optional[Callable[[Skipped], None]] = None,
    ) -> None:
        """Initialize analyzer.

        Args:
            repo: Git collaborator every query goes through
            reference_branch: Branch merges and divergence are measured against
            clock: Source of the current time
            on_skip: Called by :meth:`analyze` for each branch whose lookup failed
        """
        self.repo = repo
        self.reference_branch = reference_branch
        self.clock = clock
        self.on_skip = on_skip

    def analyze(self, stale_days: int, merged_only: bool = False, my_branches_only: bool = False) -> list[BranchInfo]:
        """Return the stale branches matching the filters, most recently committed first."""
        branches = []
        for outcome in self.evaluate(stale_days, merged_only, my_branches_only):
            if isinstance(outcome, BranchInfo):
                branches.append(outcome)
            elif outcome.reason is SkipReason.LOOKUP_FAILED and self.on_skip is not None:
                self.on_skip(outcome)
        return branches

    def evaluate(self, stale_days: int, merged_only: bool = False, my_branches_only: bool = False) -> list[BranchOutcome]:
        """Analyze every local branch and return one outcome per branch, in ref order."""
        if stale_days < 0:
            raise ValueError(f"stale_days must be >= 0, got {stale_days}")

        refs = self.repo.list_branch_refs()
        current = self.repo.get_current_branch_name()
        user = self.repo.get_user_identity() if my_branches_only else None
        cutoff = self.clock() - timedelta(days=stale_days)

        return [self._evaluate_branch(ref, current, cutoff, merged_only, user) for ref in refs]

    def _evaluate_branch(
        self,
        ref: BranchRef,
        current: str,
        cutoff: datetime,
        merged_only: bool,
        user: Optional[UserIdentity],
    ) -> BranchOutcome:
        try:
            commit = self.repo.get_last_commit_info(ref.name)
        except GitError as err:
            return Skipped(ref.name, SkipReason.LOOKUP_FAILED, str(err))

        # Merge and divergence queries are only worth running for stale branches
        if not commit.date < cutoff:
            return Skipped(ref.name, SkipReason.NOT_STALE)

        is_merged = self.repo.is_branch_merged(ref.name, self.reference_branch)
        if merged_only and not is_merged:
            return Skipped(ref.name, SkipReason.NOT_MERGED)

        if user is not None and not is_authored_by(ref, user):
            return Skipped(ref.name, SkipReason.NOT_MINE)

        return BranchInfo(
            name=ref.name,
            last_commit_date=commit.date,
            last_commit_hash=commit.hash,
            is_merged=is_merged,
            commits_behind_main=self.repo.get_commits_behind_main(ref.name, self.reference_branch),
            is_stale=True,
            is_current=ref.name == current,
        )


def is_authored_by(ref: BranchRef, user: UserIdentity) -> bool:
    """Match on name or email; an empty configured value never matches."""
    if user.name and ref.author_name == user.name:
        return True
    return bool(user.email) and ref.author_email == user.email
