"""Git repository operations."""

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from git_cleanup.constants import REFERENCE_BRANCH

# Tab separated so author names containing spaces or pipes survive the split
BRANCH_REF_FORMAT = "%(refname:short)%09%(authorname)%09%(authoremail:trim)"
LAST_COMMIT_FORMAT = "%H%x09%cI"

# GitCommandError.stderr arrives as "\n  stderr: '<text>'"
STDERR_FRAME = re.compile(r"^\s*stderr: '(?P<text>.*)'\s*$", re.DOTALL)


class GitError(Exception):
    """Git operation error."""

    def __init__(self, message: str, command: Optional[str] = None, detail: Optional[str] = None) -> None:
        """Initialize error.

        Args:
            message: Error message
            command: The git command line that failed, if any
            detail: What git itself printed on stderr, if anything
        """
        super().__init__(message)
        self.command = command
        self.detail = detail


def git_stderr(err: GitCommandError) -> str:
    """Return the stderr git printed, without GitPython's framing."""
    stderr = str(err.stderr or "")
    match = STDERR_FRAME.match(stderr)
    return (match.group("text") if match else stderr).strip()


@dataclass(frozen=True)
class BranchRef:
    """A local branch together with the author of its tip commit."""

    name: str
    author_name: str
    author_email: str


@dataclass(frozen=True)
class CommitInfo:
    """Tip commit of a branch."""

    hash: Optional[str]
    date: datetime


@dataclass(frozen=True)
class UserIdentity:
    """The user configured in git; either field may be empty."""

    name: str = ""
    email: str = ""


class GitRepo:
    """Git repository operations.

    Every query goes through :meth:`run`, so a test double only has to
    provide that one method plus whichever helpers it wants to override.
    """

    def __init__(self, path: Path) -> None:
        """Initialize repository."""
        try:
            self.repo: Repo = Repo(path, search_parent_directories=True)
            if self.repo.bare:
                raise GitError("Cannot operate on bare repository")
        except (GitCommandError, ValueError, InvalidGitRepositoryError, NoSuchPathError) as err:
            raise GitError(f"Failed to open repository: {err}") from err

    def run(self, *args: str) -> str:
        """Run ``git <args>`` and return its trimmed stdout.

        Raises:
            GitError: If git exits with a non-zero status
        """
        command = " ".join(("git", *args))
        try:
            output = self.repo.git.execute(["git", *args])
        except GitCommandError as err:
            stderr = git_stderr(err)
            message = f"Error running git command: {command}"
            if stderr:
                message = f"{message}: {stderr}"
            raise GitError(message, command=command, detail=stderr or None) from err
        return str(output).strip()

    def list_branch_refs(self) -> list[BranchRef]:
        """Get all local branches with their tip author, most recently committed first."""
        output = self.run(
            "for-each-ref",
            "--sort=-committerdate",
            f"--format={BRANCH_REF_FORMAT}",
            "refs/heads/",
        )
        refs = []
        for line in output.splitlines():
            if not line.strip():
                continue
            name, _, rest = line.partition("\t")
            author_name, _, author_email = rest.partition("\t")
            refs.append(BranchRef(name=name, author_name=author_name, author_email=author_email))
        return refs

    def get_current_branch_name(self) -> str:
        """Get current branch name, or an empty string on a detached HEAD."""
        return self.run("branch", "--show-current")

    def get_user_identity(self) -> UserIdentity:
        """Get the configured user name and email.

        Unset values come back as empty strings rather than raising.
        """
        return UserIdentity(name=self._get_config("user.name"), email=self._get_config("user.email"))

    def _get_config(self, key: str) -> str:
        try:
            return self.run("config", key)
        except GitError:
            return ""

    def get_last_commit_info(self, branch_name: str) -> CommitInfo:
        """Get hash and commit date of the branch tip.

        Raises:
            GitError: If the branch does not resolve to a commit
        """
        output = self.run("log", "-1", f"--format={LAST_COMMIT_FORMAT}", branch_name, "--")
        commit_hash, _, date = output.partition("\t")
        try:
            commit_date = datetime.fromisoformat(date.strip())
        except ValueError as err:
            raise GitError(f"Unexpected commit date for {branch_name}: {date!r}") from err
        return CommitInfo(hash=commit_hash or None, date=commit_date)

    def is_branch_merged(self, branch_name: str, target: str = REFERENCE_BRANCH) -> bool:
        """Check whether the branch tip is an ancestor of ``target``.

        Any failure, including a missing branch, counts as not merged.
        """
        try:
            self.run("merge-base", "--is-ancestor", branch_name, target)
        except GitError:
            return False
        return True

    def get_commits_behind_main(self, branch_name: str, target: str = REFERENCE_BRANCH) -> int:
        """Count commits in ``target..branch``, i.e. commits on the branch that ``target`` lacks.

        Returns 0 when the count cannot be determined.
        """
        try:
            return int(self.run("rev-list", "--count", f"{target}..{branch_name}"))
        except (GitError, ValueError):
            return 0

    def delete_branch(self, branch_name: str, force: bool = True) -> None:
        """Delete a local branch.

        Raises:
            GitError: If git refuses, e.g. for the checked out branch or,
                without ``force``, for an unmerged one
        """
        try:
            self.run("branch", "-D" if force else "-d", branch_name)
        except GitError as err:
            cause = err.detail or f"git exited with an error running {err.command}"
            raise GitError(f"Failed to delete branch {branch_name}: {cause}", command=err.command, detail=err.detail) from err
