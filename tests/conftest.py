"""Test configuration and fixtures."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from io import StringIO
from pathlib import Path
from typing import Any, Callable, Generator, Optional

import pytest
from git import Actor, Repo
from rich.console import Console

from git_cleanup.git import BranchRef, CommitInfo, GitError, UserIdentity
from git_cleanup.prompts import Prompter

USER = Actor("Test User", "test@example.com")
OTHER = Actor("Other Dev", "other@example.com")


def days_ago(days: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)


def git_date(when: datetime) -> str:
    """Raw git date format, which GitPython passes through unchanged."""
    return f"{int(when.timestamp())} +0000"


@pytest.fixture
def test_repo(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a repository whose branches have known ages.

    Branches, most recently committed first:
        feature/fresh     1 day old, Test User, unmerged
        main             60 days old, Test User (checked out)
        feature/mine-old 100 days old, Test User, unmerged
        feature/legacy   300 days old, Other Dev, unmerged
        hotfix/old       400 days old, Test User, merged (points at main's first commit)
    """
    local_path = tmp_path / "local"
    local_path.mkdir()
    repo = Repo.init(local_path)
    repo.git.symbolic_ref("HEAD", "refs/heads/main")

    with repo.config_writer() as config:
        config.set_value("user", "name", USER.name)
        config.set_value("user", "email", USER.email)

    def commit(filename: str, message: str, author: Actor, age_days: int) -> None:
        path = local_path / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(message)
        repo.index.add([filename])
        when = git_date(days_ago(age_days))
        repo.index.commit(message, author=author, committer=author, author_date=when, commit_date=when)

    def branch_from(name: str, start: str, author: Actor, age_days: int) -> None:
        repo.create_head(name, start).checkout()
        commit(f"{name}.txt", f"Work on {name}", author, age_days)

    commit("README.md", "Initial commit", USER, 400)
    initial = repo.head.commit.hexsha
    repo.create_head("hotfix/old", initial)

    branch_from("feature/legacy", initial, OTHER, 300)
    branch_from("feature/mine-old", initial, USER, 100)

    repo.heads.main.checkout()
    commit("CHANGELOG.md", "Release notes", USER, 60)

    branch_from("feature/fresh", "main", USER, 1)
    repo.heads.main.checkout()

    yield local_path


@dataclass
class FakeBranch:
    """A branch as the fake git collaborator sees it."""

    name: str
    age_days: int
    author_name: str = USER.name
    author_email: str = USER.email
    merged: bool = False
    ahead: int = 0
    broken: bool = False


@dataclass
class FakeGit:
    """In-memory stand-in for GitRepo that records every query."""

    branches: list[FakeBranch]
    current: str = "main"
    user: UserIdentity = field(default_factory=lambda: UserIdentity(USER.name, USER.email))
    fail_delete: set[str] = field(default_factory=set)
    calls: list[tuple[str, ...]] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)

    def _find(self, name: str) -> Optional[FakeBranch]:
        return next((b for b in self.branches if b.name == name), None)

    def list_branch_refs(self) -> list[BranchRef]:
        self.calls.append(("list_branch_refs",))
        return [BranchRef(b.name, b.author_name, b.author_email) for b in self.branches]

    def get_current_branch_name(self) -> str:
        self.calls.append(("get_current_branch_name",))
        return self.current

    def get_user_identity(self) -> UserIdentity:
        self.calls.append(("get_user_identity",))
        return self.user

    def get_last_commit_info(self, branch_name: str) -> CommitInfo:
        self.calls.append(("get_last_commit_info", branch_name))
        branch = self._find(branch_name)
        if branch is None or branch.broken:
            raise GitError(f"Error running git command: git log -1 {branch_name}")
        return CommitInfo(hash="a" * 40, date=days_ago(branch.age_days))

    def is_branch_merged(self, branch_name: str, target: str = "main") -> bool:
        self.calls.append(("is_branch_merged", branch_name))
        branch = self._find(branch_name)
        return bool(branch and branch.merged)

    def get_commits_behind_main(self, branch_name: str, target: str = "main") -> int:
        self.calls.append(("get_commits_behind_main", branch_name))
        branch = self._find(branch_name)
        return branch.ahead if branch else 0

    def delete_branch(self, branch_name: str, force: bool = True) -> None:
        self.calls.append(("delete_branch", branch_name))
        if branch_name in self.fail_delete or branch_name == self.current:
            raise GitError(f"Failed to delete branch {branch_name}: refused", detail="refused")
        self.deleted.append(branch_name)


class ScriptedPrompter(Prompter):
    """Prompter that answers from a script instead of the terminal.

    Answers are the raw strings (or bools, for confirm) a user would type.
    Running out of answers behaves like Ctrl+D.
    """

    def __init__(self, answers: list[Any], console: Console) -> None:
        super().__init__(console)
        self.answers = list(answers)
        self.asked = 0

    def _read(self, ask: Callable[[], Any]) -> Any:
        def scripted() -> Any:
            self.asked += 1
            if not self.answers:
                raise EOFError
            answer = self.answers.pop(0)
            if isinstance(answer, BaseException):
                raise answer
            return answer

        return super()._read(scripted)


@pytest.fixture
def output() -> StringIO:
    return StringIO()


@pytest.fixture
def console(output: StringIO) -> Console:
    return Console(file=output, width=200, color_system=None)
