"""Command line interface for git-cleanup."""

import signal
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Iterator, Optional

import typer
from rich import print
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typer.core import TyperCommand

from git_cleanup import __version__
from git_cleanup.analyzer import BranchAnalyzer, BranchInfo, Skipped
from git_cleanup.constants import (
    APP_NAME,
    DEFAULT_STALE_DAYS,
    DELETE_CONFIRMATION,
    EXITING_MESSAGE,
    NO_STALE_BRANCHES,
    STALE_DAYS_ENVVAR,
)
from git_cleanup.deletion import DeletionWorkflow
from git_cleanup.git import GitError, GitRepo
from git_cleanup.prompts import CancelToken, PromptAborted, Prompter
from git_cleanup.utils import get_filter_description

app = typer.Typer(name=APP_NAME, help="CLI tool to clean up stale git branches", no_args_is_help=True)
console = Console()

TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off"}


def version_callback(value: bool) -> None:
    if value:
        print(f"{APP_NAME} {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", "-V", callback=version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """CLI tool to clean up stale git branches."""


class ExplicitBoolCommand(TyperCommand):
    """Typer command that also accepts explicit values for on/off flags.

    ``--flag=true``, ``--flag=false``, ``--flag true`` and ``--flag false`` are
    rewritten to ``--flag`` or ``--no-flag`` before parsing, since the parser
    only understands the bare switches.
    """

    def switches(self) -> dict[str, tuple[str, str]]:
        """Map each on-switch of a boolean flag pair to its (on, off) spelling."""
        switches = {}
        for param in self.params:
            # Duck-typed: newer typer releases ship their own copy of the parser classes
            secondary = getattr(param, "secondary_opts", None)
            if getattr(param, "is_flag", False) and secondary:
                for opt in param.opts:
                    switches[opt] = (opt, secondary[0])
        return switches

    def parse_args(self, ctx: typer.Context, args: list[str]) -> list[str]:
        switches = self.switches()
        rewritten = []
        remaining = list(args)
        while remaining:
            arg = remaining.pop(0)
            if arg == "--":
                rewritten.append(arg)
                rewritten.extend(remaining)
                break

            name, sep, value = arg.partition("=")
            if sep and name in switches:
                arg = self.resolve(ctx, switches[name], name, value)
            elif arg in switches and remaining and self.is_bool_value(remaining[0]):
                arg = self.resolve(ctx, switches[arg], arg, remaining.pop(0))
            rewritten.append(arg)
        return super().parse_args(ctx, rewritten)

    @staticmethod
    def is_bool_value(value: str) -> bool:
        return value.lower() in TRUE_VALUES | FALSE_VALUES

    @staticmethod
    def resolve(ctx: typer.Context, switch: tuple[str, str], name: str, value: str) -> str:
        on, off = switch
        if value.lower() in TRUE_VALUES:
            return on
        if value.lower() in FALSE_VALUES:
            return off
        raise typer.BadParameter(f"expected true or false, got {value!r}", ctx=ctx, param_hint=name)


def get_repo(path: Path) -> GitRepo:
    """Get git repository instance."""
    try:
        return GitRepo(path)
    except GitError as err:
        print(f"[red]Error:[/red] {escape(str(err))}")
        raise typer.Exit(code=1) from err


@contextmanager
def cancel_on_sigterm(token: CancelToken) -> Iterator[None]:
    """Turn SIGTERM into a cancelled token for the duration of a command."""

    def handle(signum: int, frame: object) -> None:
        token.cancel()
        raise PromptAborted("Terminated")

    previous = signal.signal(signal.SIGTERM, handle)
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


def report_skip(skipped: Skipped) -> None:
    console.print(f"[dim]Skipping {escape(skipped.name)}: {escape(skipped.detail)}[/dim]", highlight=False)


def create_branch_table(branches: list[BranchInfo]) -> Table:
    """Create a table with one row per stale branch."""
    table = Table(
        show_header=True,
        header_style="bold",
        show_edge=True,
    )
    table.add_column("Branch", style="cyan", no_wrap=True)
    table.add_column("Last Commit", style="magenta", no_wrap=True)
    table.add_column("Merged", justify="center")
    table.add_column("Commits Behind Main", justify="right")

    for branch in branches:
        name = escape(branch.name)
        table.add_row(
            f"[yellow]* {name}[/yellow]" if branch.is_current else name,
            branch.last_commit_date.strftime("%Y-%m-%d"),
            "[green]Yes[/green]" if branch.is_merged else "[blue]No[/blue]",
            str(branch.commits_behind_main),
        )
    return table


@app.command("list", cls=ExplicitBoolCommand)
def list_branches(
    stale_days: int = typer.Option(
        DEFAULT_STALE_DAYS,
        "--stale-days",
        "-s",
        min=0,
        envvar=STALE_DAYS_ENVVAR,
        help="Number of days to consider a branch stale",
    ),
    merged: bool = typer.Option(
        False,
        "--merged/--no-merged",
        help="Only show branches merged into main (also accepts --merged=true/false)",
    ),
    my_branches: bool = typer.Option(False, "--my-branches", "-m", help="Only show branches you authored"),
    path: Annotated[Path, typer.Option(help="Path to git repository")] = Path("."),
) -> None:
    """List stale branches with analysis."""
    repo = get_repo(path)
    token = CancelToken()

    try:
        with cancel_on_sigterm(token):
            console.print(f"[blue]{get_filter_description(my_branches, merged, stale_days)}[/blue]")

            analyzer = BranchAnalyzer(repo, on_skip=report_skip)
            try:
                branches = analyzer.analyze(stale_days, merged_only=merged, my_branches_only=my_branches)
            except GitError as err:
                print(f"[red]Error:[/red] {escape(str(err))}")
                raise typer.Exit(code=1) from err

            if not branches:
                console.print(f"[green]{NO_STALE_BRANCHES}[/green]")
                return

            console.print(create_branch_table(branches))

            prompter = Prompter(console, token)
            if prompter.confirm(DELETE_CONFIRMATION, default=False):
                DeletionWorkflow(repo, prompter, console, token).run(branches)
    except (PromptAborted, KeyboardInterrupt):
        console.print(f"\n[bright_black]{EXITING_MESSAGE}[/bright_black]")
        raise typer.Exit(code=0) from None


if __name__ == "__main__":
    app()
