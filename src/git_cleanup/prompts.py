"""Interactive prompts built on rich."""

import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt

Validator = Callable[[Any], Union[bool, str]]


class PromptAborted(Exception):
    """The user aborted an interactive prompt."""


class CancelToken:
    """Cancellation flag shared by the CLI and the deletion workflow."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise PromptAborted("Operation cancelled")


@dataclass(frozen=True)
class Choice:
    """An option in a list or checkbox prompt."""

    name: str
    value: Any


def _accept(_: Any) -> Union[bool, str]:
    return True


class Prompter:
    """Confirm, list, checkbox and text prompts with validation callbacks.

    A validator returns ``True`` to accept the answer; anything else is shown
    as an error and the question is asked again. Ctrl+C or end of input
    cancels the token and raises :class:`PromptAborted`.
    """

    def __init__(self, console: Console, token: Optional[CancelToken] = None) -> None:
        self.console = console
        self.token = token or CancelToken()

    def confirm(self, message: str, default: bool = False) -> bool:
        return self._read(lambda: Confirm.ask(message, console=self.console, default=default))

    def select(self, message: str, choices: list[Choice], default: Any = None) -> Any:
        """Single choice from a numbered list."""
        self._print_choices(message, choices)
        numbers = [str(i) for i in range(1, len(choices) + 1)]
        default_number = next((str(i) for i, c in enumerate(choices, 1) if c.value == default), numbers[0])
        answer = self._read(
            lambda: Prompt.ask("Choice", console=self.console, choices=numbers, default=default_number)
        )
        return choices[int(answer) - 1].value

    def checkbox(self, message: str, choices: list[Choice], validate: Validator = _accept) -> list[Any]:
        """Multiple choice from a numbered list; answers are comma or space separated numbers."""
        self._print_choices(message, choices)
        while True:
            raw = self._read(lambda: Prompt.ask("Numbers (e.g. 1,3)", console=self.console, default="", show_default=False))
            indices = self._parse_indices(raw, len(choices))
            if indices is None:
                self.console.print(f"[red]Please enter numbers between 1 and {len(choices)}.[/red]")
                continue
            selected = [choices[i].value for i in indices]
            if self._validated(selected, validate):
                return selected

    def text(self, message: str, validate: Validator = _accept) -> str:
        while True:
            answer = self._read(lambda: Prompt.ask(message, console=self.console, default="", show_default=False))
            if self._validated(answer, validate):
                return answer

    def _validated(self, answer: Any, validate: Validator) -> bool:
        result = validate(answer)
        if result is True:
            return True
        self.console.print(f"[red]>> {result}[/red]")
        return False

    def _read(self, ask: Callable[[], Any]) -> Any:
        self.token.raise_if_cancelled()
        try:
            return ask()
        except (KeyboardInterrupt, EOFError) as err:
            self.token.cancel()
            raise PromptAborted("Prompt closed by user") from err

    def _print_choices(self, message: str, choices: list[Choice]) -> None:
        self.console.print(f"[bold]{message}[/bold]")
        for number, choice in enumerate(choices, 1):
            self.console.print(f"  [cyan]{number})[/cyan] {escape(choice.name)}", highlight=False)

    @staticmethod
    def _parse_indices(raw: str, count: int) -> Optional[list[int]]:
        """Turn ``"1, 3 2"`` into sorted unique zero-based indices, or None if any entry is invalid."""
        indices: set[int] = set()
        for part in re.split(r"[,\s]+", raw.strip()):
            if not part:
                continue
            if not part.isdigit() or not 1 <= int(part) <= count:
                return None
            indices.add(int(part) - 1)
        return sorted(indices)
