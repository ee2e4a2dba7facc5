"""
Operator prompts.

The sync manager asks questions through a :class:`Prompter` so that the
interactive flows can be driven by scripted answers in tests.
"""

import re
from collections.abc import Callable
from enum import Enum
from typing import Protocol

from rich.prompt import Confirm, IntPrompt, Prompt

from crules.utils.file_ops import FileInfo
from crules.utils.rich_console import get_console, print_error, print_table


class SetupChoice(Enum):
    """What to do when the main location is missing or holds no rules."""

    CREATE_EMPTY = "Create empty directory structure"
    FETCH_REMOTE = "Fetch from git repository"
    CANCEL = "Cancel operation"


SETUP_CHOICES = [SetupChoice.CREATE_EMPTY, SetupChoice.FETCH_REMOTE, SetupChoice.CANCEL]

_REPO_URL_PATTERNS = [
    re.compile(r"^(https?|ssh|git|file)://\S+$", re.IGNORECASE),
    re.compile(r"^[\w.\-]+@[\w.\-]+:[\w./\-~]+$"),
]


def validate_repo_url(value: str) -> str:
    """Validate a git repository URL.

    Accepts ``http(s)://``, ``ssh://``, ``git://`` and ``file://`` URLs and
    scp-style ``user@host:path`` addresses.

    Raises:
        ValueError: If the value does not look like a repository URL
    """
    value = (value or "").strip()
    if not value:
        raise ValueError("Repository URL cannot be empty")
    if not any(pattern.match(value) for pattern in _REPO_URL_PATTERNS):
        raise ValueError(f"Invalid repository URL: {value}")
    return value


class Prompter(Protocol):
    """Operator I/O used by the sync manager."""

    def confirm(self, question: str) -> bool: ...

    def choose_one(self, prompt: str, options: list[str]) -> int: ...

    def prompt_text(self, prompt: str, default: str, validator: Callable[[str], str] | None = None) -> str: ...

    def choose_setup(self) -> SetupChoice: ...

    def show_files(self, title: str, files: list[FileInfo]) -> None: ...


class RichPrompter:
    """Interactive prompts on the terminal using rich."""

    def __init__(self, console=None):
        self.console = console or get_console()

    def confirm(self, question: str) -> bool:
        return Confirm.ask(question, default=False, console=self.console)

    def choose_one(self, prompt: str, options: list[str]) -> int:
        """Show numbered options and return the zero-based index picked."""
        print_table(["#", "Option"], [[i + 1, option] for i, option in enumerate(options)], title=prompt)
        choices = [str(i + 1) for i in range(len(options))]
        answer = IntPrompt.ask("Enter your choice", choices=choices, console=self.console)
        return answer - 1

    def prompt_text(self, prompt: str, default: str, validator: Callable[[str], str] | None = None) -> str:
        while True:
            value = Prompt.ask(prompt, default=default, console=self.console)
            if validator is None:
                return value
            try:
                return validator(value)
            except ValueError as error:
                print_error(str(error))

    def choose_setup(self) -> SetupChoice:
        index = self.choose_one("Choose an option:", [choice.value for choice in SETUP_CHOICES])
        return SETUP_CHOICES[index]

    def show_files(self, title: str, files: list[FileInfo]) -> None:
        rows = [
            [info.name, _format_size(info.size), info.modified.strftime("%Y-%m-%d %H:%M")]
            for info in files
        ]
        print_table(["File", "Size", "Modified"], rows, title=title)


def _format_size(size: int) -> str:
    for unit in ["B", "KB", "MB"]:
        if size < 1024:
            return f"{size} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"
