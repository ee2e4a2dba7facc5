"""
Test Configuration and Fixtures
=============================

This module provides pytest fixtures and utilities for testing crules.
"""

import shutil
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from crules.config import CrulesConfig
from crules.core.errors import SyncIOError
from crules.core.prompts import SetupChoice
from crules.core.sync import SyncManager
from crules.utils.file_ops import FileInfo
from crules.utils.logging import reset_logging
from crules.utils.paths import AppPaths

RULES_DIR = ".cursor/rules"


class ScriptedPrompter:
    """Prompter that replays canned answers and records every question."""

    def __init__(
        self,
        confirms: list[bool] | None = None,
        setup_choice: SetupChoice = SetupChoice.CANCEL,
        text: str | None = None,
    ):
        self.confirms = list(confirms or [])
        self.setup_choice = setup_choice
        self.text = text
        self.questions: list[str] = []
        self.shown_files: list[list[FileInfo]] = []
        self.setup_asked = 0

    @property
    def prompt_count(self) -> int:
        return len(self.questions) + self.setup_asked

    def confirm(self, question: str) -> bool:
        self.questions.append(question)
        if not self.confirms:
            raise AssertionError(f"Unexpected confirmation: {question}")
        return self.confirms.pop(0)

    def choose_one(self, prompt: str, options: list[str]) -> int:
        self.questions.append(prompt)
        return 0

    def prompt_text(self, prompt: str, default: str, validator: Callable[[str], str] | None = None) -> str:
        self.questions.append(prompt)
        value = self.text if self.text is not None else default
        return validator(value) if validator else value

    def choose_setup(self) -> SetupChoice:
        self.setup_asked += 1
        return self.setup_choice

    def show_files(self, title: str, files: list[FileInfo]) -> None:
        self.shown_files.append(files)


class FakeFetcher:
    """Repository fetcher that copies a local directory instead of cloning."""

    def __init__(self, source: Path | None = None, valid: bool = True, fail_clone: bool = False):
        self.source = source
        self.valid = valid
        self.fail_clone = fail_clone
        self.cloned: list[tuple[str, Path]] = []
        self.cleaned: list[Path] = []

    def is_valid_repo(self, url: str) -> bool:
        return self.valid

    def clone(self, url: str, dest) -> None:
        dest = Path(dest)
        self.cloned.append((url, dest))
        dest.mkdir(parents=True)
        if self.fail_clone:
            (dest / "partial").write_text("half written")
            raise SyncIOError("git clone failed: network unreachable", dest)
        if self.source is not None:
            for item in self.source.rglob("*"):
                target = dest / item.relative_to(self.source)
                if item.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                else:
                    target.parent.mkdir(parents=True, exist_ok=True)
                    target.write_bytes(item.read_bytes())

    def cleanup_on_failure(self, dest) -> None:
        self.cleaned.append(Path(dest))
        shutil.rmtree(dest, ignore_errors=True)


def write_rule(directory: Path, name: str = "style.mdc", content: str = "rule") -> Path:
    """Write a rule file, creating parent directories as needed."""
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test files.

    Yields:
        Path: Path to the temporary directory

    Note:
        The directory is automatically cleaned up after the test.
    """
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir).resolve()


@pytest.fixture
def config() -> CrulesConfig:
    return CrulesConfig(rules_dir_name=RULES_DIR)


@pytest.fixture
def app_paths(temp_dir: Path) -> AppPaths:
    """AppPaths rooted in the temporary directory."""
    return AppPaths.with_root(temp_dir / "home")


@pytest.fixture
def prompter() -> ScriptedPrompter:
    return ScriptedPrompter()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def manager(config: CrulesConfig, app_paths: AppPaths, prompter: ScriptedPrompter, fetcher: FakeFetcher) -> SyncManager:
    """A SyncManager wired to scripted collaborators."""
    return SyncManager(config, app_paths, prompter=prompter, fetcher=fetcher)


@pytest.fixture
def make_project(temp_dir: Path) -> Callable[..., Path]:
    """Factory creating project roots, optionally with rule files."""

    def _make(name: str, rules: dict[str, str] | None = None) -> Path:
        root = temp_dir / "projects" / name
        root.mkdir(parents=True, exist_ok=True)
        for file_name, content in (rules or {}).items():
            write_rule(root / RULES_DIR, file_name, content)
        return root

    return _make


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    reset_logging()
