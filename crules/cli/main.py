"""
Main CLI entry point for crules.
"""

# Standard library imports
from pathlib import Path
from typing import Optional

# Third-party imports
import typer
from pydantic import ValidationError

# Local imports
from crules import __version__
from crules.config import CrulesConfig, load_config
from crules.core.errors import CrulesError
from crules.core.results import OperationResult
from crules.core.sync import SyncManager
from crules.utils.file_ops import dir_exists
from crules.utils.logging import setup_logging
from crules.utils.paths import AppPaths
from crules.utils.rich_console import (
    print_error,
    print_info,
    print_panel,
    print_success,
    print_table,
    print_warning,
)

EXIT_FAILED = 1
EXIT_CANCELLED = 130

app = typer.Typer(
    help="crules - keep Cursor rules in sync across projects.\n\n"
    "The main rules location is the source of truth; every project registered "
    "by `crules init` receives it on `crules merge`.",
    no_args_is_help=True,
    add_completion=False,
)


class CliState:
    """Settings shared between the callback and the commands."""

    def __init__(self):
        self.verbose = False
        self.config: CrulesConfig | None = None
        self.app_paths: AppPaths | None = None


state = CliState()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """
    crules - keep Cursor rules in sync across projects
    """
    state.verbose = verbose
    state.config = None
    state.app_paths = None


def _load_settings() -> tuple[CrulesConfig, AppPaths]:
    if state.config is None or state.app_paths is None:
        try:
            state.config = load_config()
        except (ValidationError, ValueError) as error:
            print_error(f"Invalid configuration: {error}")
            raise typer.Exit(EXIT_FAILED)
        state.app_paths = AppPaths.for_app(state.config.app_name)
    return state.config, state.app_paths


def get_manager() -> SyncManager:
    """Build the sync manager; any setup failure ends the process."""
    config, app_paths = _load_settings()
    debug = state.verbose or config.debug
    setup_logging(None, level=config.log_level, debug=debug)

    try:
        manager = SyncManager(config, app_paths)
    except CrulesError as error:
        print_error(str(error))
        raise typer.Exit(EXIT_FAILED)

    setup_logging(app_paths.log_dir, level=config.log_level, debug=debug)
    return manager


def _finish(result: OperationResult) -> None:
    """Report an operation result and exit with its code."""
    if result.ok:
        print_success(result.message)
        return
    if result.is_cancelled:
        print_info(result.message)
        raise typer.Exit(EXIT_CANCELLED)
    print_error(result.message)
    raise typer.Exit(EXIT_FAILED)


@app.command()
def init():
    """Copy the main rules into this project and register it for merges."""
    manager = get_manager()
    _finish(manager.init())


@app.command()
def merge():
    """Publish this project's rules as the main rules and sync every project."""
    manager = get_manager()
    result = manager.merge()
    if result.report is not None and result.report.failures:
        print_table(
            ["Project", "Reason"],
            [[failure.project, failure.reason] for failure in result.report.failures],
            title="Projects not synced",
        )
    if result.report is not None:
        print_panel(
            f"{result.report.succeeded} succeeded, {result.report.failed} failed",
            title="Sync summary",
            style="cyan",
        )
    _finish(result)


@app.command()
def sync():
    """Overwrite this project's rules with the main rules (no prompts)."""
    manager = get_manager()
    _finish(manager.sync())


@app.command("list")
def list_projects(
    forget: Optional[Path] = typer.Option(None, "--forget", help="Stop tracking the given project"),
):
    """List the registered projects."""
    manager = get_manager()

    if forget is not None:
        try:
            removed = manager.registry.remove_project(forget)
        except CrulesError as error:
            print_error(str(error))
            raise typer.Exit(EXIT_FAILED)
        if removed:
            print_success(f"Project removed from registry: {forget}")
        else:
            print_warning(f"Project is not registered: {forget}")
            raise typer.Exit(EXIT_FAILED)
        return

    projects = manager.registry.get_projects()
    if not projects:
        print_info("No projects registered. Run 'crules init' inside a project.")
        return
    rows = [[i + 1, project, "yes" if dir_exists(project) else "no"] for i, project in enumerate(projects)]
    print_table(["#", "Project", "Exists"], rows, title="Registered Projects")


@app.command()
def clean():
    """Remove projects that no longer exist from the registry."""
    manager = get_manager()
    try:
        removed = manager.clean()
    except CrulesError as error:
        print_error(str(error))
        raise typer.Exit(EXIT_FAILED)
    print_success(f"Removed {removed} non-existent projects from registry")


@app.command()
def paths():
    """Show where crules keeps its data."""
    config, app_paths = _load_settings()
    print_table(
        ["Location", "Path"],
        [
            ["Config", app_paths.config_dir],
            ["Data", app_paths.data_dir],
            ["Logs", app_paths.log_dir],
            ["Main rules", app_paths.get_rules_dir(config.rules_dir_name)],
            ["Registry", app_paths.get_registry_file(config.registry_file_name)],
        ],
        title="crules Paths",
    )


@app.command()
def version():
    """Show the crules version."""
    typer.echo(f"crules version: {__version__}")


if __name__ == "__main__":
    app()
