"""
Rules Synchronization
=====================

The :class:`SyncManager` keeps every tracked project's rules directory in line
with the main rules location. It owns the project registry for the lifetime of
the process and implements ``init``, ``merge``, ``sync`` and ``clean``.

``init``, ``merge`` and ``sync`` return an :class:`OperationResult` instead of
raising, so that operator cancellation stays distinguishable from failure.
"""

from pathlib import Path

from loguru import logger

from crules.config import CrulesConfig
from crules.core.errors import (
    ConfirmationDeclined,
    CrulesError,
    InvalidRepositoryError,
    NotFoundError,
    SetupError,
    SyncIOError,
)
from crules.core.prompts import Prompter, RichPrompter, SetupChoice, validate_repo_url
from crules.core.registry import Registry
from crules.core.results import FanOutReport, OperationResult
from crules.git.fetcher import RepositoryFetcher
from crules.utils import file_ops
from crules.utils.logging import timeit
from crules.utils.paths import AppPaths


class SyncManager:
    """Handles all sync operations between the main location and projects."""

    def __init__(
        self,
        config: CrulesConfig,
        app_paths: AppPaths,
        prompter: Prompter | None = None,
        fetcher: RepositoryFetcher | None = None,
    ):
        """Create the required directories and load the registry.

        Args:
            config: Application configuration
            app_paths: Platform directories for the application
            prompter: Operator I/O; defaults to terminal prompts
            fetcher: Repository fetcher; defaults to the git binary

        Raises:
            SetupError: If a required directory cannot be created
            RegistryPersistenceError: If an existing registry cannot be read
        """
        self.config = config
        self.app_paths = app_paths
        self.prompter = prompter or RichPrompter()
        self.fetcher = fetcher or RepositoryFetcher()

        self.main_path = app_paths.get_rules_dir(config.rules_dir_name)
        self.registry_path = app_paths.get_registry_file(config.registry_file_name)

        for directory in app_paths.all_dirs() + [self.main_path]:
            try:
                file_ops.ensure_dir(directory, config.dir_permission)
            except SyncIOError as error:
                logger.error(f"Cannot create directory | path={directory}, error={error}")
                raise SetupError(f"Cannot create required directory: {error.message}", directory) from error

        logger.debug(f"Using main rules path | path={self.main_path}")
        self._registry = Registry.load(self.registry_path, config)

    @property
    def registry(self) -> Registry:
        return self._registry

    def _rules_path(self, project: str | Path) -> Path:
        return Path(project) / self.config.rules_dir_name

    def init(self, cwd: str | Path | None = None) -> OperationResult:
        """Copy the main rules into the current project and register it.

        Args:
            cwd: Project root; defaults to the process working directory

        Returns:
            OperationResult: success, cancelled or failed
        """
        current_dir = Path(cwd) if cwd is not None else Path.cwd()
        target_path = self._rules_path(current_dir)
        logger.debug(f"Init target path | path={target_path}")

        try:
            if self._main_needs_setup():
                self._setup_main_location()
            self._confirm_target_overwrite(target_path)
        except ConfirmationDeclined as declined:
            logger.info(f"Init cancelled | reason={declined.message}")
            return OperationResult.cancelled(declined.message)
        except CrulesError as error:
            logger.error(f"Init failed | error={error}")
            return OperationResult.failed(error)

        try:
            file_ops.copy_dir(self.main_path, target_path, self.config.dir_permission)
        except CrulesError as error:
            logger.error(f"Failed to copy rules | source={self.main_path}, target={target_path}, error={error}")
            return OperationResult.failed(error, f"Failed to copy rules: {error}")

        try:
            self._registry.add_project(current_dir)
        except CrulesError as error:
            logger.error(f"Failed to register project | project={current_dir}, error={error}")
            return OperationResult.failed(
                error,
                f"Rules were copied to {target_path}, but the project could not be registered "
                f"and will not receive merges: {error}",
            )

        logger.info(f"Rules initialized successfully | project={current_dir}")
        return OperationResult.success(f"Successfully initialized rules in {target_path}")

    def _main_needs_setup(self) -> bool:
        if not file_ops.dir_exists(self.main_path):
            logger.warning(f"Main rules location does not exist | path={self.main_path}")
            return True
        if not file_ops.has_rule_files(self.main_path, self.config.rule_file_extension):
            logger.warning(f"Main rules location contains no rules | path={self.main_path}")
            return True
        return False

    def _setup_main_location(self) -> None:
        choice = self.prompter.choose_setup()
        logger.debug(f"Main location setup choice | choice={choice.name}")

        if choice == SetupChoice.CREATE_EMPTY:
            self._create_empty_main()
        elif choice == SetupChoice.FETCH_REMOTE:
            self._fetch_main()
        else:
            raise ConfirmationDeclined()

    def _create_empty_main(self) -> None:
        if file_ops.dir_exists(self.main_path):
            if not self.prompter.confirm(
                f"Directory already exists: {self.main_path}. Remove it and create an empty structure?"
            ):
                raise ConfirmationDeclined()
            file_ops.remove_dir(self.main_path)

        file_ops.ensure_dir(self.main_path, self.config.dir_permission)
        logger.info(f"Created empty main rules location | path={self.main_path}")

    def _fetch_main(self) -> None:
        url = self.prompter.prompt_text(
            "Enter git repository URL",
            self.config.default_repo_url,
            validate_repo_url,
        )

        main_exists = file_ops.dir_exists(self.main_path)
        if main_exists and not self.prompter.confirm(
            f"Directory already exists: {self.main_path}. Remove it before cloning?"
        ):
            raise ConfirmationDeclined()

        if not self.fetcher.is_valid_repo(url):
            raise InvalidRepositoryError(f"Invalid git repository URL or repository not accessible: {url}")

        if main_exists:
            file_ops.remove_dir(self.main_path)

        try:
            self.fetcher.clone(url, self.main_path)
            if not file_ops.has_rule_files(self.main_path, self.config.rule_file_extension):
                raise NotFoundError(
                    f"Repository contains no {self.config.rule_file_extension} rule files: {url}",
                    self.main_path,
                )
        except CrulesError:
            self.fetcher.cleanup_on_failure(self.main_path)
            raise
        logger.info(f"Main rules location fetched | url={url}, path={self.main_path}")

    def _confirm_target_overwrite(self, target_path: Path) -> None:
        if not file_ops.dir_exists(target_path):
            return

        files = file_ops.list_directory_contents(target_path)
        if not files:
            logger.debug(f"Destination directory exists but is empty | path={target_path}")
            return

        self.prompter.show_files("The following files will be overwritten:", files)
        if not self.prompter.confirm("Do you want to continue and overwrite these files?"):
            raise ConfirmationDeclined()

    def merge(self, cwd: str | Path | None = None) -> OperationResult:
        """Publish the current project's rules to the main location, then fan out.

        Args:
            cwd: Project root; defaults to the process working directory
        """
        current_dir = Path(cwd) if cwd is not None else Path.cwd()
        source_path = self._rules_path(current_dir)

        if not file_ops.dir_exists(source_path):
            error = NotFoundError(f"{self.config.rules_dir_name} not found in current directory", source_path)
            logger.error(f"Rules not found in current directory | path={source_path}")
            return OperationResult.failed(error)

        try:
            has_rules = file_ops.has_rule_files(source_path, self.config.rule_file_extension)
        except CrulesError as error:
            logger.error(f"Cannot check rules in current directory | path={source_path}, error={error}")
            return OperationResult.failed(error)
        if not has_rules:
            error = NotFoundError(
                f"{source_path} contains no {self.config.rule_file_extension} rule files", source_path
            )
            logger.error(f"Refusing to merge an empty ruleset | path={source_path}")
            return OperationResult.failed(error)

        try:
            file_ops.copy_dir(source_path, self.main_path, self.config.dir_permission)
        except CrulesError as error:
            logger.error(f"Failed to copy to main | source={source_path}, target={self.main_path}, error={error}")
            return OperationResult.failed(error, f"Failed to copy to main: {error}")
        logger.info(f"Rules merged to main location | source={source_path}")

        report = self.sync_to_all()
        return OperationResult.success(
            f"Merged rules from {source_path} and synced {report.succeeded} of {report.total} projects",
            report=report,
        )

    def sync(self, cwd: str | Path | None = None) -> OperationResult:
        """Copy the main rules into the current project without prompting."""
        current_dir = Path(cwd) if cwd is not None else Path.cwd()
        target_path = self._rules_path(current_dir)
        logger.debug(f"Syncing rules from main location | source={self.main_path}, target={target_path}")

        try:
            file_ops.copy_dir(self.main_path, target_path, self.config.dir_permission)
        except CrulesError as error:
            logger.error(f"Failed to sync rules | source={self.main_path}, target={target_path}, error={error}")
            return OperationResult.failed(error)

        logger.info(f"Rules synced successfully | target={target_path}")
        return OperationResult.success(f"Rules synced to {target_path}")

    @timeit
    def sync_to_all(self) -> FanOutReport:
        """Copy the main rules to every tracked project.

        Projects are visited one at a time. A missing or failing project is
        counted and skipped; it never stops the remaining projects and never
        changes the registry.
        """
        projects = self._registry.get_projects()
        logger.debug(f"Syncing to all projects | count={len(projects)}")
        report = FanOutReport()

        for project in projects:
            if not file_ops.dir_exists(project):
                logger.warning(f"Skipping non-existent project | project={project}")
                report.record_failure(project, "project directory does not exist")
                continue

            target_path = self._rules_path(project)
            logger.debug(f"Syncing to project | project={project}, target={target_path}")
            try:
                file_ops.copy_dir(self.main_path, target_path, self.config.dir_permission)
            except CrulesError as error:
                logger.warning(f"Failed to sync to project | project={project}, error={error}")
                report.record_failure(project, str(error))
            else:
                report.record_success()

        logger.info(
            f"Sync to all projects completed | successful={report.succeeded}, failed={report.failed}"
        )
        return report

    def clean(self) -> int:
        """Remove registry entries whose project directory no longer exists.

        Raises:
            RegistryPersistenceError: If the pruned registry cannot be saved
        """
        return self._registry.clean_projects()
