"""Project registry.

The registry is the durable list of project roots that take part in fan-out
sync. It is stored as JSON and rewritten atomically after every mutation.
"""

import json
import os
import stat
from pathlib import Path

from loguru import logger

from crules.config import CrulesConfig
from crules.core.errors import RegistryPersistenceError
from crules.utils.file_ops import safe_write_file

REGISTRY_FORMAT_VERSION = 1


def normalize_project_path(path: str | Path) -> str:
    """Return the absolute, resolved form of a project path."""
    return str(Path(path).expanduser().resolve())


class Registry:
    """Durable, deduplicated, insertion-ordered set of project roots."""

    def __init__(self, path: str | Path, config: CrulesConfig, projects: list[str] | None = None):
        self.path = Path(path)
        self.config = config
        self._projects: list[str] = []
        for project in projects or []:
            normalized = normalize_project_path(project)
            if normalized not in self._projects:
                self._projects.append(normalized)

    @classmethod
    def load(cls, path: str | Path, config: CrulesConfig) -> "Registry":
        """Load the registry stored at ``path``.

        A missing file is a valid bootstrap state and yields an empty registry.

        Args:
            path: Registry file
            config: Application configuration

        Returns:
            Registry: Loaded registry

        Raises:
            RegistryPersistenceError: If the file exists but cannot be read or parsed
        """
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"Registry file not found, starting empty | path={path}")
            return cls(path, config)
        except OSError as error:
            raise RegistryPersistenceError(f"Cannot read registry: {error}", path) from error

        if not content.strip():
            return cls(path, config)

        try:
            data = json.loads(content)
        except json.JSONDecodeError as error:
            raise RegistryPersistenceError(f"Registry file is not valid JSON: {error}", path) from error

        # Older registries were a bare list of paths
        projects = data.get("projects", []) if isinstance(data, dict) else data
        if not isinstance(projects, list) or not all(isinstance(p, str) for p in projects):
            raise RegistryPersistenceError("Registry file has an unexpected structure", path)

        registry = cls(path, config, projects)
        logger.debug(f"Registry loaded | path={path}, projects={len(registry)}")
        return registry

    def __len__(self) -> int:
        return len(self._projects)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return normalize_project_path(path) in self._projects

    def get_projects(self) -> list[str]:
        """Get a snapshot of the tracked projects in insertion order."""
        return list(self._projects)

    def add_project(self, path: str | Path) -> bool:
        """Track a project root.

        Args:
            path: Project root; normalised before comparison

        Returns:
            bool: True if the project was added, False if it was already tracked

        Raises:
            RegistryPersistenceError: If the registry could not be saved; the
                in-memory state is left as it was before the call
        """
        normalized = normalize_project_path(path)
        if normalized in self._projects:
            logger.debug(f"Project already registered | project={normalized}")
            return False

        previous = list(self._projects)
        self._projects.append(normalized)
        self._persist_or_revert(previous)
        logger.info(f"Project registered | project={normalized}")
        return True

    def remove_project(self, path: str | Path) -> bool:
        """Stop tracking a project root. Returns False if it was not tracked."""
        normalized = normalize_project_path(path)
        if normalized not in self._projects:
            return False

        previous = list(self._projects)
        self._projects.remove(normalized)
        self._persist_or_revert(previous)
        logger.info(f"Project unregistered | project={normalized}")
        return True

    def clean_projects(self) -> int:
        """Remove entries whose directory no longer exists.

        Only a definitive "not found" removes an entry. Any other stat failure,
        such as a permission error, keeps the entry.

        Returns:
            int: Number of entries removed

        Raises:
            RegistryPersistenceError: If the pruned registry could not be saved
        """
        previous = list(self._projects)
        kept: list[str] = []
        removed: list[str] = []

        for project in previous:
            if self._is_gone(project):
                removed.append(project)
            else:
                kept.append(project)

        if not removed:
            logger.debug("No stale projects found in registry")
            return 0

        self._projects = kept
        self._persist_or_revert(previous)
        for project in removed:
            logger.info(f"Removed stale project from registry | project={project}")
        return len(removed)

    @staticmethod
    def _is_gone(project: str) -> bool:
        try:
            stat_result = os.stat(project)
        except (FileNotFoundError, NotADirectoryError):
            return True
        except OSError as error:
            logger.warning(f"Cannot check project, keeping it | project={project}, error={error}")
            return False

        return not stat.S_ISDIR(stat_result.st_mode)

    def save(self) -> None:
        """Write the registry to disk atomically.

        Raises:
            RegistryPersistenceError: If the file cannot be written
        """
        payload = {"version": REGISTRY_FORMAT_VERSION, "projects": self._projects}
        try:
            self.path.parent.mkdir(mode=self.config.dir_permission, parents=True, exist_ok=True)
            safe_write_file(self.path, json.dumps(payload, indent=2) + "\n")
        except OSError as error:
            raise RegistryPersistenceError(f"Cannot save registry: {error}", self.path) from error
        logger.debug(f"Registry saved | path={self.path}, projects={len(self._projects)}")

    def _persist_or_revert(self, previous: list[str]) -> None:
        try:
            self.save()
        except RegistryPersistenceError:
            self._projects = previous
            logger.error(f"Registry change reverted, save failed | path={self.path}")
            raise
