import os
import sys
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict


class AppPaths(BaseModel):
    """Platform directories used by crules for an application name."""

    model_config = ConfigDict(frozen=True)

    app_name: str
    config_dir: Path
    data_dir: Path
    log_dir: Path

    @classmethod
    def for_app(cls, app_name: str) -> "AppPaths":
        """Resolve the config, data and log directories for the current platform.

        ``CRULES_HOME`` overrides the platform lookup and roots all three
        directories under a single folder.

        Args:
            app_name: Application name appended to the platform base directories

        Returns:
            AppPaths: Resolved directories (not created)
        """
        home_override = os.getenv("CRULES_HOME")
        if home_override:
            root = Path(home_override).expanduser()
            logger.debug(f"Using CRULES_HOME override | path={root}")
            return cls.with_root(root, app_name)

        home = Path.home()
        if sys.platform == "win32":
            roaming = Path(os.environ.get("APPDATA", home / "AppData" / "Roaming"))
            local = Path(os.environ.get("LOCALAPPDATA", home / "AppData" / "Local"))
            return cls(
                app_name=app_name,
                config_dir=roaming / app_name,
                data_dir=local / app_name,
                log_dir=local / app_name / "logs",
            )

        if sys.platform == "darwin":
            support = home / "Library" / "Application Support" / app_name
            return cls(
                app_name=app_name,
                config_dir=support,
                data_dir=support,
                log_dir=home / "Library" / "Logs" / app_name,
            )

        config_home = Path(os.environ.get("XDG_CONFIG_HOME") or home / ".config")
        data_home = Path(os.environ.get("XDG_DATA_HOME") or home / ".local" / "share")
        state_home = Path(os.environ.get("XDG_STATE_HOME") or home / ".local" / "state")
        return cls(
            app_name=app_name,
            config_dir=config_home / app_name,
            data_dir=data_home / app_name,
            log_dir=state_home / app_name / "logs",
        )

    @classmethod
    def with_root(cls, root: Path, app_name: str = "crules") -> "AppPaths":
        """Root every directory under ``root``."""
        root = Path(root)
        return cls(
            app_name=app_name,
            config_dir=root / "config",
            data_dir=root / "data",
            log_dir=root / "logs",
        )

    def get_rules_dir(self, rules_dir_name: str) -> Path:
        """Get the main rules location."""
        return self.data_dir / rules_dir_name

    def get_registry_file(self, registry_file_name: str) -> Path:
        """Get the registry file path."""
        return self.config_dir / registry_file_name

    def all_dirs(self) -> list[Path]:
        return [self.config_dir, self.data_dir, self.log_dir]
