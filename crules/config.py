"""Configuration for crules.

All settings are read once, at startup, from ``CRULES_*`` environment variables
(a ``.env`` file in the working directory is honoured) and handed to the
orchestrator and registry as a single value object.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_APP_NAME = "crules"
DEFAULT_RULES_DIR_NAME = ".cursor/rules"
DEFAULT_REGISTRY_FILE_NAME = "registry.json"
DEFAULT_DIR_PERMISSION = 0o755
DEFAULT_RULE_FILE_EXTENSION = ".mdc"
DEFAULT_REPO_URL = "git@github.com:nsnarender5511/AgenticSystem.git"

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class CrulesConfig(BaseModel):
    """Immutable settings shared by the registry and the sync manager."""

    model_config = ConfigDict(frozen=True)

    app_name: str = Field(DEFAULT_APP_NAME, description="Name used to derive platform directories")
    rules_dir_name: str = Field(
        DEFAULT_RULES_DIR_NAME, description="Rules subdirectory inside every project root"
    )
    registry_file_name: str = Field(
        DEFAULT_REGISTRY_FILE_NAME, description="File name of the project registry"
    )
    dir_permission: int = Field(DEFAULT_DIR_PERMISSION, description="Mode for created directories")
    rule_file_extension: str = Field(
        DEFAULT_RULE_FILE_EXTENSION, description="Suffix that marks a rule file"
    )
    default_repo_url: str = Field(
        DEFAULT_REPO_URL, description="Repository offered when fetching a ruleset"
    )
    log_level: str = Field("WARNING", description="Console log level")
    debug: bool = Field(False, description="Enable debug logging")

    @field_validator("app_name")
    @classmethod
    def _check_app_name(cls, value: str) -> str:
        value = value.strip()
        if not value or os.sep in value or "/" in value:
            raise ValueError(f"Invalid app name: {value!r}")
        return value

    @field_validator("rules_dir_name")
    @classmethod
    def _check_rules_dir_name(cls, value: str) -> str:
        value = value.strip().rstrip("/\\")
        if not value:
            raise ValueError("rules_dir_name must not be empty")
        if os.path.isabs(value) or value.startswith(("/", "\\")):
            raise ValueError(f"rules_dir_name must be relative, got {value!r}")
        if ".." in value.replace("\\", "/").split("/"):
            raise ValueError(f"rules_dir_name must stay inside the project: {value!r}")
        return value

    @field_validator("registry_file_name")
    @classmethod
    def _check_registry_file_name(cls, value: str) -> str:
        value = value.strip()
        if not value or "/" in value or "\\" in value:
            raise ValueError(f"registry_file_name must be a bare file name, got {value!r}")
        return value

    @field_validator("rule_file_extension")
    @classmethod
    def _check_extension(cls, value: str) -> str:
        if not value.startswith(".") or len(value) < 2:
            raise ValueError(f"rule_file_extension must look like '.mdc', got {value!r}")
        return value.lower()

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {value}")
        return value


def _env_bool(value: str | None) -> bool:
    return (value or "").lower() in ["true", "1", "yes"]


def load_config() -> CrulesConfig:
    """Build a :class:`CrulesConfig` from the environment.

    Environment variables:
        APP_NAME / CRULES_APP_NAME: application name for platform directories
        CRULES_RULES_DIR_NAME: rules subdirectory name
        CRULES_REGISTRY_FILE: registry file name
        CRULES_DIR_PERMISSION: octal mode for created directories (e.g. ``755``)
        CRULES_RULE_EXTENSION: rule file suffix
        CRULES_REPO_URL: default repository offered during ``init``
        CRULES_LOG_LEVEL: console log level
        CRULES_DEBUG: enable debug logging (true, 1, yes)

    Returns:
        CrulesConfig: validated configuration
    """
    load_dotenv()
    values: dict = {}

    app_name = os.getenv("CRULES_APP_NAME") or os.getenv("APP_NAME")
    if app_name:
        values["app_name"] = app_name

    env_map = {
        "CRULES_RULES_DIR_NAME": "rules_dir_name",
        "CRULES_REGISTRY_FILE": "registry_file_name",
        "CRULES_RULE_EXTENSION": "rule_file_extension",
        "CRULES_REPO_URL": "default_repo_url",
        "CRULES_LOG_LEVEL": "log_level",
    }
    for env_name, field_name in env_map.items():
        env_value = os.getenv(env_name)
        if env_value:
            values[field_name] = env_value

    permission = os.getenv("CRULES_DIR_PERMISSION")
    if permission:
        try:
            values["dir_permission"] = int(permission, 8)
        except ValueError as error:
            raise ValueError(f"CRULES_DIR_PERMISSION must be octal, got {permission!r}") from error

    if os.getenv("CRULES_DEBUG"):
        values["debug"] = _env_bool(os.getenv("CRULES_DEBUG"))

    return CrulesConfig(**values)
