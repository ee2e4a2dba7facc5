"""Exceptions raised by the crules core."""

from pathlib import Path


class CrulesError(Exception):
    """Base exception for crules errors."""

    def __init__(self, message: str, path: str | Path | None = None):
        self.message = message
        self.path = str(path) if path is not None else None
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.path and self.path not in self.message:
            return f"{self.message} (path: {self.path})"
        return self.message


class NotFoundError(CrulesError):
    """Raised when the main location, a rules directory or a required file is missing."""
    pass


class ConfirmationDeclined(CrulesError):
    """Raised when the operator declines a confirmation prompt."""

    def __init__(self, message: str = "Operation cancelled by user", path: str | Path | None = None):
        super().__init__(message, path)


class SyncIOError(CrulesError):
    """Raised when a copy, clone, mkdir or remove fails."""
    pass


class RegistryPersistenceError(CrulesError):
    """Raised when the registry cannot be read from or written to disk."""
    pass


class InvalidRepositoryError(CrulesError):
    """Raised when a repository URL is rejected by the fetcher."""
    pass


class SetupError(CrulesError):
    """Raised when required directories cannot be created at startup."""
    pass
