"""Git integration for crules."""

from .fetcher import RepositoryFetcher

__all__ = ["RepositoryFetcher"]
