"""Shared utilities: paths, file operations, logging and console output."""
