"""Core registry and synchronization logic."""
