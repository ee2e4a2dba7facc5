"""File operation utilities."""
import contextlib
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path

from loguru import logger
from pydantic import BaseModel

from crules.core.errors import NotFoundError, SyncIOError

# Never copied between rules directories
IGNORED_NAMES = (".git",)


class FileInfo(BaseModel):
    """A file inside a rules directory."""

    name: str
    size: int
    modified: datetime


def dir_exists(path: str | Path) -> bool:
    """Return True if ``path`` is an existing directory."""
    return Path(path).is_dir()


def ensure_dir(path: str | Path, permission: int = 0o755) -> None:
    """Create ``path`` and its parents if missing.

    Raises:
        SyncIOError: If the directory cannot be created
    """
    try:
        Path(path).mkdir(mode=permission, parents=True, exist_ok=True)
    except OSError as error:
        raise SyncIOError(f"Cannot create directory: {error}", path) from error


def copy_dir(src: str | Path, dst: str | Path, permission: int = 0o755) -> None:
    """
    Recursively copy ``src`` into ``dst``, overwriting files that already exist.

    Files present in ``dst`` but not in ``src`` are left in place.

    Args:
        src: Source directory
        dst: Destination directory, created if missing
        permission: Mode for directories created at the destination

    Raises:
        NotFoundError: If ``src`` is not a directory
        SyncIOError: If any file or directory cannot be copied
    """
    src, dst = Path(src), Path(dst)
    if not src.is_dir():
        raise NotFoundError(f"Source directory not found: {src}", src)

    logger.debug(f"Copying directory | source={src}, target={dst}")
    try:
        dst.parent.mkdir(mode=permission, parents=True, exist_ok=True)
        shutil.copytree(
            src,
            dst,
            ignore=shutil.ignore_patterns(*IGNORED_NAMES),
            dirs_exist_ok=True,
        )
    except shutil.Error as error:
        # copytree collects per-file failures and raises them together
        raise SyncIOError(f"Failed to copy {src} to {dst}: {error.args[0]}", dst) from error
    except OSError as error:
        raise SyncIOError(f"Failed to copy {src} to {dst}: {error}", dst) from error


def remove_dir(path: str | Path) -> None:
    """Remove a directory tree.

    Raises:
        SyncIOError: If the directory exists and cannot be removed
    """
    path = Path(path)
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
    except OSError as error:
        raise SyncIOError(f"Failed to remove directory: {error}", path) from error


def list_directory_contents(path: str | Path) -> list[FileInfo]:
    """List every file below ``path``.

    Args:
        path: Directory to list

    Returns:
        Files sorted by their path relative to ``path``

    Raises:
        NotFoundError: If ``path`` does not exist
        SyncIOError: If the directory cannot be read
    """
    root = Path(path)
    if not root.exists():
        raise NotFoundError(f"Directory not found: {root}", root)

    files: list[FileInfo] = []
    try:
        for current, dirs, names in os.walk(root, onerror=_raise_walk_error):
            dirs[:] = sorted(d for d in dirs if d not in IGNORED_NAMES)
            for name in sorted(names):
                file_path = Path(current) / name
                stat = file_path.stat()
                files.append(
                    FileInfo(
                        name=file_path.relative_to(root).as_posix(),
                        size=stat.st_size,
                        modified=datetime.fromtimestamp(stat.st_mtime),
                    )
                )
    except OSError as error:
        raise SyncIOError(f"Failed to list directory contents: {error}", root) from error
    return files


def has_rule_files(path: str | Path, extension: str = ".mdc") -> bool:
    """Check whether ``path`` contains at least one rule file.

    Raises:
        SyncIOError: If the directory cannot be read
    """
    root = Path(path)
    if not root.is_dir():
        return False
    try:
        for current, dirs, names in os.walk(root, onerror=_raise_walk_error):
            dirs[:] = [d for d in dirs if d not in IGNORED_NAMES]
            if any(name.lower().endswith(extension) for name in names):
                return True
    except OSError as error:
        raise SyncIOError(f"Failed to check for rule files: {error}", root) from error
    return False


def _raise_walk_error(error: OSError) -> None:
    raise error


def safe_write_file(file_path: Path, content: str) -> None:
    """
    Safely write content to a file using a temporary file to ensure atomic writes.

    Args:
        file_path: Path to the target file
        content: Content to write to the file
    """
    # Create parent directory if it doesn't exist
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Create a temporary file in the same directory
    temp_fd, temp_path = tempfile.mkstemp(dir=str(file_path.parent), prefix=f".{file_path.name}.")
    try:
        with os.fdopen(temp_fd, 'w', encoding='utf-8') as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        # Rename temporary file to target file (atomic on Unix and Windows)
        Path(temp_path).replace(file_path)
    except Exception:
        # Clean up temp file if something goes wrong
        with contextlib.suppress(OSError):
            Path(temp_path).unlink()
        raise
