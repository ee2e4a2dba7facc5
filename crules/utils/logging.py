import sys
import time
from functools import wraps
from pathlib import Path

from loguru import logger
from rich.console import Console
from rich.logging import RichHandler

LOG_FILE_NAME = "crules.log"


def setup_logging(log_dir: Path | None = None, level: str = "WARNING", debug: bool = False) -> None:
    """Configure loguru sinks for the CLI.

    Console output goes through a RichHandler on stderr. When ``log_dir`` is
    given, a rotating file sink always records at DEBUG level.

    Args:
        log_dir: Directory for ``crules.log``; file logging is skipped when None
        level: Console log level
        debug: Force DEBUG on the console
    """
    logger.remove()
    console_level = "DEBUG" if debug else level.upper()
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        markup=False,
    )
    logger.add(handler, level=console_level, format="{message}", backtrace=False)

    if log_dir is not None:
        try:
            logger.add(
                Path(log_dir) / LOG_FILE_NAME,
                level="DEBUG",
                rotation="1 MB",
                retention=5,
                encoding="utf-8",
                format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
            )
        except OSError as error:
            logger.warning(f"Failed to set up file logging | path={log_dir}, error={error}")


def reset_logging() -> None:
    """Restore loguru's default stderr sink."""
    logger.remove()
    logger.add(sys.stderr, level="WARNING")


def timeit(func):  # pragma: no cover
    """
    Decorator that logs the execution time of the decorated function.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = time.perf_counter() - start
        logger.debug(f"{func.__qualname__} executed in {elapsed:.6f}s")
        return result
    return wrapper
