"""Git operations for fetching a ruleset into the main location."""
import os
import shutil
import subprocess
from pathlib import Path

from loguru import logger

from crules.core.errors import SyncIOError


class RepositoryFetcher:
    """Validates and clones remote rulesets with the ``git`` binary."""

    def __init__(self, git_binary: str = "git"):
        self.git_binary = git_binary

    def _env(self) -> dict[str, str]:
        # Fail instead of blocking on credential prompts
        env = dict(os.environ)
        env["GIT_TERMINAL_PROMPT"] = "0"
        env.setdefault("GIT_SSH_COMMAND", "ssh -o BatchMode=yes")
        return env

    def _run_git_command(self, command: list[str], cwd: Path | None = None) -> subprocess.CompletedProcess:
        """Run a git command, raising CalledProcessError on a non-zero exit."""
        logger.debug(f"Running git command: {' '.join(command)}")
        return subprocess.run(
            [self.git_binary] + command,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=True,
            env=self._env(),
        )

    def is_valid_repo(self, url: str) -> bool:
        """Check that ``url`` points at an accessible git repository."""
        try:
            self._run_git_command(["ls-remote", "--heads", url])
        except FileNotFoundError:
            logger.error(f"git executable not found | binary={self.git_binary}")
            return False
        except subprocess.CalledProcessError as error:
            logger.warning(f"Repository not accessible | url={url}, error={(error.stderr or '').strip()}")
            return False
        logger.debug(f"Repository verified | url={url}")
        return True

    def clone(self, url: str, dest: str | Path) -> None:
        """Clone ``url`` into ``dest``.

        Raises:
            SyncIOError: If git is missing or the clone fails
        """
        dest = Path(dest)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            self._run_git_command(["clone", "--depth", "1", url, str(dest)])
        except FileNotFoundError as error:
            raise SyncIOError(f"git executable not found: {self.git_binary}", dest) from error
        except subprocess.CalledProcessError as error:
            output = (error.stderr or error.stdout or "").strip()
            raise SyncIOError(f"git clone failed: {output or error}", dest) from error
        except OSError as error:
            raise SyncIOError(f"Cannot prepare clone destination: {error}", dest) from error
        logger.info(f"Repository cloned | url={url}, dest={dest}")

    def cleanup_on_failure(self, dest: str | Path) -> None:
        """Remove a partial clone. Never raises."""
        dest = Path(dest)
        if not dest.exists():
            return
        logger.debug(f"Removing partial clone | path={dest}")
        shutil.rmtree(dest, ignore_errors=True)
        if dest.exists():
            logger.warning(f"Could not fully remove partial clone | path={dest}")
