"""
Build/test execution and source I/O collaborators.

Techniques never shell out directly. They receive a package command
(any callable taking the package list and returning success) and a
SourceIO for exact byte-level file access, so tests can substitute
both without touching the filesystem or spawning processes.

A failing, timed-out, or unlaunchable command is reported as plain
failure. There is no distinguished timeout outcome.
"""

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

# Trailing output kept in logs when a command fails
OUTPUT_TAIL_CHARS = 2000


class PackageCommand(Protocol):
    """Callable that runs a build or test step over a set of packages."""

    def __call__(self, packages: Sequence[str]) -> bool:
        """Return True when the command succeeded."""
        ...


class CommandRunner:
    """Runs an external command over a list of packages.

    The package list is appended to a fixed argv prefix, e.g.
    ``["python", "-m", "pytest", "-q"]`` followed by the packages.

    Usage:
        run_tests = CommandRunner(["python", "-m", "pytest", "-q"], timeout_seconds=300)
        ok = run_tests(["src/mypkg"])
    """

    def __init__(
        self,
        argv: Sequence[str],
        timeout_seconds: float | None = None,
        working_dir: str | Path | None = None,
        description: str = "",
    ) -> None:
        """Initialize the command runner.

        Args:
            argv: Command prefix; packages are appended
            timeout_seconds: Kill the command after this many seconds (None = no limit)
            working_dir: Directory to run the command in (None = current directory)
            description: Human-readable label used in logs
        """
        if not argv:
            raise ValueError("CommandRunner requires a non-empty argv")
        self._argv = list(argv)
        self._timeout = timeout_seconds
        self._cwd = Path(working_dir) if working_dir else None
        self._description = description or " ".join(self._argv)

    @property
    def argv(self) -> list[str]:
        """Command prefix."""
        return list(self._argv)

    @property
    def description(self) -> str:
        """Human-readable label."""
        return self._description

    def command_for(self, packages: Sequence[str]) -> list[str]:
        """Full argv for the given packages."""
        return [*self._argv, *packages]

    def run(self, packages: Sequence[str]) -> bool:
        """Run the command and report success.

        Args:
            packages: Packages or paths appended to the command

        Returns:
            True if the command exited with status 0
        """
        cmd = self.command_for(packages)
        logger.debug(f"Running {self._description}: {cmd}")
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                cwd=self._cwd,
            )
        except subprocess.TimeoutExpired:
            logger.info(f"{self._description} timed out after {self._timeout}s")
            return False
        except OSError as e:
            logger.info(f"{self._description} could not be started: {e}")
            return False

        if proc.returncode != 0:
            output = (proc.stdout + proc.stderr).strip()[-OUTPUT_TAIL_CHARS:]
            logger.info(f"{self._description} failed (exit {proc.returncode}): {output}")
            return False

        logger.debug(f"{self._description} succeeded")
        return True

    __call__ = run

    def __repr__(self) -> str:
        return f"CommandRunner(argv={self._argv!r}, timeout={self._timeout})"


def file_exists(path: str) -> bool:
    """Check whether a path exists on disk."""
    return Path(path).exists()


class SourceIO:
    """Exact byte-level read and write of whole files.

    Relative paths resolve against ``base_dir`` when one is given, so
    file access agrees with commands run in a configured working directory.
    """

    def __init__(self, base_dir: str | Path | None = None) -> None:
        self._base_dir = Path(base_dir) if base_dir else None

    def resolve(self, path: str) -> Path:
        """Filesystem location for a (possibly relative) file path."""
        candidate = Path(path)
        if self._base_dir is None or candidate.is_absolute():
            return candidate
        return self._base_dir / candidate

    def exists(self, path: str) -> bool:
        return self.resolve(path).exists()

    def read_bytes(self, path: str) -> bytes:
        return self.resolve(path).read_bytes()

    def write_bytes(self, path: str, data: bytes) -> None:
        self.resolve(path).write_bytes(data)
