"""
Verification Portfolio Test Fixtures

Fixtures specific to the verification techniques: sample source modules
with known mutation sites, an in-memory SourceIO, and a test command that
actually executes the (possibly mutated) module and checks its behavior.
"""

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from cobbler.verification import SourceIO

# =============================================================================
# Sample Source
# =============================================================================

SAMPLE_SOURCE = """\
def add_if_less(a, b):
    if a < b:
        return a + b
    return a - b
"""


@pytest.fixture
def sample_source() -> str:
    """Module with one comparison and two arithmetic operators."""
    return SAMPLE_SOURCE


@pytest.fixture
def sample_module(tmp_path: Path, sample_source: str) -> Path:
    """Write the sample module to disk and return its path."""
    package = tmp_path / "pkg"
    package.mkdir()
    path = package / "arith.py"
    path.write_text(sample_source)
    return path


# =============================================================================
# Collaborator Fakes
# =============================================================================


class ExecTestCommand:
    """Test command that executes a module and runs behavioral checks.

    Mirrors what a real test suite does: import the current on-disk code
    and assert on its behavior. Any exception counts as a test failure.
    """

    def __init__(self, module_path: Path, checks: list[Callable[[dict], bool]]) -> None:
        self.module_path = module_path
        self.checks = checks
        self.description = "exec-tests"
        self.calls: list[list[str]] = []
        self.seen_sources: list[str] = []

    def __call__(self, packages: Sequence[str]) -> bool:
        self.calls.append(list(packages))
        source = self.module_path.read_text()
        self.seen_sources.append(source)
        namespace: dict = {}
        try:
            exec(compile(source, str(self.module_path), "exec"), namespace)
            return all(check(namespace) for check in self.checks)
        except Exception:
            return False


@pytest.fixture
def sample_tests(sample_module: Path) -> ExecTestCommand:
    """Tests for add_if_less that never exercise a == b."""
    return ExecTestCommand(
        sample_module,
        [
            lambda ns: ns["add_if_less"](1, 2) == 3,
            lambda ns: ns["add_if_less"](5, 2) == 3,
        ],
    )


class MemorySourceIO(SourceIO):
    """In-memory SourceIO that can be told to fail writes."""

    def __init__(self, files: dict[str, bytes]) -> None:
        super().__init__()
        self.files = dict(files)
        self.writes: list[tuple[str, bytes]] = []
        self.fail_write_number: int | None = None

    def read_bytes(self, path: str) -> bytes:
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def write_bytes(self, path: str, data: bytes) -> None:
        self.writes.append((path, data))
        if self.fail_write_number == len(self.writes):
            raise OSError(f"disk full writing {path}")
        self.files[path] = data


@pytest.fixture
def memory_io() -> Callable[[dict[str, bytes]], MemorySourceIO]:
    """Factory for in-memory source stores."""
    return MemorySourceIO
