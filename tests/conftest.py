"""
Cobbler Test Configuration and Fixtures

This module provides pytest fixtures for testing the verification portfolio.
All fixtures avoid spawning real build/test processes and provide
deterministic behavior.

Fixture Categories:
- Paths: Project and fixture directories
- Inputs: InspectInput factories
- Commands: Recording fakes for build/test collaborators
- Results: Sample TechniqueResult sets for scoring
"""

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from cobbler.verification import InspectInput, TechniqueResult, Verdict

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


# =============================================================================
# Command Fakes
# =============================================================================


class RecordingCommand:
    """Fake package command that records calls and returns a fixed outcome."""

    def __init__(self, succeed: bool = True, description: str = "fake") -> None:
        self.succeed = succeed
        self.description = description
        self.calls: list[list[str]] = []

    def __call__(self, packages: Sequence[str]) -> bool:
        self.calls.append(list(packages))
        return self.succeed


@pytest.fixture
def passing_command() -> RecordingCommand:
    """A command that always succeeds."""
    return RecordingCommand(succeed=True, description="passing")


@pytest.fixture
def failing_command() -> RecordingCommand:
    """A command that always fails."""
    return RecordingCommand(succeed=False, description="failing")


# =============================================================================
# Input Fixtures
# =============================================================================


@pytest.fixture
def make_input() -> Callable[..., InspectInput]:
    """Factory for InspectInput snapshots with code-work defaults."""

    def _make(**overrides) -> InspectInput:
        values = {
            "crumb_id": "crumb-001",
            "work_type": "code",
            "modified_files": [],
            "modified_packages": [],
            "prd_criteria": ["AC1: the change compiles and is tested"],
        }
        values.update(overrides)
        return InspectInput(**values)

    return _make


# =============================================================================
# Result Fixtures
# =============================================================================


@pytest.fixture
def accept_results() -> list[TechniqueResult]:
    """Three passing results that should be accepted."""
    return [
        TechniqueResult(
            name="translation_validation",
            score=0.90,
            verdict=Verdict.PASS,
            deterministic=False,
        ),
        TechniqueResult(
            name="mutation_testing",
            score=0.85,
            verdict=Verdict.PASS,
            deterministic=True,
        ),
        TechniqueResult(
            name="differential_testing",
            score=0.80,
            verdict=Verdict.PASS,
            deterministic=True,
        ),
    ]


@pytest.fixture
def mend_results() -> list[TechniqueResult]:
    """Two failing results in the mend band."""
    return [
        TechniqueResult(
            name="translation_validation",
            score=0.60,
            verdict=Verdict.FAIL,
            deterministic=False,
        ),
        TechniqueResult(
            name="mutation_testing",
            score=0.70,
            verdict=Verdict.FAIL,
            deterministic=True,
        ),
    ]
