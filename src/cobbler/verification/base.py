"""
Inspect Verification Portfolio - Technique Contract and Result Model.

This module provides the shared vocabulary every verification technique
and the composite scorer depend on:

- Verdict: Outcome of a single technique (pass, fail, skip)
- Action: Routing decision recommended by the composite scorer
- Evidence: One recorded fact supporting a verdict
- TechniqueResult: Typed result returned by each technique
- InspectInput: Read-only snapshot of everything a technique may look at
- CompositeResult: Aggregated decision produced by the scorer
- Technique: Abstract base class for all verification techniques

Techniques never call each other or the scorer. The scorer only ever sees
the TechniqueResult shape and the technique name.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class Verdict(str, Enum):
    """Outcome of a verification technique.

    Attributes:
        PASS: Every check the technique ran succeeded
        FAIL: At least one check failed
        SKIP: Not evaluated; excluded from composite scoring
    """

    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"


class Action(str, Enum):
    """Action recommended by the composite scorer."""

    ACCEPT = "accept"
    MEND = "mend"
    HUMAN_REVIEW = "human_review"


# =============================================================================
# Errors
# =============================================================================


class InspectError(Exception):
    """Base class for verification portfolio errors."""


class InvalidWeightError(InspectError):
    """Raised when a technique weight is outside [0.0, 1.0]."""

    def __init__(self, technique: str, weight: float) -> None:
        super().__init__(
            f"inspect: technique weight must be between 0.0 and 1.0 "
            f"(technique={technique}, weight={weight})"
        )
        self.technique = technique
        self.weight = weight


class NoTechniquesError(InspectError):
    """Raised when a portfolio is built without any techniques."""

    def __init__(self) -> None:
        super().__init__("inspect: no techniques registered")


class InsufficientTechniquesError(InspectError):
    """Raised by callers that demand a valid composite score."""

    def __init__(self, scored: int) -> None:
        super().__init__(
            f"inspect: fewer than two techniques produced results (scored={scored})"
        )
        self.scored = scored


# =============================================================================
# Result Models
# =============================================================================


class Evidence(BaseModel):
    """A single piece of verification evidence.

    Attributes:
        criterion_id: Acceptance or success criterion the evidence relates to
        file_path: File relevant to the evidence
        detail: What was found
    """

    criterion_id: str = Field(default="", description="Criterion identifier")
    file_path: str = Field(default="", description="Relevant file path")
    detail: str = Field(..., description="Description of what was found")


class TechniqueResult(BaseModel):
    """Typed result returned by each verification technique.

    A score outside [0.0, 1.0] is a contract violation and is rejected
    at construction time.

    Attributes:
        name: Stable technique identifier, used for weight lookup
        score: Numeric score from 0.0 to 1.0
        verdict: Pass, fail, or skip
        evidence: Ordered supporting evidence
        deterministic: Whether the technique is fully deterministic
    """

    name: str = Field(..., min_length=1, description="Technique identifier")
    score: float = Field(default=0.0, ge=0.0, le=1.0, description="Technique score")
    verdict: Verdict = Field(..., description="Technique verdict")
    evidence: list[Evidence] = Field(default_factory=list, description="Supporting evidence")
    deterministic: bool = Field(default=True, description="Fully deterministic technique")

    @classmethod
    def skipped(cls, name: str) -> "TechniqueResult":
        """Build the canonical result for a technique that was not evaluated."""
        return cls(name=name, score=0.0, verdict=Verdict.SKIP, deterministic=True)

    @property
    def is_skipped(self) -> bool:
        """Whether the technique was not evaluated."""
        return self.verdict == Verdict.SKIP

    @property
    def passed(self) -> bool:
        """Whether the technique passed."""
        return self.verdict == Verdict.PASS


class InspectInput(BaseModel):
    """Inputs available to verification techniques for one inspection.

    The snapshot is frozen: techniques read it and never modify it.

    Attributes:
        crumb_id: Identifier of the work item being inspected
        work_type: Work type ("code", "docs", ...)
        modified_files: Files modified by the stitch step
        modified_packages: Packages or modules modified by the stitch step
        diff: Unified diff of the stitch output
        prd_criteria: Acceptance criteria from the driving PRD
        uc_criteria: Success criteria from the driving use case
        fixture_dir: Directory containing benchmark fixtures
        prd_requirements: Requirement ID to requirement text
    """

    model_config = ConfigDict(frozen=True)

    crumb_id: str = ""
    work_type: str = ""
    modified_files: tuple[str, ...] = ()
    modified_packages: tuple[str, ...] = ()
    diff: str = ""
    prd_criteria: tuple[str, ...] = ()
    uc_criteria: tuple[str, ...] = ()
    fixture_dir: str = ""
    prd_requirements: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator("prd_requirements")
    @classmethod
    def freeze_requirements(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        """Store requirements as a read-only view over a private copy."""
        return MappingProxyType(dict(v))

    @field_serializer("prd_requirements")
    def serialize_requirements(self, v: Mapping[str, str]) -> dict[str, str]:
        return dict(v)

    @property
    def is_code_work(self) -> bool:
        """Whether the inspected work produced code."""
        return self.work_type == "code"

    @property
    def has_criteria(self) -> bool:
        """Whether any PRD or use case criterion is present."""
        return bool(self.prd_criteria) or bool(self.uc_criteria)


class CompositeResult(BaseModel):
    """Aggregated technique results and the recommended action.

    Attributes:
        technique_results: Individual technique results, as given
        composite_score: Weighted average of non-skip scores (0.0 if invalid)
        action: Recommended action based on thresholds
        valid_score: False if fewer than two techniques produced results
    """

    technique_results: list[TechniqueResult] = Field(default_factory=list)
    composite_score: float = Field(default=0.0, ge=0.0, le=1.0)
    action: Action = Action.HUMAN_REVIEW
    valid_score: bool = False

    @property
    def scored_results(self) -> list[TechniqueResult]:
        """Results that took part in aggregation."""
        return [r for r in self.technique_results if not r.is_skipped]

    def require_valid(self) -> "CompositeResult":
        """Return self, or raise if the score lacks cross-validation.

        Raises:
            InsufficientTechniquesError: If fewer than two techniques scored
        """
        if not self.valid_score:
            raise InsufficientTechniquesError(len(self.scored_results))
        return self


# =============================================================================
# Technique Contract
# =============================================================================


class Technique(ABC):
    """Abstract base class for all verification techniques.

    Subclasses must implement:
        - name: Stable identifier used for weight lookup
        - fault_class: The defect category the technique targets
        - applicable: Whether the technique can run on the given input
        - run: Execute the technique

    A technique that is not applicable returns a skip result from run()
    instead of raising.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Technique identifier."""
        ...

    @property
    @abstractmethod
    def fault_class(self) -> str:
        """Description of the fault class this technique targets."""
        ...

    @abstractmethod
    def applicable(self, input: InspectInput) -> bool:
        """Report whether the technique can run given the available inputs.

        Must be free of side effects.
        """
        ...

    @abstractmethod
    def run(self, input: InspectInput) -> TechniqueResult:
        """Execute the technique and return a typed result."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"
