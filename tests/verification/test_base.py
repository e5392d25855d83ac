"""
Unit tests for the technique contract and result model.

Tests cover:
- TechniqueResult score range enforcement
- Canonical skip results
- InspectInput immutability and convenience properties
- CompositeResult helpers
- Technique ABC contract
"""

import pytest
from pydantic import ValidationError

from cobbler.verification import (
    Action,
    CompositeResult,
    Evidence,
    InspectInput,
    InsufficientTechniquesError,
    InvalidWeightError,
    NoTechniquesError,
    Technique,
    TechniqueResult,
    Verdict,
)


@pytest.mark.verification
class TestTechniqueResult:
    """Tests for TechniqueResult."""

    def test_score_bounds_accepted(self):
        """Test that 0.0 and 1.0 are valid scores."""
        assert TechniqueResult(name="t", score=0.0, verdict=Verdict.FAIL).score == 0.0
        assert TechniqueResult(name="t", score=1.0, verdict=Verdict.PASS).score == 1.0

    @pytest.mark.parametrize("score", [-0.01, 1.01, 5.0])
    def test_score_outside_range_rejected(self, score):
        """Test that out-of-range scores violate the contract."""
        with pytest.raises(ValidationError):
            TechniqueResult(name="t", score=score, verdict=Verdict.PASS)

    def test_empty_name_rejected(self):
        """Test that a technique result needs a name for weight lookup."""
        with pytest.raises(ValidationError):
            TechniqueResult(name="", score=0.5, verdict=Verdict.PASS)

    def test_skipped_result(self):
        """Test the canonical skip result."""
        result = TechniqueResult.skipped("mutation_testing")
        assert result.name == "mutation_testing"
        assert result.score == 0.0
        assert result.verdict == Verdict.SKIP
        assert result.deterministic is True
        assert result.evidence == []
        assert result.is_skipped
        assert not result.passed

    def test_evidence_order_preserved(self):
        """Test that evidence keeps insertion order."""
        evidence = [Evidence(detail=f"fact {i}") for i in range(5)]
        result = TechniqueResult(name="t", score=0.5, verdict=Verdict.FAIL, evidence=evidence)
        assert [e.detail for e in result.evidence] == [f"fact {i}" for i in range(5)]

    def test_verdict_values(self):
        """Test verdict wire values."""
        assert Verdict.PASS.value == "pass"
        assert Verdict.FAIL.value == "fail"
        assert Verdict.SKIP.value == "skip"


@pytest.mark.verification
class TestInspectInput:
    """Tests for InspectInput."""

    def test_frozen(self):
        """Test that techniques cannot reassign input fields."""
        inspect_input = InspectInput(work_type="code")
        with pytest.raises(ValidationError):
            inspect_input.work_type = "docs"

    def test_lists_become_tuples(self):
        """Test that sequence fields are stored immutably."""
        inspect_input = InspectInput(modified_files=["a.py", "b.py"])
        assert inspect_input.modified_files == ("a.py", "b.py")
        assert isinstance(inspect_input.modified_files, tuple)

    def test_is_code_work(self):
        """Test code work detection."""
        assert InspectInput(work_type="code").is_code_work
        assert not InspectInput(work_type="docs").is_code_work

    def test_has_criteria(self):
        """Test that either PRD or use case criteria count."""
        assert not InspectInput().has_criteria
        assert InspectInput(prd_criteria=["AC1"]).has_criteria
        assert InspectInput(uc_criteria=["SC1"]).has_criteria

    def test_requirements_read_only(self):
        """Test that techniques cannot edit the requirement mapping."""
        inspect_input = InspectInput(prd_requirements={"R1": "Add numbers"})
        with pytest.raises(TypeError):
            inspect_input.prd_requirements["R1"] = "Subtract numbers"
        with pytest.raises(TypeError):
            InspectInput().prd_requirements["R2"] = "New"
        assert inspect_input.prd_requirements["R1"] == "Add numbers"

    def test_requirements_copied_from_caller(self):
        """Test that later edits to the caller's dict do not reach the input."""
        requirements = {"R1": "Add numbers"}
        inspect_input = InspectInput(prd_requirements=requirements)
        requirements["R1"] = "Changed"
        requirements["R2"] = "Extra"
        assert dict(inspect_input.prd_requirements) == {"R1": "Add numbers"}

    def test_requirements_dump_as_dict(self):
        """Test that serialization yields a plain dict."""
        dumped = InspectInput(prd_requirements={"R1": "Add numbers"}).model_dump()
        assert dumped["prd_requirements"] == {"R1": "Add numbers"}
        assert type(dumped["prd_requirements"]) is dict


@pytest.mark.verification
class TestCompositeResult:
    """Tests for CompositeResult."""

    def test_defaults_to_human_review(self):
        """Test the default composite is an invalid human review."""
        composite = CompositeResult()
        assert composite.action == Action.HUMAN_REVIEW
        assert composite.valid_score is False
        assert composite.composite_score == 0.0

    def test_scored_results_excludes_skips(self):
        """Test that scored_results drops skip results."""
        results = [
            TechniqueResult(name="a", score=0.5, verdict=Verdict.PASS),
            TechniqueResult.skipped("b"),
        ]
        composite = CompositeResult(technique_results=results)
        assert [r.name for r in composite.scored_results] == ["a"]

    def test_require_valid_raises_when_invalid(self):
        """Test that require_valid surfaces missing cross-validation."""
        composite = CompositeResult(
            technique_results=[TechniqueResult(name="a", score=1.0, verdict=Verdict.PASS)]
        )
        with pytest.raises(InsufficientTechniquesError) as exc_info:
            composite.require_valid()
        assert exc_info.value.scored == 1

    def test_require_valid_returns_self(self):
        """Test that a valid composite passes through."""
        composite = CompositeResult(valid_score=True, action=Action.ACCEPT, composite_score=0.9)
        assert composite.require_valid() is composite


@pytest.mark.verification
class TestTechniqueContract:
    """Tests for the Technique ABC."""

    def test_cannot_instantiate_abstract(self):
        """Test that the ABC enforces the contract."""
        with pytest.raises(TypeError):
            Technique()

    def test_minimal_technique(self):
        """Test that a new technique only needs the four members."""

        class AlwaysPass(Technique):
            @property
            def name(self) -> str:
                return "always_pass"

            @property
            def fault_class(self) -> str:
                return "none"

            def applicable(self, input: InspectInput) -> bool:
                return True

            def run(self, input: InspectInput) -> TechniqueResult:
                return TechniqueResult(name=self.name, score=1.0, verdict=Verdict.PASS)

        technique = AlwaysPass()
        assert technique.run(InspectInput()).passed
        assert repr(technique) == "AlwaysPass(name=always_pass)"


@pytest.mark.verification
class TestErrors:
    """Tests for named configuration errors."""

    def test_invalid_weight_error_carries_details(self):
        """Test InvalidWeightError attributes and message."""
        error = InvalidWeightError("mutation_testing", 1.5)
        assert error.technique == "mutation_testing"
        assert error.weight == 1.5
        assert "between 0.0 and 1.0" in str(error)

    def test_no_techniques_error_message(self):
        """Test NoTechniquesError message."""
        assert "no techniques registered" in str(NoTechniquesError())
