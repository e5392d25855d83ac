"""
Inspect Verification Portfolio - Translation Validation.

Checks stitch output against the structural, mechanically decidable part
of its acceptance criteria: the modified files exist, the modified
packages compile, and their tests pass. The criteria text only decides
whether the technique applies; judging criteria by their meaning is a
separate technique.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from cobbler.verification.base import (
    Evidence,
    InspectInput,
    Technique,
    TechniqueResult,
    Verdict,
)
from cobbler.verification.commands import PackageCommand, file_exists

logger = logging.getLogger(__name__)


@dataclass
class MechanicalCheck:
    """A single mechanical validation against an acceptance criterion.

    Attributes:
        criterion_id: Criterion this check validates
        description: Human-readable description
        check: Returns True if the check passes
        file_path: File the check concerns, if any
    """

    criterion_id: str
    description: str
    check: Callable[[InspectInput], bool]
    file_path: str = ""


class TranslationValidator(Technique):
    """Translation validation technique.

    Builds a fresh list of mechanical checks per run and scores the
    fraction that pass. Every check weighs the same.

    Usage:
        validator = TranslationValidator(build_check=build_runner, test_check=test_runner)
        result = validator.run(inspect_input)
    """

    def __init__(
        self,
        build_check: PackageCommand,
        test_check: PackageCommand,
        exists: Callable[[str], bool] = file_exists,
    ) -> None:
        """Initialize the translation validator.

        Args:
            build_check: Build command over the modified packages
            test_check: Test command over the modified packages
            exists: File-existence predicate
        """
        self._build_check = build_check
        self._test_check = test_check
        self._exists = exists

    @property
    def name(self) -> str:
        return "translation_validation"

    @property
    def fault_class(self) -> str:
        return "specification conformance errors"

    def applicable(self, input: InspectInput) -> bool:
        return input.has_criteria

    def build_checks(self, input: InspectInput) -> list[MechanicalCheck]:
        """Construct the mechanical checks for this input, in evaluation order."""
        checks = [
            MechanicalCheck(
                criterion_id="file_exists",
                description=f"file {path} exists",
                check=lambda _input, path=path: self._exists(path),
                file_path=path,
            )
            for path in input.modified_files
        ]

        if input.modified_packages:
            checks.append(
                MechanicalCheck(
                    criterion_id="compilation",
                    description="modified packages compile",
                    check=lambda inp: self._build_check(inp.modified_packages),
                )
            )
            checks.append(
                MechanicalCheck(
                    criterion_id="tests_pass",
                    description="tests pass in modified packages",
                    check=lambda inp: self._test_check(inp.modified_packages),
                )
            )

        return checks

    def run(self, input: InspectInput) -> TechniqueResult:
        """Evaluate every mechanical check and score the pass fraction."""
        if not self.applicable(input):
            return TechniqueResult.skipped(self.name)

        checks = self.build_checks(input)
        if not checks:
            return TechniqueResult.skipped(self.name)

        passed = 0
        evidence = []
        for mc in checks:
            ok = bool(mc.check(input))
            if ok:
                passed += 1
            evidence.append(
                Evidence(
                    criterion_id=mc.criterion_id,
                    file_path=mc.file_path,
                    detail=f"{'passed' if ok else 'failed'}: {mc.description}",
                )
            )

        score = passed / len(checks)
        logger.info(f"Translation validation: {passed}/{len(checks)} checks passed")

        return TechniqueResult(
            name=self.name,
            score=score,
            verdict=Verdict.PASS if passed == len(checks) else Verdict.FAIL,
            evidence=evidence,
            deterministic=True,
        )
