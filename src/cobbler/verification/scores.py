"""
Inspect Verification Portfolio - Composite Adequacy Scoring.

Combines any subset of technique results into one routing decision.

The composite score is the weight-normalized mean of the non-skip scores:

    composite = sum(score_i * weight_i) / sum(weight_i)

Default weights:
    - translation_validation: 30%
    - mutation_testing: 25%
    - differential_testing: 20%
    - property_based_testing: 15%
    - contract_injection: 10%

Techniques missing from the weight table count with a fixed 10% weight
so that newly added techniques are never silently dropped.

Action thresholds:
    - accept: composite >= 0.80
    - mend: 0.50 <= composite < 0.80
    - human_review: composite < 0.50, or fewer than two non-skip results

The deterministic weight fraction is reported separately; comparing it
with the configured minimum is left to the caller.
"""

import logging
import math
from collections.abc import Iterable
from types import MappingProxyType

from pydantic import BaseModel, Field

from cobbler.verification.base import (
    Action,
    CompositeResult,
    InvalidWeightError,
    TechniqueResult,
)

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS = MappingProxyType(
    {
        "translation_validation": 0.30,
        "mutation_testing": 0.25,
        "differential_testing": 0.20,
        "property_based_testing": 0.15,
        "contract_injection": 0.10,
    }
)

UNKNOWN_TECHNIQUE_WEIGHT = 0.10

DEFAULT_ACCEPT_THRESHOLD = 0.80
DEFAULT_MEND_THRESHOLD = 0.50
DEFAULT_MIN_DETERMINISTIC = 0.50

# Minimum non-skip results for an automated decision
MIN_SCORED_TECHNIQUES = 2


class ScorerConfig(BaseModel):
    """Configurable parameters for composite scoring.

    Each instance owns its own weight table.

    Attributes:
        weights: Technique name to weight (each 0.0-1.0)
        accept_threshold: Score at or above this triggers accept
        mend_threshold: Score at or above this, below accept, triggers mend
        min_deterministic: Minimum fraction of weight from deterministic techniques
    """

    weights: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_WEIGHTS),
        description="Technique weights",
    )
    accept_threshold: float = Field(
        default=DEFAULT_ACCEPT_THRESHOLD,
        ge=0.0,
        le=1.0,
        description="Accept threshold",
    )
    mend_threshold: float = Field(
        default=DEFAULT_MEND_THRESHOLD,
        ge=0.0,
        le=1.0,
        description="Mend threshold",
    )
    min_deterministic: float = Field(
        default=DEFAULT_MIN_DETERMINISTIC,
        ge=0.0,
        le=1.0,
        description="Minimum deterministic weight fraction",
    )

    def validate_weights(self) -> None:
        """Check every weight lies in [0.0, 1.0].

        Raises:
            InvalidWeightError: On the first out-of-range weight
        """
        for name, weight in self.weights.items():
            if not 0.0 <= weight <= 1.0:
                raise InvalidWeightError(name, weight)


class Scorer:
    """Computes composite adequacy scores from technique results.

    Usage:
        scorer = Scorer()
        composite = scorer.score(results)
        if composite.action == Action.ACCEPT and scorer.meets_determinism_floor(results):
            ...
    """

    def __init__(self, config: ScorerConfig | None = None) -> None:
        """Initialize the scorer.

        Args:
            config: Scoring configuration (defaults if omitted)

        Raises:
            InvalidWeightError: If a configured weight is outside [0.0, 1.0]
        """
        # Owned copy; later edits to the caller's config do not reach this scorer
        self._config = (config or ScorerConfig()).model_copy(deep=True)
        self._config.validate_weights()

    @property
    def config(self) -> ScorerConfig:
        """Copy of the validated scoring configuration."""
        return self._config.model_copy(deep=True)

    def weight_for(self, name: str) -> float:
        """Weight for a technique, falling back to the unknown-technique weight."""
        return self._config.weights.get(name, UNKNOWN_TECHNIQUE_WEIGHT)

    def score(self, results: Iterable[TechniqueResult]) -> CompositeResult:
        """Compute the composite result.

        Skip results are excluded from the weighted average. With fewer
        than two non-skip results the score is invalid and the action is
        human review.

        Args:
            results: Technique results, in any order

        Returns:
            CompositeResult carrying the input results unchanged
        """
        results = list(results)
        scored = [r for r in results if not r.is_skipped]

        if len(scored) < MIN_SCORED_TECHNIQUES:
            logger.info(
                f"Composite score invalid: {len(scored)} technique(s) produced results, "
                f"need {MIN_SCORED_TECHNIQUES}"
            )
            return CompositeResult(
                technique_results=results,
                composite_score=0.0,
                action=Action.HUMAN_REVIEW,
                valid_score=False,
            )

        weights = [self.weight_for(r.name) for r in scored]
        total_weight = math.fsum(weights)
        if total_weight > 0:
            weighted = math.fsum(r.score * w for r, w in zip(scored, weights))
            composite = min(1.0, max(0.0, weighted / total_weight))
        else:
            composite = 0.0

        action = self.action_for(composite)
        logger.info(f"Composite score {composite:.3f} -> {action.value}")

        return CompositeResult(
            technique_results=results,
            composite_score=composite,
            action=action,
            valid_score=True,
        )

    def deterministic_weight(self, results: Iterable[TechniqueResult]) -> float:
        """Fraction of non-skip weight contributed by deterministic techniques.

        Returns:
            Float between 0.0 and 1.0 (0.0 when no weight is present)
        """
        scored = [r for r in results if not r.is_skipped]
        total_weight = math.fsum(self.weight_for(r.name) for r in scored)
        if total_weight == 0:
            return 0.0
        deterministic = math.fsum(self.weight_for(r.name) for r in scored if r.deterministic)
        return deterministic / total_weight

    def meets_determinism_floor(self, results: Iterable[TechniqueResult]) -> bool:
        """Whether enough decision weight comes from deterministic techniques.

        Never applied by score(); callers combine it with the action.
        """
        return self.deterministic_weight(results) >= self._config.min_deterministic

    def action_for(self, score: float) -> Action:
        """Map a composite score to an action using the configured thresholds."""
        if score >= self._config.accept_threshold:
            return Action.ACCEPT
        if score >= self._config.mend_threshold:
            return Action.MEND
        return Action.HUMAN_REVIEW
