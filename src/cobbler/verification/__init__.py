"""
Inspect Verification Portfolio.

This module provides the verification techniques that evaluate stitch
output and the composite scorer that turns their results into an action.

Key Components:
    - Technique: Base class for implementing verification techniques
    - TechniqueResult / CompositeResult: Shared result shapes
    - TranslationValidator: Mechanical checks against acceptance criteria
    - MutationRunner: Test suite adequacy via fault injection
    - Scorer: Weighted aggregation with accept/mend/human_review thresholds

Quick Start:
    ```python
    from cobbler.verification import (
        CommandRunner,
        InspectInput,
        MutationRunner,
        Scorer,
        TranslationValidator,
    )

    tests = CommandRunner(["python", "-m", "pytest", "-q"])
    build = CommandRunner(["python", "-m", "compileall", "-q"])
    techniques = [TranslationValidator(build, tests), MutationRunner(tests)]

    results = [t.run(inspect_input) for t in techniques]
    composite = Scorer().score(results)
    print(composite.action, composite.composite_score)
    ```
"""

# Contract and result model
from cobbler.verification.base import (
    Action,
    CompositeResult,
    Evidence,
    InspectError,
    InspectInput,
    InsufficientTechniquesError,
    InvalidWeightError,
    NoTechniquesError,
    Technique,
    TechniqueResult,
    Verdict,
)

# External collaborators
from cobbler.verification.commands import (
    CommandRunner,
    PackageCommand,
    SourceIO,
    file_exists,
)

# Techniques
from cobbler.verification.mutation import (
    BOUNDARY_CHANGES,
    OPERATOR_REPLACEMENTS,
    Mutant,
    MutationRunner,
    MutationSiteVisitor,
    MutationType,
    discover_mutants,
)

# Scoring
from cobbler.verification.scores import (
    DEFAULT_ACCEPT_THRESHOLD,
    DEFAULT_MEND_THRESHOLD,
    DEFAULT_MIN_DETERMINISTIC,
    DEFAULT_WEIGHTS,
    UNKNOWN_TECHNIQUE_WEIGHT,
    Scorer,
    ScorerConfig,
)
from cobbler.verification.translation import (
    MechanicalCheck,
    TranslationValidator,
)

__all__ = [
    # Contract and result model
    "Action",
    "CompositeResult",
    "Evidence",
    "InspectInput",
    "Technique",
    "TechniqueResult",
    "Verdict",
    # Errors
    "InspectError",
    "InsufficientTechniquesError",
    "InvalidWeightError",
    "NoTechniquesError",
    # Collaborators
    "CommandRunner",
    "PackageCommand",
    "SourceIO",
    "file_exists",
    # Mutation testing
    "BOUNDARY_CHANGES",
    "OPERATOR_REPLACEMENTS",
    "Mutant",
    "MutationRunner",
    "MutationSiteVisitor",
    "MutationType",
    "discover_mutants",
    # Translation validation
    "MechanicalCheck",
    "TranslationValidator",
    # Scoring
    "DEFAULT_ACCEPT_THRESHOLD",
    "DEFAULT_MEND_THRESHOLD",
    "DEFAULT_MIN_DETERMINISTIC",
    "DEFAULT_WEIGHTS",
    "UNKNOWN_TECHNIQUE_WEIGHT",
    "Scorer",
    "ScorerConfig",
]
