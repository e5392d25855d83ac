"""
Inspect Verification Portfolio - Technique Registry and Inspection Runs.

Runs a set of verification techniques over one InspectInput and hands
their results to the composite scorer. Routing the resulting action
(accept, mend, human review) is the caller's business.

Usage:
    config = load_config_from_env()
    portfolio = build_portfolio(config)
    composite = portfolio.inspect(inspect_input)
    if composite.action == Action.ACCEPT and portfolio.scorer.meets_determinism_floor(
        composite.technique_results
    ):
        ...
"""

import logging
from collections.abc import Callable, Iterable
from pathlib import Path

import yaml

from cobbler.config.models import CobblerConfig
from cobbler.verification.base import (
    CompositeResult,
    InspectInput,
    NoTechniquesError,
    Technique,
    TechniqueResult,
)
from cobbler.verification.commands import CommandRunner, SourceIO
from cobbler.verification.mutation import MutationRunner, MutationType
from cobbler.verification.scores import Scorer
from cobbler.verification.translation import TranslationValidator

logger = logging.getLogger(__name__)

TechniqueFactory = Callable[[], Technique]


class TechniqueRegistry:
    """Registry for verification techniques.

    Maps technique names to factories and caches the created instances.
    The technique set is open: anything registered here can run in a
    portfolio without changes to the scorer.

    Usage:
        registry = TechniqueRegistry.create_default(config)
        registry.register("my_technique", MyTechnique)
        techniques = registry.get_many(["translation_validation", "my_technique"])
    """

    def __init__(self) -> None:
        self._factories: dict[str, TechniqueFactory] = {}
        self._techniques: dict[str, Technique] = {}

    def register(self, name: str, factory: TechniqueFactory) -> None:
        """Register a technique factory under a name, replacing any previous one."""
        self._factories[name] = factory
        self._techniques.pop(name, None)

    def names(self) -> list[str]:
        """Registered technique names, in registration order."""
        return list(self._factories)

    def get(self, name: str) -> Technique:
        """Get or create a technique instance.

        Raises:
            KeyError: If no technique is registered under the name
        """
        if name not in self._techniques:
            factory = self._factories.get(name)
            if factory is None:
                raise KeyError(
                    f"Unknown technique: {name} (available: {', '.join(self.names())})"
                )
            self._techniques[name] = factory()
        return self._techniques[name]

    def get_many(self, names: Iterable[str]) -> list[Technique]:
        return [self.get(name) for name in names]

    @classmethod
    def create_default(cls, config: CobblerConfig) -> "TechniqueRegistry":
        """Registry with the built-in techniques wired to the configured commands."""
        commands = config.commands
        build = CommandRunner(
            commands.build_command,
            timeout_seconds=commands.timeout_seconds,
            working_dir=commands.working_dir,
            description="build",
        )
        tests = CommandRunner(
            commands.test_command,
            timeout_seconds=commands.timeout_seconds,
            working_dir=commands.working_dir,
            description="tests",
        )

        # Modified files are relative to where the commands run
        source_io = SourceIO(base_dir=commands.working_dir)

        equivalents: list[tuple[str, int, MutationType]] = []
        if config.portfolio.equivalent_mutants_file:
            equivalents = load_equivalent_mutants(
                config.resolve_path(config.portfolio.equivalent_mutants_file)
            )

        registry = cls()
        registry.register(
            "translation_validation",
            lambda: TranslationValidator(
                build_check=build, test_check=tests, exists=source_io.exists
            ),
        )
        registry.register(
            "mutation_testing",
            lambda: MutationRunner(
                run_tests=tests,
                source_io=source_io,
                source_suffix=config.mutation.source_suffix,
                test_prefixes=config.mutation.test_prefixes,
                test_suffixes=config.mutation.test_suffixes,
                equivalents=equivalents,
            ),
        )
        return registry


def load_equivalent_mutants(path: str | Path) -> list[tuple[str, int, MutationType]]:
    """Load manually identified equivalent mutants from YAML.

    Expected format:

        - file_path: src/pkg/module.py
          line: 12
          mutation_type: boundary_change

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If an entry is malformed
    """
    with open(path) as f:
        entries = yaml.safe_load(f) or []

    if not isinstance(entries, list):
        raise ValueError(f"Equivalent mutants file must contain a list: {path}")

    equivalents = []
    for entry in entries:
        try:
            equivalents.append(
                (
                    str(entry["file_path"]),
                    int(entry["line"]),
                    MutationType(entry["mutation_type"]),
                )
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed equivalent mutant entry {entry!r}: {e}") from e
    return equivalents


class Portfolio:
    """Runs a technique portfolio and scores the results.

    Techniques run sequentially, one at a time. A technique that does not
    apply contributes its skip result.
    """

    def __init__(self, techniques: Iterable[Technique], scorer: Scorer | None = None) -> None:
        """Initialize the portfolio.

        Args:
            techniques: Techniques to run, in order
            scorer: Composite scorer (default configuration if omitted)

        Raises:
            NoTechniquesError: If no techniques are given
        """
        self._techniques = list(techniques)
        if not self._techniques:
            raise NoTechniquesError()
        self._scorer = scorer or Scorer()

    @property
    def techniques(self) -> list[Technique]:
        return list(self._techniques)

    @property
    def scorer(self) -> Scorer:
        return self._scorer

    def run_techniques(self, input: InspectInput) -> list[TechniqueResult]:
        """Run every technique against the input and collect the results."""
        results = []
        for technique in self._techniques:
            if technique.applicable(input):
                logger.info(f"Running {technique.name} on {input.crumb_id or 'input'}")
            else:
                logger.info(f"Skipping {technique.name}: not applicable")
            result = technique.run(input)
            logger.info(
                f"{result.name}: verdict={result.verdict.value} score={result.score:.2f}"
            )
            results.append(result)
        return results

    def inspect(self, input: InspectInput) -> CompositeResult:
        """Run all techniques and compute the composite result."""
        results = self.run_techniques(input)
        composite = self._scorer.score(results)
        logger.info(
            f"Inspection of {input.crumb_id or 'input'}: action={composite.action.value} "
            f"score={composite.composite_score:.3f} valid={composite.valid_score} "
            f"deterministic_weight={self._scorer.deterministic_weight(results):.2f}"
        )
        return composite


def build_portfolio(
    config: CobblerConfig,
    registry: TechniqueRegistry | None = None,
) -> Portfolio:
    """Build a portfolio from configuration.

    Args:
        config: Root configuration
        registry: Technique registry (built-in techniques if omitted)

    Raises:
        NoTechniquesError: If the configuration enables no techniques
        InvalidWeightError: If a configured weight is outside [0.0, 1.0]
        KeyError: If an enabled technique is not registered
    """
    registry = registry or TechniqueRegistry.create_default(config)
    scorer = Scorer(config.scoring.to_scorer_config())
    return Portfolio(registry.get_many(config.portfolio.techniques), scorer)
