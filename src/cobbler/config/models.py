"""
Configuration Data Models.

Defines all configuration schemas using Pydantic for validation
and type safety.
"""

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from cobbler.verification.scores import (
    DEFAULT_ACCEPT_THRESHOLD,
    DEFAULT_MEND_THRESHOLD,
    DEFAULT_MIN_DETERMINISTIC,
    DEFAULT_WEIGHTS,
    ScorerConfig,
)


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class LoggingConfig(BaseModel):
    """Configuration for logging.

    Attributes:
        level: Log level for the cobbler logger namespace
        format: Log record format
        file: Optional log file (stderr when unset)
    """

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Log level",
    )
    format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Log format",
    )
    file: str | None = Field(
        default=None,
        description="Log file path",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        """Accept lowercase level names."""
        if isinstance(v, str):
            return v.upper()
        return v

    def configure(self, debug: bool = False) -> None:
        """Apply this configuration to the cobbler logger namespace.

        Args:
            debug: Force DEBUG level regardless of the configured level
        """
        if self.file:
            handler: logging.Handler = logging.FileHandler(self.file)
        else:
            handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(self.format))

        logger = logging.getLogger("cobbler")
        for existing in list(logger.handlers):
            logger.removeHandler(existing)
        logger.addHandler(handler)
        logger.setLevel(LogLevel.DEBUG.value if debug else self.level.value)


class CommandConfig(BaseModel):
    """Build and test commands used by the verification techniques.

    Modified packages are appended to each command.

    Attributes:
        build_command: Command that compiles the modified packages
        test_command: Command that runs the tests of the modified packages
        timeout_seconds: Per-invocation timeout (None = no limit)
        working_dir: Directory to run commands in
    """

    build_command: list[str] = Field(
        default_factory=lambda: ["python", "-m", "compileall", "-q"],
        description="Build command prefix",
    )
    test_command: list[str] = Field(
        default_factory=lambda: ["python", "-m", "pytest", "-q", "-x"],
        description="Test command prefix",
    )
    timeout_seconds: int | None = Field(
        default=600,
        ge=1,
        description="Command timeout",
    )
    working_dir: str | None = Field(
        default=None,
        description="Working directory for commands",
    )

    @field_validator("build_command", "test_command")
    @classmethod
    def validate_command(cls, v: list[str]) -> list[str]:
        """Validate that a command is not empty."""
        if not v or not v[0].strip():
            raise ValueError("Command cannot be empty")
        return v


class MutationConfig(BaseModel):
    """Configuration for mutation testing.

    Attributes:
        source_suffix: Suffix of mutable source files
        test_prefixes: Basename prefixes marking test files
        test_suffixes: Basename suffixes marking test files
    """

    source_suffix: str = Field(
        default=".py",
        description="Source file suffix",
    )
    test_prefixes: list[str] = Field(
        default_factory=lambda: ["test_"],
        description="Test file prefixes",
    )
    test_suffixes: list[str] = Field(
        default_factory=lambda: ["_test.py"],
        description="Test file suffixes",
    )


class ScoringConfig(BaseModel):
    """Configuration for composite scoring.

    Weights are range-checked by the scorer itself, which raises
    InvalidWeightError before any aggregation runs.

    Attributes:
        weights: Technique name to weight
        accept_threshold: Composite score at or above this triggers accept
        mend_threshold: Composite score at or above this triggers mend
        min_deterministic: Minimum deterministic weight fraction
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

    @model_validator(mode="after")
    def validate_threshold_order(self) -> "ScoringConfig":
        """Validate that mend threshold does not exceed accept threshold."""
        if self.mend_threshold > self.accept_threshold:
            raise ValueError(
                f"mend_threshold ({self.mend_threshold}) must not exceed "
                f"accept_threshold ({self.accept_threshold})"
            )
        return self

    def to_scorer_config(self) -> ScorerConfig:
        """Build an independent ScorerConfig from these settings."""
        return ScorerConfig(
            weights=dict(self.weights),
            accept_threshold=self.accept_threshold,
            mend_threshold=self.mend_threshold,
            min_deterministic=self.min_deterministic,
        )


class PortfolioConfig(BaseModel):
    """Configuration for the technique portfolio.

    Attributes:
        techniques: Enabled technique names, in run order
        equivalent_mutants_file: YAML file listing manually marked
            equivalent mutants (file_path, line, mutation_type)
    """

    techniques: list[str] = Field(
        default_factory=lambda: ["translation_validation", "mutation_testing"],
        description="Enabled techniques",
    )
    equivalent_mutants_file: str | None = Field(
        default=None,
        description="Equivalent mutant overrides",
    )


class CobblerConfig(BaseModel):
    """Root configuration for the verification portfolio.

    Attributes:
        commands: Build and test commands
        mutation: Mutation testing settings
        scoring: Composite scoring settings
        portfolio: Technique selection
        logging: Logging settings
        debug: Enable debug mode
    """

    commands: CommandConfig = Field(
        default_factory=CommandConfig,
        description="Build and test commands",
    )
    mutation: MutationConfig = Field(
        default_factory=MutationConfig,
        description="Mutation testing",
    )
    scoring: ScoringConfig = Field(
        default_factory=ScoringConfig,
        description="Composite scoring",
    )
    portfolio: PortfolioConfig = Field(
        default_factory=PortfolioConfig,
        description="Technique portfolio",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    def to_yaml_dict(self) -> dict[str, Any]:
        """Convert to YAML-friendly dictionary.

        Returns:
            Dict suitable for YAML serialization
        """
        return self.model_dump(mode="json", exclude_none=True)

    def configure_logging(self) -> None:
        """Apply the logging section, honouring the debug flag."""
        self.logging.configure(debug=self.debug)

    def resolve_path(self, path: str, base_dir: Path | None = None) -> Path:
        """Resolve a configured path against the commands working directory."""
        base = base_dir or Path(self.commands.working_dir or ".")
        candidate = Path(path)
        return candidate if candidate.is_absolute() else base / candidate
