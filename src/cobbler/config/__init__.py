"""
Cobbler - Configuration Management

This module provides configuration management including:
- YAML configuration loading and validation
- Environment variable handling (.env files, ${VAR} substitution)
- Build/test command, mutation, scoring, and logging settings
"""

from cobbler.config.environment import (
    ensure_dotenv_loaded,
    load_environment,
    loaded_env_file,
    reset_environment,
)
from cobbler.config.loader import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_PATHS,
    ENV_VAR_OVERRIDES,
    ConfigLoader,
    ConfigurationError,
    get_config,
    load_config,
    load_config_from_env,
    reset_config,
)
from cobbler.config.models import (
    CobblerConfig,
    CommandConfig,
    LoggingConfig,
    LogLevel,
    MutationConfig,
    PortfolioConfig,
    ScoringConfig,
)

__all__ = [
    # Config models
    "CobblerConfig",
    "CommandConfig",
    "LoggingConfig",
    "LogLevel",
    "MutationConfig",
    "PortfolioConfig",
    "ScoringConfig",
    # Loader
    "ConfigLoader",
    "ConfigurationError",
    "load_config",
    "load_config_from_env",
    "get_config",
    "reset_config",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATHS",
    "ENV_VAR_OVERRIDES",
    # Environment
    "ensure_dotenv_loaded",
    "load_environment",
    "loaded_env_file",
    "reset_environment",
]
