"""
Environment Variable Handling.

Loads a .env file into os.environ using python-dotenv so that ${VAR}
references and COBBLER_* overrides in the configuration can be resolved.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Track whether dotenv has been loaded
_dotenv_loaded: bool = False
_loaded_from: Path | None = None


def ensure_dotenv_loaded(env_file: str = ".env") -> bool:
    """Ensure the .env file is loaded into os.environ.

    Loading happens at most once per process; call reset_environment()
    to force a reload.

    Args:
        env_file: Path to .env file (relative or absolute)

    Returns:
        True if a .env file was found and loaded
    """
    global _dotenv_loaded, _loaded_from

    if _dotenv_loaded:
        return _loaded_from is not None

    _dotenv_loaded = True
    for env_path in (Path(env_file), Path.cwd() / env_file):
        if env_path.is_file():
            # Existing environment wins over the file
            load_dotenv(env_path, override=False)
            _loaded_from = env_path
            return True

    return False


def load_environment(env_file: str = ".env") -> dict[str, str]:
    """Load the .env file (once) and return a snapshot of the environment.

    Args:
        env_file: Path to .env file

    Returns:
        Copy of os.environ after loading
    """
    ensure_dotenv_loaded(env_file)
    return dict(os.environ)


def loaded_env_file() -> Path | None:
    """Path of the .env file that was loaded, if any."""
    return _loaded_from


def reset_environment() -> None:
    """Forget that .env was loaded.

    Useful for testing or reloading after .env changes.
    """
    global _dotenv_loaded, _loaded_from
    _dotenv_loaded = False
    _loaded_from = None
