"""Configuration management for tsresolver.

Loads environment variables (optionally from a .env file in the working
directory) and provides centralized config access.
"""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

__version__ = "0.3.0"

_TRUTHY = {"1", "true", "yes", "on"}


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self, env_path: Optional[Path] = None):
        """Initialize config by loading a .env file.

        Args:
            env_path: Explicit .env file; defaults to ./.env
        """
        load_dotenv(env_path or Path.cwd() / ".env")

    @property
    def trace(self) -> bool:
        """Whether resolver decisions are traced to the console.

        Returns:
            True when TSRESOLVER_TRACE is set to a truthy value
        """
        return os.getenv("TSRESOLVER_TRACE", "").strip().lower() in _TRUTHY

    @property
    def project_file_name(self) -> str:
        """Name of the compiler project file searched for by find-project."""
        return os.getenv("TSRESOLVER_PROJECT_FILE", "tsconfig.json")

    @property
    def dependency_file(self) -> Optional[str]:
        """Default dependency map (JSON) used when --deps isn't given."""
        return os.getenv("TSRESOLVER_DEPENDENCY_FILE") or None


# Singleton instance
_config = None


def get_config() -> Config:
    """Get or create singleton Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config
