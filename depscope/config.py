"""Configuration management for depscope.

Loads environment variables and provides centralized config access.
"""
import os
from pathlib import Path
from typing import List, Optional, Set
from dotenv import load_dotenv

__version__ = "0.3.0"

DEFAULT_POPUP_TITLE = "What classes look on this class?"

DEFAULT_EXCLUDED_DIRS = {
    '.git', '.hg', '.svn',
    '.idea', '.vscode', '.gradle', '.mvn',
    'build', 'target', 'out', 'bin',
    'node_modules', '.venv', 'venv',
}

DEFAULT_TEXT_EXTENSIONS = ['.xml', '.properties']


def _split_list(value: str) -> List[str]:
    return [part.strip() for part in value.split(',') if part.strip()]


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self, env_path: Optional[Path] = None):
        """Initialize config by loading a .env file.

        Args:
            env_path: .env file to load; defaults to .env in the working directory
        """
        load_dotenv(env_path or Path.cwd() / ".env")

    @property
    def excluded_dirs(self) -> Set[str]:
        """Directory names skipped by the project scan.

        Returns:
            Names from DEPSCOPE_EXCLUDED_DIRS, or the default set
        """
        value = os.getenv("DEPSCOPE_EXCLUDED_DIRS")
        if value is None:
            return set(DEFAULT_EXCLUDED_DIRS)
        return set(_split_list(value))

    @property
    def text_extensions(self) -> List[str]:
        """Extensions of non-Java files searched for qualified class names.

        Returns:
            Extensions from DEPSCOPE_TEXT_EXTENSIONS, or ['.xml', '.properties']
        """
        value = os.getenv("DEPSCOPE_TEXT_EXTENSIONS")
        if value is None:
            return list(DEFAULT_TEXT_EXTENSIONS)
        return [ext if ext.startswith('.') else f".{ext}" for ext in _split_list(value)]

    @property
    def popup_title(self) -> str:
        return os.getenv("DEPSCOPE_POPUP_TITLE", DEFAULT_POPUP_TITLE)

    @property
    def force_ascii(self) -> bool:
        """Whether icon glyphs are always replaced with ASCII (DEPSCOPE_ASCII)."""
        return os.getenv("DEPSCOPE_ASCII", "").lower() in ("1", "true", "yes")


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
