"""Configuration loader for the venue hierarchy service."""

from functools import lru_cache
from pathlib import Path

import yaml

from venue_hierarchy.configs.settings import get_settings

settings = get_settings()


class Config:
    """Configuration for the venue hierarchy service."""

    # 1. Setup Base Paths
    CONFIG_DIR = Path(__file__).parent.resolve()
    PROJECT_ROOT = settings.BASE_DIR

    # 2. Define File Paths
    HIERARCHY_CONFIG_PATH = settings.HIERARCHY_CONFIG_PATH

    @classmethod
    @lru_cache
    def load_hierarchy_config(cls) -> dict:
        """Load the YAML policy for address normalisation and display."""
        return load_yaml_config(cls.HIERARCHY_CONFIG_PATH)

    @classmethod
    def get_hierarchy_config_path(cls) -> Path:
        """Return the absolute path to the hierarchy YAML."""
        return cls.HIERARCHY_CONFIG_PATH


def load_yaml_config(path: Path) -> dict:
    """
    Read a YAML config file, substituting ``${KEY}`` placeholders.

    Placeholders are resolved against the current Settings values; unknown
    placeholders are left untouched.
    """
    if not path.exists():
        raise FileNotFoundError(f"Missing config at {path}")

    with open(path, encoding="utf-8") as f:
        content = f.read()

    # Substitute environment variables from settings
    for key, value in get_settings().model_dump().items():
        placeholder = f"${{{key}}}"
        if placeholder in content:
            # Handle SecretStr
            val_str = (
                value.get_secret_value()
                if hasattr(value, "get_secret_value")
                else str(value)
            )
            content = content.replace(placeholder, val_str)

    return yaml.safe_load(content) or {}
