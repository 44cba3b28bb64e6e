"""
Base configuration infrastructure for the Guardian moderation engine.

Contains shared constants and the Environment enum.
"""

from enum import Enum
from pathlib import Path

ENV_PREFIX = "GM_"
DEFAULT_CONFIG_PATH = Path("configs/moderation.yaml")


class Environment(Enum):
    """Environment types for configuration."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"
