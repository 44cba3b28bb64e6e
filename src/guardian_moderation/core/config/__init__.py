"""
Configuration management for the Guardian moderation engine.

Provides a clean public API for all configuration components.
"""

from .base import DEFAULT_CONFIG_PATH, ENV_PREFIX, Environment
from .main import Config
from .runtime import MonitoringConfig, ModerationConfig, SafetyConfig, StorageConfig
from .yaml_loader import YAMLConfigLoader

__all__ = [
    # Main class
    "Config",
    # Base
    "Environment",
    "ENV_PREFIX",
    "DEFAULT_CONFIG_PATH",
    # Sections
    "ModerationConfig",
    "SafetyConfig",
    "MonitoringConfig",
    "StorageConfig",
    # Loading
    "YAMLConfigLoader",
]
