"""
Main configuration class for the Guardian moderation engine.

Contains the Config class that assembles all configuration sections and
loads them from YAML files and ``GM_*`` environment variables.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..exceptions import ConfigurationError
from .base import DEFAULT_CONFIG_PATH, ENV_PREFIX, Environment
from .runtime import MonitoringConfig, ModerationConfig, SafetyConfig, StorageConfig
from .yaml_loader import YAMLConfigLoader

logger = logging.getLogger(__name__)

WHITELIST_SCOPES = ("global", "scoped")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Main configuration class for the Guardian moderation engine."""

    # Environment
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    moderation: ModerationConfig = field(default_factory=ModerationConfig)
    safety: SafetyConfig = field(default_factory=SafetyConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    def __post_init__(self) -> None:
        """Apply word list overrides and environment-specific defaults."""
        if self.safety.wordlist_file:
            self._load_wordlist_file(Path(self.safety.wordlist_file))

        if self.environment == Environment.PRODUCTION:
            self.debug = False
            self.monitoring.structured_logging = True
        elif self.environment == Environment.TESTING:
            self.debug = True
            self.monitoring.structured_logging = False

        self.validate()

    def validate(self) -> None:
        """Reject values the engine cannot run with."""
        if self.moderation.batch_undo_window_s <= 0:
            raise ConfigurationError(
                "batch_undo_window_s must be positive", component="Config"
            )
        if self.moderation.single_item_undo_window_s <= 0:
            raise ConfigurationError(
                "single_item_undo_window_s must be positive", component="Config"
            )
        if self.safety.whitelist_scope not in WHITELIST_SCOPES:
            raise ConfigurationError(
                f"whitelist_scope must be one of {', '.join(WHITELIST_SCOPES)}, "
                f"got '{self.safety.whitelist_scope}'",
                component="Config",
            )
        if self.monitoring.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, "
                f"got '{self.monitoring.log_level}'",
                component="Config",
            )

    def _load_wordlist_file(self, path: Path) -> None:
        """Replace the default word lists with the ones in ``path``."""
        try:
            data = YAMLConfigLoader.load_yaml(path)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Could not load word list file {path}: {e}", component="Config"
            ) from e

        if "blocked_keywords" in data:
            self.safety.blocked_keywords = [str(k) for k in data["blocked_keywords"]]
        if "allowed_terms" in data:
            self.safety.allowed_terms = [str(t) for t in data["allowed_terms"]]
        logger.info(
            f"Loaded word lists from {path}: {len(self.safety.blocked_keywords)} "
            f"blocked, {len(self.safety.allowed_terms)} allowed"
        )

    @classmethod
    def load(cls, config_path: Optional[Union[str, Path]] = None) -> "Config":
        """Load defaults, then the YAML file if present, then env overrides."""
        path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        data: Dict[str, Any] = {}
        if path.exists():
            data = cls._read_yaml(path)
        elif config_path:
            raise ConfigurationError(
                f"Config file not found: {path}", component="Config"
            )
        return cls.from_env(cls.from_dict(data))

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "Config":
        """Load configuration from a YAML file."""
        return cls.from_dict(cls._read_yaml(Path(config_path)))

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        try:
            return YAMLConfigLoader.load_yaml(path)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Could not load config file {path}: {e}", component="Config"
            ) from e

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Build configuration from a nested dictionary."""
        safety_data = dict(data.get("safety", {}) or {})
        if safety_data.get("wordlist_file"):
            safety_data["wordlist_file"] = Path(safety_data["wordlist_file"])
        storage_data = dict(data.get("storage", {}) or {})
        if "data_dir" in storage_data:
            storage_data["data_dir"] = Path(storage_data["data_dir"])

        try:
            return cls(
                environment=Environment(data.get("environment", "development")),
                debug=data.get("debug", False),
                moderation=ModerationConfig(**(data.get("moderation", {}) or {})),
                safety=SafetyConfig(**safety_data),
                monitoring=MonitoringConfig(**(data.get("monitoring", {}) or {})),
                storage=StorageConfig(**storage_data),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid configuration: {e}", component="Config"
            ) from e

    @classmethod
    def from_env(cls, base: Optional["Config"] = None) -> "Config":
        """Load configuration from environment variables on top of ``base``."""
        base = base or cls()

        def getenv_bool(name: str, default: bool) -> bool:
            v = os.getenv(ENV_PREFIX + name)
            return default if v is None else v.lower() in {"1", "true", "yes", "on"}

        def getenv_float(name: str, default: float) -> float:
            v = os.getenv(ENV_PREFIX + name)
            if v is None:
                return default
            try:
                return float(v)
            except ValueError as e:
                raise ConfigurationError(
                    f"{ENV_PREFIX + name} must be a number, got '{v}'",
                    component="Config",
                ) from e

        def getenv_str(name: str, default: str) -> str:
            return os.getenv(ENV_PREFIX + name, default)

        def getenv_list(name: str, default: List[str]) -> List[str]:
            v = os.getenv(ENV_PREFIX + name)
            if v is None:
                return list(default)
            return [item.strip() for item in v.split(",") if item.strip()]

        # GM_* env overrides only
        env = Environment(getenv_str("ENV", base.environment.value))
        debug = getenv_bool("DEBUG", base.debug)

        moderation = ModerationConfig(
            batch_undo_window_s=getenv_float(
                "MODERATION__BATCH_UNDO_WINDOW_S",
                base.moderation.batch_undo_window_s,
            ),
            single_item_undo_window_s=getenv_float(
                "MODERATION__SINGLE_ITEM_UNDO_WINDOW_S",
                base.moderation.single_item_undo_window_s,
            ),
            single_item_undo_enabled=getenv_bool(
                "MODERATION__SINGLE_ITEM_UNDO_ENABLED",
                base.moderation.single_item_undo_enabled,
            ),
            materialize_children_on_approve=getenv_bool(
                "MODERATION__MATERIALIZE_CHILDREN_ON_APPROVE",
                base.moderation.materialize_children_on_approve,
            ),
            dedupe_pending_requests=getenv_bool(
                "MODERATION__DEDUPE_PENDING_REQUESTS",
                base.moderation.dedupe_pending_requests,
            ),
        )

        wordlist_env = os.getenv(ENV_PREFIX + "SAFETY__WORDLIST_FILE")
        safety = SafetyConfig(
            blocked_keywords=getenv_list(
                "SAFETY__BLOCKED_KEYWORDS", base.safety.blocked_keywords
            ),
            allowed_terms=getenv_list(
                "SAFETY__ALLOWED_TERMS", base.safety.allowed_terms
            ),
            whitelist_scope=getenv_str(
                "SAFETY__WHITELIST_SCOPE", base.safety.whitelist_scope
            ),
            block_age_restricted=getenv_bool(
                "SAFETY__BLOCK_AGE_RESTRICTED", base.safety.block_age_restricted
            ),
            block_explicit=getenv_bool(
                "SAFETY__BLOCK_EXPLICIT", base.safety.block_explicit
            ),
            # The base already applied its own word list file
            wordlist_file=Path(wordlist_env) if wordlist_env else None,
            log_blocked_searches=getenv_bool(
                "SAFETY__LOG_BLOCKED_SEARCHES", base.safety.log_blocked_searches
            ),
        )

        monitoring = MonitoringConfig(
            log_level=getenv_str("MONITORING__LOG_LEVEL", base.monitoring.log_level),
            structured_logging=getenv_bool(
                "MONITORING__STRUCTURED_LOGGING", base.monitoring.structured_logging
            ),
        )

        data_dir_env = os.getenv(ENV_PREFIX + "STORAGE__DATA_DIR")
        storage = StorageConfig(
            data_dir=Path(data_dir_env) if data_dir_env else base.storage.data_dir
        )

        return cls(
            environment=env,
            debug=debug,
            moderation=moderation,
            safety=safety,
            monitoring=monitoring,
            storage=storage,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "environment": self.environment.value,
            "debug": self.debug,
            "moderation": {
                "batch_undo_window_s": self.moderation.batch_undo_window_s,
                "single_item_undo_window_s": self.moderation.single_item_undo_window_s,
                "single_item_undo_enabled": self.moderation.single_item_undo_enabled,
                "materialize_children_on_approve": (
                    self.moderation.materialize_children_on_approve
                ),
                "dedupe_pending_requests": self.moderation.dedupe_pending_requests,
            },
            "safety": {
                "blocked_keywords": list(self.safety.blocked_keywords),
                "allowed_terms": list(self.safety.allowed_terms),
                "whitelist_scope": self.safety.whitelist_scope,
                "block_age_restricted": self.safety.block_age_restricted,
                "block_explicit": self.safety.block_explicit,
                "wordlist_file": (
                    str(self.safety.wordlist_file) if self.safety.wordlist_file else None
                ),
                "log_blocked_searches": self.safety.log_blocked_searches,
            },
            "monitoring": {
                "log_level": self.monitoring.log_level,
                "structured_logging": self.monitoring.structured_logging,
            },
            "storage": {
                "data_dir": str(self.storage.data_dir),
            },
        }

    def save(self, config_path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        YAMLConfigLoader.save_yaml(self.to_dict(), Path(config_path))
