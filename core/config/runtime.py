"""
Runtime Configuration

Central configuration for the ledger, storage and verification services.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()


logger = logging.getLogger(__name__)

# Environment variable prefix
ENV_PREFIX = "CHUNKSEAL_"

LEDGER_BACKENDS = ("local", "http")
STORAGE_BACKENDS = ("memory", "json")


@dataclass
class LedgerConfig:
    """Configuration for the ledger that anchors Merkle roots."""
    backend: str = "local"
    # local backend: JSON file for persistence (None = in-memory only)
    path: Optional[str] = None
    account: str = "local-admin"
    # http backend
    base_url: str = ""
    api_key: Optional[str] = None
    timeout: float = 10.0
    # anchor service
    max_retries: int = 3
    retry_delay: float = 0.5
    explorer_url: str = ""

    def __post_init__(self) -> None:
        if self.backend not in LEDGER_BACKENDS:
            raise ValueError(f"Unknown ledger backend {self.backend!r}, expected one of {LEDGER_BACKENDS}")


@dataclass
class StorageConfig:
    """Configuration for the sealed-chunk store."""
    backend: str = "memory"
    path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.backend not in STORAGE_BACKENDS:
            raise ValueError(f"Unknown storage backend {self.backend!r}, expected one of {STORAGE_BACKENDS}")


@dataclass
class VerificationConfig:
    """Configuration for the verification protocol."""
    anchor_timeout_s: float = 10.0
    max_workers: int = 8


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables (CHUNKSEAL_*, .env supported)
    - JSON or YAML file
    - Programmatic construction
    """
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    verification: VerificationConfig = field(default_factory=VerificationConfig)
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - CHUNKSEAL_LEDGER_BACKEND: local | http
        - CHUNKSEAL_LEDGER_PATH: JSON file for the local ledger
        - CHUNKSEAL_LEDGER_URL: Base URL of the HTTP ledger gateway
        - CHUNKSEAL_LEDGER_API_KEY: Bearer token for the gateway
        - CHUNKSEAL_LEDGER_TIMEOUT: Per-request timeout (seconds)
        - CHUNKSEAL_LEDGER_MAX_RETRIES: Retries for transient ledger failures
        - CHUNKSEAL_EXPLORER_URL: Block explorer tx URL prefix
        - CHUNKSEAL_STORAGE_BACKEND: memory | json
        - CHUNKSEAL_STORAGE_PATH: JSON file for the chunk store
        - CHUNKSEAL_ANCHOR_TIMEOUT: Anchor lookup timeout during verification
        - CHUNKSEAL_MAX_WORKERS: Concurrent anchor lookups
        - CHUNKSEAL_LOG_LEVEL / CHUNKSEAL_LOG_FILE
        """
        overrides: dict[str, Any] = {}

        def env(name: str) -> Optional[str]:
            return os.getenv(f"{ENV_PREFIX}{name}")

        # Ledger
        if env("LEDGER_BACKEND"):
            overrides.setdefault("ledger", {})["backend"] = env("LEDGER_BACKEND")
        if env("LEDGER_PATH"):
            overrides.setdefault("ledger", {})["path"] = env("LEDGER_PATH")
        if env("LEDGER_URL"):
            overrides.setdefault("ledger", {})["base_url"] = env("LEDGER_URL")
        if env("LEDGER_API_KEY"):
            overrides.setdefault("ledger", {})["api_key"] = env("LEDGER_API_KEY")
        if env("LEDGER_TIMEOUT"):
            overrides.setdefault("ledger", {})["timeout"] = float(env("LEDGER_TIMEOUT"))
        if env("LEDGER_MAX_RETRIES"):
            overrides.setdefault("ledger", {})["max_retries"] = int(env("LEDGER_MAX_RETRIES"))
        if env("EXPLORER_URL"):
            overrides.setdefault("ledger", {})["explorer_url"] = env("EXPLORER_URL")

        # Storage
        if env("STORAGE_BACKEND"):
            overrides.setdefault("storage", {})["backend"] = env("STORAGE_BACKEND")
        if env("STORAGE_PATH"):
            overrides.setdefault("storage", {})["path"] = env("STORAGE_PATH")

        # Verification
        if env("ANCHOR_TIMEOUT"):
            overrides.setdefault("verification", {})["anchor_timeout_s"] = float(env("ANCHOR_TIMEOUT"))
        if env("MAX_WORKERS"):
            overrides.setdefault("verification", {})["max_workers"] = int(env("MAX_WORKERS"))

        # Logging
        if env("LOG_LEVEL"):
            overrides["log_level"] = env("LOG_LEVEL")
        if env("LOG_FILE"):
            overrides["log_file"] = env("LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_file(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a JSON or YAML file (by extension)."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        if path.suffix in (".yaml", ".yml"):
            import yaml
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        else:
            with open(path) as f:
                data = json.load(f)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        ledger_data = data.get("ledger", {}) or {}
        storage_data = data.get("storage", {}) or {}
        verification_data = data.get("verification", {}) or {}

        return cls(
            ledger=LedgerConfig(**ledger_data),
            storage=StorageConfig(**storage_data),
            verification=VerificationConfig(**verification_data),
            log_level=data.get("log_level", "INFO"),
            log_file=data.get("log_file"),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for section in ("ledger", "storage", "verification"):
            for key, value in overrides.get(section, {}).items():
                setattr(getattr(new_config, section), key, value)
        if "log_level" in overrides:
            new_config.log_level = overrides["log_level"]
        if "log_file" in overrides:
            new_config.log_file = overrides["log_file"]

        # Re-run backend validation on the merged values
        new_config.ledger.__post_init__()
        new_config.storage.__post_init__()
        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary (secrets omitted)."""
        return {
            "ledger": {
                "backend": self.ledger.backend,
                "path": self.ledger.path,
                "account": self.ledger.account,
                "base_url": self.ledger.base_url,
                "timeout": self.ledger.timeout,
                "max_retries": self.ledger.max_retries,
                "retry_delay": self.ledger.retry_delay,
                "explorer_url": self.ledger.explorer_url,
            },
            "storage": {
                "backend": self.storage.backend,
                "path": self.storage.path,
            },
            "verification": {
                "anchor_timeout_s": self.verification.anchor_timeout_s,
                "max_workers": self.verification.max_workers,
            },
            "log_level": self.log_level,
            "log_file": self.log_file,
        }


def default_config_paths() -> list[Path]:
    """Config file search order."""
    return [
        Path.cwd() / "chunkseal.json",
        Path.cwd() / ".chunkseal.json",
        Path.home() / ".config" / "chunkseal" / "config.json",
    ]


def load_runtime_config(config_path: Optional[str | Path] = None) -> RuntimeConfig:
    """
    Load RuntimeConfig from a config file, then overlay environment variables.

    If `config_path` is None, the default locations are searched and the
    first existing file is used. Environment variables ALWAYS override
    file values.
    """
    config: Optional[RuntimeConfig] = None

    if config_path is not None:
        config = RuntimeConfig.from_file(config_path)
    else:
        for path in default_config_paths():
            if path.exists():
                config = RuntimeConfig.from_file(path)
                logger.debug(f"Loaded config from {path}")
                break

    if config is None:
        config = RuntimeConfig()

    return config.with_env_overrides()


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return json.dumps(
        {
            "ledger": {
                "backend": "local",
                "path": ".chunkseal/ledger.json",
                "account": "local-admin",
                "base_url": "",
                "timeout": 10.0,
                "max_retries": 3,
                "retry_delay": 0.5,
                "explorer_url": "",
            },
            "storage": {
                "backend": "json",
                "path": ".chunkseal/store.json",
            },
            "verification": {
                "anchor_timeout_s": 10.0,
                "max_workers": 8,
            },
            "log_level": "INFO",
            "log_file": None,
        },
        indent=2,
    ) + "\n"


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = load_runtime_config()
    return _default_config


def set_default_config(config: Optional[RuntimeConfig]) -> None:
    """Set (or reset with None) the default runtime configuration."""
    global _default_config
    _default_config = config
