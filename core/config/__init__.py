"""
Runtime Configuration Module

Provides configuration loading and management for chunkseal.
"""

from .runtime import (
    LedgerConfig,
    RuntimeConfig,
    StorageConfig,
    VerificationConfig,
    get_default_config,
    get_default_config_template,
    load_runtime_config,
    set_default_config,
)

__all__ = [
    "LedgerConfig",
    "RuntimeConfig",
    "StorageConfig",
    "VerificationConfig",
    "get_default_config",
    "get_default_config_template",
    "load_runtime_config",
    "set_default_config",
]
