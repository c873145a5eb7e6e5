"""
API Dependencies

Dependency injection for the API. One set of services is built per
process from the runtime configuration and shared by all requests.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from core.config import get_default_config
from core.services import Services, build_services

logger = logging.getLogger(__name__)


_services: Optional[Services] = None
_services_lock = threading.Lock()


def get_services() -> Services:
    """
    Return the process-wide services, building them on first use.

    Config file search order:
      1. ./chunkseal.json
      2. ./.chunkseal.json
      3. ~/.config/chunkseal/config.json

    Environment variables ALWAYS override config file values.
    """
    global _services
    with _services_lock:
        if _services is None:
            config = get_default_config()
            _services = build_services(config)
            logger.info(
                f"Services built (ledger={config.ledger.backend}, storage={config.storage.backend})"
            )
        return _services


def set_services(services: Optional[Services]) -> None:
    """Replace (or reset with None) the process-wide services."""
    global _services
    with _services_lock:
        if _services is not None and _services is not services:
            _services.close()
        _services = services
