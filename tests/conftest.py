"""
Pytest configuration and shared fixtures for chunkseal tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

# Import fixture modules
_common = importlib.import_module("fixtures.common")

# Extract factory functions
make_texts = _common.make_texts
make_tree = _common.make_tree
make_source = _common.make_source
make_sources = _common.make_sources
make_sealed_records = _common.make_sealed_records

from core.anchor import AnchorService, LocalLedger
from core.sealing import DocumentSealer
from core.storage import InMemoryChunkStore
from core.tamper import TamperSimulator
from core.verification import SealedChunkVerifier


FIXED_LEDGER_TIME = 1_700_000_000


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def texts():
    """Provide five distinct chunk texts."""
    return make_texts()


@pytest.fixture
def ledger():
    """Provide an in-memory LocalLedger with a fixed clock."""
    return LocalLedger(clock=lambda: FIXED_LEDGER_TIME)


@pytest.fixture
def anchor_service(ledger):
    """Provide an AnchorService over the local ledger (no real sleeping)."""
    return AnchorService(ledger, max_retries=3, retry_delay=0.01, sleep=lambda _: None)


@pytest.fixture
def store():
    """Provide an empty in-memory chunk store."""
    return InMemoryChunkStore()


@pytest.fixture
def sealer(store, anchor_service):
    """Provide a DocumentSealer wired to the store and local ledger."""
    return DocumentSealer(store, anchor_service)


@pytest.fixture
def verifier(anchor_service):
    """Provide a SealedChunkVerifier over the local ledger."""
    with SealedChunkVerifier(anchor_service, anchor_timeout_s=2.0) as v:
        yield v


@pytest.fixture
def tamper_simulator(store):
    """Provide a TamperSimulator over the shared store."""
    return TamperSimulator(store)


@pytest.fixture
def sealed(sealer, texts):
    """Provide the SealResult of sealing `texts` as document doc-001."""
    return sealer.seal(texts, document_id="doc-001", file_name="apbn-2024.pdf")


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


# =============================================================================
# Test Helpers (available to all tests via fixtures)
# =============================================================================

@pytest.fixture
def assert_failed_at():
    """Helper to assert a verdict failed at a specific layer."""
    def _assert(verdict, layer: str):
        assert not verdict.verified, f"Expected failure at {layer}, but chunk verified"
        assert verdict.failed_layer == layer, (
            f"Expected failure at {layer}, got {verdict.failed_layer}: {verdict.detail}"
        )
    return _assert
