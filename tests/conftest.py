"""Global test fixtures for the Veil test suite."""

from __future__ import annotations

import os

import pytest

from veil.core.config import clear_config_cache
from veil.identity import Identity, Registry

PARTY_IDS = ("alice", "bob", "carol", "eve")


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def fresh_config():
    """Reload settings for every test so env changes take effect."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all VEIL_ environment variables."""
    for key in list(os.environ.keys()):
        if key.startswith("VEIL_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def strict_bind_env(monkeypatch):
    """Make strict bind the configured default."""
    monkeypatch.setenv("VEIL_STRICT_BIND", "true")


# ============================================================================
# Identity Fixtures
# ============================================================================


@pytest.fixture(scope="session")
def parties() -> dict[str, Identity]:
    """One identity per test party, generated once per session."""
    return {party: Identity.generate(party) for party in PARTY_IDS}


@pytest.fixture
def alice(parties) -> Identity:
    return parties["alice"]


@pytest.fixture
def bob(parties) -> Identity:
    return parties["bob"]


@pytest.fixture
def carol(parties) -> Identity:
    return parties["carol"]


@pytest.fixture
def eve(parties) -> Identity:
    return parties["eve"]


@pytest.fixture
def registry(parties) -> Registry:
    """Registry holding every test party's public key."""
    return Registry.from_identities(*parties.values())


@pytest.fixture
def small_registry(alice, bob, carol) -> Registry:
    """Registry of alice, bob and carol only (eve is unknown)."""
    return Registry.from_identities(alice, bob, carol)
