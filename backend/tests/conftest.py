"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
Every emulator built here runs with zero latency and an in-memory store.
"""

import pytest

from shared.config import Settings, get_settings
from shared.database import reset_client_cache
from shared.faults import FaultInjector
from shared.kv_store import MemoryKeyValueStore
from shared.latency import Latency
from shared.persistence import EmulatorPersistence
from modules.client.service import BaasClient, reset_emulator_client


def make_settings(**overrides) -> Settings:
    """Settings with simulated delays disabled and no hosted backend."""
    values = {
        "emulator_storage_dir": "",
        "emulator_latency_scale": 0,
        "emulator_subscribe_delay": 0,
        "emulator_oauth_delay": 0,
        "supabase_url": "",
        "supabase_anon_key": "",
        "supabase_jwt_secret": "test-secret-key-for-testing-only",
        "force_emulator": False,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset cached settings and client singletons before and after each test."""
    get_settings.cache_clear()
    reset_emulator_client()
    reset_client_cache()
    yield
    reset_emulator_client()
    reset_client_cache()
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def settings_factory():
    """Build zero-latency Settings with per-test overrides."""
    return make_settings


@pytest.fixture
def kv_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def persistence(kv_store: MemoryKeyValueStore) -> EmulatorPersistence:
    return EmulatorPersistence(kv_store)


@pytest.fixture
def latency(settings: Settings) -> Latency:
    return Latency(settings)


@pytest.fixture
def faults() -> FaultInjector:
    return FaultInjector()


@pytest.fixture
def client(settings: Settings, kv_store: MemoryKeyValueStore) -> BaasClient:
    """A fresh emulator sharing the kv_store fixture."""
    return BaasClient(settings, kv_store)


@pytest.fixture
def test_user_email() -> str:
    """Provide a consistent test user email."""
    return "john.doe@example.com"


@pytest.fixture
def test_user_password() -> str:
    return "password123"
