"""
Shared infrastructure for the BaaS emulator.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Hosted Supabase client factory
- exceptions: Base exception classes
- kv_store / persistence: Durable documents behind the emulator
- latency / faults: Simulated network delay and injected failures

Note: Emulator semantics should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, reset_client_cache
from .exceptions import (
    EmulatorError,
    ValidationError,
    NotFoundError,
    ConflictError,
    AuthenticationError,
    CapabilityError,
    StorageIOError,
)
from .faults import FaultInjector, FaultKind
from .ids import generate_id, generate_token
from .kv_store import (
    KeyValueStore,
    MemoryKeyValueStore,
    FileKeyValueStore,
    create_key_value_store,
)
from .latency import Latency
from .models import JsonDict, OperationResult, utc_now_iso
from .persistence import EmulatorPersistence, StorageKeys

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "reset_client_cache",
    "EmulatorError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "AuthenticationError",
    "CapabilityError",
    "StorageIOError",
    "FaultInjector",
    "FaultKind",
    "generate_id",
    "generate_token",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "FileKeyValueStore",
    "create_key_value_store",
    "Latency",
    "JsonDict",
    "OperationResult",
    "utc_now_iso",
    "EmulatorPersistence",
    "StorageKeys",
]
