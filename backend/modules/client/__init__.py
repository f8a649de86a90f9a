"""
Client module.

The facade that composes every emulator service, its test helpers, and
the factory that picks between the emulator and the hosted backend.

Public API:
- IBackendClient: Interface for the provider-compatible surface
- BaasClient: Emulator facade
- EmulatorHelpers: Seeding, fault injection and event triggers
- create_backend_client: Emulator or hosted client, by configuration
"""

from .interfaces import IBackendClient
from .service import (
    BaasClient,
    RpcRegistry,
    create_emulator_client,
    get_emulator_client,
    reset_emulator_client,
)
from .helpers import EmulatorHelpers
from .factory import create_backend_client, uses_emulator
from .models import RpcResponse
from .exceptions import RpcNotImplementedError

__all__ = [
    # Interface
    "IBackendClient",
    # Implementation
    "BaasClient",
    "RpcRegistry",
    "EmulatorHelpers",
    "create_emulator_client",
    "get_emulator_client",
    "reset_emulator_client",
    "create_backend_client",
    "uses_emulator",
    # Models
    "RpcResponse",
    # Exceptions
    "RpcNotImplementedError",
]
