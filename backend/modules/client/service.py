"""
Client facade.

Composes auth, tables, storage and realtime behind one object shaped like
a hosted backend client, so application code does not care whether it
talks to the emulator or the real provider.
"""

import inspect
import logging
from typing import Any, Optional

from shared.config import Settings, get_settings
from shared.faults import FaultInjector
from shared.kv_store import KeyValueStore, create_key_value_store
from shared.latency import WRITE_DELAY_MS, Latency
from shared.persistence import EmulatorPersistence

from modules.auth.service import AuthService
from modules.database.document_store import DocumentStore
from modules.database.query import TableQuery
from modules.database.service import TableStore
from modules.realtime.service import RealtimeBus, RealtimeChannel
from modules.storage.service import StorageService

from .exceptions import RpcNotImplementedError
from .helpers import EmulatorHelpers
from .models import RpcHandler, RpcResponse

logger = logging.getLogger(__name__)


class RpcRegistry:
    """Named server-function handlers."""

    def __init__(self) -> None:
        self._handlers: dict[str, RpcHandler] = {}

    def register(self, name: str, handler: RpcHandler) -> None:
        self._handlers[name] = handler
        logger.debug(f"[Client] Registered RPC handler {name}")

    def unregister(self, name: str) -> None:
        self._handlers.pop(name, None)

    def clear(self) -> None:
        self._handlers.clear()

    def get(self, name: str) -> Optional[RpcHandler]:
        return self._handlers.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._handlers)


class BaasClient:
    """
    In-process backend emulator.

    All state is owned by this instance; reset() returns it to a cold start.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[KeyValueStore] = None,
    ):
        self.settings = settings or get_settings()
        if self.settings.debug:
            for name in ("shared", "modules"):
                logging.getLogger(name).setLevel(logging.DEBUG)
        self.store = store if store is not None else create_key_value_store(self.settings)
        self.persistence = EmulatorPersistence(self.store)
        self.latency = Latency(self.settings)
        self.faults = FaultInjector()

        self.auth = AuthService(self.persistence, self.settings, self.latency, self.faults)
        self.database = TableStore(self.persistence, self.settings, self.latency, self.faults)
        self.storage = StorageService(
            self.settings,
            self.latency,
            self.faults,
            user_id_provider=self._current_user_id,
        )
        self.realtime = RealtimeBus(self.settings, self.latency, self.faults)
        self.documents = DocumentStore()
        self.rpc_handlers = RpcRegistry()
        self.helpers = EmulatorHelpers(self)

        logger.debug(f"[Client] Emulator created (store={type(self.store).__name__})")

    def _current_user_id(self) -> Optional[str]:
        session = self.auth.current_session
        return session.user.id if session and session.is_valid() else None

    def from_(self, table: str) -> TableQuery:
        return self.database.from_(table)

    table = from_

    def channel(self, name: str) -> RealtimeChannel:
        return self.realtime.channel(name)

    async def remove_channel(self, channel: RealtimeChannel) -> str:
        return await self.realtime.remove_channel(channel)

    async def remove_all_channels(self) -> list[str]:
        return await self.realtime.remove_all_channels()

    async def rpc(self, name: str, params: Optional[dict[str, Any]] = None) -> RpcResponse:
        """
        Call a registered server function.

        Sync and async handlers are both accepted. Exceptions raised by a
        handler are returned as the response error.
        """
        await self.latency.wait(WRITE_DELAY_MS)
        logger.debug(f"[Client] RPC {name}")

        handler = self.rpc_handlers.get(name)
        if handler is None:
            return RpcResponse(error=RpcNotImplementedError(name))

        try:
            result = handler(params)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.warning(f"[Client] RPC handler {name} failed: {e}")
            return RpcResponse(error=e)

        if isinstance(result, RpcResponse):
            return result
        return RpcResponse(data=result)

    async def hydrate(self) -> None:
        """Restore persisted auth and table state now instead of on first use."""
        await self.auth.hydrate()
        await self.database.hydrate()

    def reset(self) -> None:
        """Drop all in-memory state. Persisted documents are left alone."""
        self.auth.reset()
        self.database.reset()
        self.storage.reset()
        self.realtime.reset()
        self.documents.clear()
        self.rpc_handlers.clear()
        self.faults.clear()


def create_emulator_client(
    settings: Optional[Settings] = None,
    store: Optional[KeyValueStore] = None,
) -> BaasClient:
    """Build a fresh emulator with its own state."""
    return BaasClient(settings, store)


# Module-level instance getter
_client_instance: Optional[BaasClient] = None


def get_emulator_client() -> BaasClient:
    """Get the process-wide emulator singleton."""
    global _client_instance
    if _client_instance is None:
        _client_instance = create_emulator_client()
    return _client_instance


def reset_emulator_client() -> None:
    """Reset the emulator singleton (for testing)."""
    global _client_instance
    if _client_instance is not None:
        _client_instance.reset()
    _client_instance = None
