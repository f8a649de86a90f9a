"""
Test and development helpers for the emulator.

Not part of the provider-compatible surface: these reach into emulator
state to seed data, inject failures and push server-side events.
"""

import logging
from typing import TYPE_CHECKING, Any, Optional

from shared.faults import FaultKind
from shared.models import JsonDict

from modules.auth.models import PendingOAuthState, Session, StoredUser
from modules.storage.models import StoredFile

from .models import RpcHandler

if TYPE_CHECKING:
    from .service import BaasClient

logger = logging.getLogger(__name__)


class EmulatorHelpers:
    """Control surface over one BaasClient."""

    def __init__(self, client: "BaasClient"):
        self._client = client

    async def clear_all(self) -> None:
        """Reset every service and remove the persisted documents."""
        self._client.reset()
        await self._client.persistence.clear()
        logger.debug("[Helpers] Cleared all data and storage")

    # Auth

    def get_users(self) -> list[StoredUser]:
        return self._client.auth.list_users()

    def get_current_session(self) -> Optional[Session]:
        return self._client.auth.current_session

    async def delete_user(self, user_id: str) -> bool:
        """
        Delete a user and everything they own.

        Removes rows whose id or user_id equals ``user_id``, files the user
        uploaded or whose path contains the id, and the user's session.

        Returns:
            True if a user record was removed
        """
        rows = await self._client.database.delete_rows_for_user(user_id)
        files = self._client.storage.delete_files_for_user(user_id)
        removed = await self._client.auth.delete_user(user_id)
        logger.debug(f"[Helpers] Deleted user {user_id}: {rows} rows, {files} files")
        return removed

    # Tables

    async def seed_table(self, table: str, rows: list[JsonDict]) -> None:
        await self._client.database.seed(table, rows)

    def get_table_data(self, table: str) -> list[JsonDict]:
        return self._client.database.get_table_data(table)

    # Faults

    def simulate_error(self, kind: FaultKind, operation: str, error: Optional[Exception]) -> None:
        """Make an operation fail with ``error``; pass None to clear it."""
        self._client.faults.set(kind, operation, error)

    def clear_simulated_errors(self) -> None:
        self._client.faults.clear()

    # Realtime

    def trigger_realtime_event(
        self,
        table: str,
        event_type: str,
        new: Optional[JsonDict],
        old: Optional[JsonDict] = None,
    ) -> int:
        return self._client.realtime.trigger_realtime_event(table, event_type, new, old)

    def get_realtime_subscriptions(self) -> list[dict[str, str]]:
        return self._client.realtime.get_subscriptions()

    # RPC

    def register_rpc_handler(self, name: str, handler: RpcHandler) -> None:
        self._client.rpc_handlers.register(name, handler)

    def unregister_rpc_handler(self, name: str) -> None:
        self._client.rpc_handlers.unregister(name)

    def clear_rpc_handlers(self) -> None:
        self._client.rpc_handlers.clear()

    # Storage

    def get_storage_files(self) -> list[StoredFile]:
        return self._client.storage.get_files()

    def get_bucket_files(self, bucket: str) -> list[StoredFile]:
        return self._client.storage.get_files(bucket)

    def seed_storage(self, files: list[dict[str, Any]]) -> None:
        self._client.storage.seed(files)

    def clear_storage(self) -> None:
        self._client.storage.clear_files()

    # OAuth

    def has_pending_oauth(self) -> bool:
        return self._client.auth.pending_oauth is not None

    def get_pending_oauth_state(self) -> Optional[PendingOAuthState]:
        return self._client.auth.pending_oauth

    def cancel_pending_oauth(self) -> None:
        self._client.auth.cancel_pending_oauth()
        logger.debug("[Helpers] Cancelled pending OAuth flow")
