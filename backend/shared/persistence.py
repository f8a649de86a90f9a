"""
Persisted emulator documents.

Three logical documents are stored as JSON text in the key-value store:
- session: the single current Session (or absent)
- users: a list of ``[email, {email, password, user}]`` pairs
- database: table name -> row id -> row
"""

import json
import logging
from typing import Any, Optional

from .kv_store import KeyValueStore

logger = logging.getLogger(__name__)


class StorageKeys:
    """Stable keys the documents live under."""

    SESSION = "supabase.auth.token"
    USERS = "emulator.users"
    DATABASE = "emulator.database"

    ALL = (SESSION, USERS, DATABASE)


class EmulatorPersistence:
    """
    JSON serialization layer over a KeyValueStore.

    Loads return None for missing or unreadable documents; failures are
    logged and never propagated.
    """

    def __init__(self, store: KeyValueStore):
        self._store = store

    @property
    def store(self) -> KeyValueStore:
        return self._store

    async def load(self, key: str) -> Optional[Any]:
        """Load and decode a JSON document."""
        raw = await self._store.get_item(key)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.error(f"[Persistence] Failed to load {key}: corrupt JSON", exc_info=True)
            return None

    async def save(self, key: str, value: Any) -> None:
        """Encode and store a JSON document."""
        try:
            raw = json.dumps(value, default=str)
        except (TypeError, ValueError):
            logger.error(f"[Persistence] Failed to save {key}: not serializable", exc_info=True)
            return
        await self._store.set_item(key, raw)

    async def remove(self, key: str) -> None:
        await self._store.remove_item(key)

    # -------------------------------------------------------------------------
    # Typed documents
    # -------------------------------------------------------------------------

    async def load_session(self) -> Optional[dict[str, Any]]:
        data = await self.load(StorageKeys.SESSION)
        return data if isinstance(data, dict) else None

    async def save_session(self, session: dict[str, Any]) -> None:
        await self.save(StorageKeys.SESSION, session)

    async def remove_session(self) -> None:
        await self.remove(StorageKeys.SESSION)

    async def load_users(self) -> Optional[list[list[Any]]]:
        data = await self.load(StorageKeys.USERS)
        return data if isinstance(data, list) else None

    async def save_users(self, pairs: list[list[Any]]) -> None:
        await self.save(StorageKeys.USERS, pairs)

    async def load_database(self) -> Optional[dict[str, dict[str, dict[str, Any]]]]:
        data = await self.load(StorageKeys.DATABASE)
        return data if isinstance(data, dict) else None

    async def save_database(self, tables: dict[str, dict[str, dict[str, Any]]]) -> None:
        await self.save(StorageKeys.DATABASE, tables)

    async def clear(self) -> None:
        """Remove every persisted document."""
        for key in StorageKeys.ALL:
            await self.remove(key)
