"""
Realtime bus implementation.

Registrations are grouped by channel name. Table-change events are never
emitted by database writes; tests push them with trigger_realtime_event().
Every listener call is guarded so one failing subscriber cannot stop
delivery to the others.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

from shared.config import Settings, get_settings
from shared.faults import FaultInjector
from shared.ids import generate_id
from shared.latency import Latency
from shared.models import JsonDict

from .filters import filter_matches
from .models import (
    BroadcastCallback,
    ChannelRegistry,
    ChannelStatus,
    PresenceDiffCallback,
    PresenceSyncCallback,
    RealtimeEvent,
    RealtimePayload,
    StatusCallback,
    TableChangeCallback,
    TableListener,
)

logger = logging.getLogger(__name__)

TABLE_CHANGE_KINDS = ("postgres_changes", "table-change")


def _event_name(event: Any) -> str:
    return event.value if isinstance(event, RealtimeEvent) else str(event)


def _safe_call(callback: Callable[..., Any], *args: Any) -> bool:
    try:
        callback(*args)
        return True
    except Exception:
        logger.error(f"[Realtime] Listener {getattr(callback, '__name__', callback)!r} failed", exc_info=True)
        return False


class RealtimeChannel:
    """
    Handle on a named channel.

    Registrations made through on() are live immediately; subscribe()
    only reports status. Each handle has its own presence key.
    """

    def __init__(self, bus: "RealtimeBus", name: str, presence_key: Optional[str] = None):
        self._bus = bus
        self.name = name
        self.presence_key = presence_key or generate_id("presence")
        self._status_timer: Optional[asyncio.TimerHandle] = None
        self.subscribed = False

    def __repr__(self) -> str:
        return f"<RealtimeChannel {self.name}>"

    @property
    def _registry(self) -> ChannelRegistry:
        return self._bus.registry(self.name)

    # Registration

    def on(self, kind: str, config: JsonDict, callback: Callable[..., Any]) -> "RealtimeChannel":
        """
        Register a listener.

        Args:
            kind: "postgres_changes" (or "table-change"), "broadcast" or "presence"
            config: {"event", "table", "schema", "filter"} for table changes,
                {"event"} for broadcast and presence
            callback: Listener for the event
        """
        event = config.get("event", "*")
        if kind in TABLE_CHANGE_KINDS:
            return self.on_postgres_changes(
                event,
                callback,
                table=config.get("table", "*"),
                schema=config.get("schema", "public"),
                filter=config.get("filter"),
            )
        if kind == "broadcast":
            return self.on_broadcast(event, callback)
        if kind == "presence":
            if event == "sync":
                return self.on_presence_sync(callback)
            if event == "join":
                return self.on_presence_join(callback)
            if event == "leave":
                return self.on_presence_leave(callback)
        logger.warning(f"[Realtime] Ignoring unknown listener {kind}:{event} on {self.name}")
        return self

    def on_postgres_changes(
        self,
        event: str,
        callback: TableChangeCallback,
        table: str = "*",
        schema: str = "public",
        filter: Optional[str] = None,
    ) -> "RealtimeChannel":
        self._registry.table_listeners.append(
            TableListener(table=table, event=_event_name(event), callback=callback, schema=schema, filter=filter)
        )
        logger.debug(f"[Realtime] {self.name} listening for {event} on {table}")
        return self

    def on_broadcast(self, event: str, callback: BroadcastCallback) -> "RealtimeChannel":
        self._registry.broadcast_listeners.setdefault(event, []).append(callback)
        return self

    def on_presence_sync(self, callback: PresenceSyncCallback) -> "RealtimeChannel":
        self._registry.presence_sync.append(callback)
        return self

    def on_presence_join(self, callback: PresenceDiffCallback) -> "RealtimeChannel":
        self._registry.presence_join.append(callback)
        return self

    def on_presence_leave(self, callback: PresenceDiffCallback) -> "RealtimeChannel":
        self._registry.presence_leave.append(callback)
        return self

    # Lifecycle

    def subscribe(self, callback: Optional[StatusCallback] = None) -> "RealtimeChannel":
        """
        Report the channel as joined.

        The status callback fires after the simulated handshake delay
        (immediately when no event loop is running) with SUBSCRIBED, or
        CHANNEL_ERROR and the injected error.
        """
        self._bus.registry(self.name)
        error = self._bus.faults.get("realtime", f"{self.name}.subscribe")
        status = ChannelStatus.CHANNEL_ERROR if error else ChannelStatus.SUBSCRIBED
        self.subscribed = error is None
        logger.debug(f"[Realtime] Subscribing to {self.name}")

        def report() -> None:
            self._status_timer = None
            if callback is not None:
                _safe_call(callback, status, error)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            report()
            return self

        delay = self._bus.latency.scaled(self._bus.settings.emulator_subscribe_delay)
        self._status_timer = loop.call_later(delay, report)
        return self

    async def unsubscribe(self) -> str:
        """Drop every registration under this channel's name. Idempotent."""
        if self._status_timer is not None:
            self._status_timer.cancel()
            self._status_timer = None
        self.subscribed = False
        self._bus.drop(self.name)
        logger.debug(f"[Realtime] Unsubscribed from {self.name}")
        return "ok"

    # Presence

    async def track(self, state: JsonDict) -> str:
        """Publish this handle's presence state, replacing any earlier one."""
        registry = self._registry
        current = list(registry.presence_state.get(self.presence_key, []))
        registry.presence_state[self.presence_key] = [dict(state)]
        for listener in list(registry.presence_join):
            _safe_call(listener, self.presence_key, current, [dict(state)])
        for listener in list(registry.presence_sync):
            _safe_call(listener)
        return "ok"

    async def untrack(self) -> str:
        """Remove this handle's presence; other keys are untouched."""
        registry = self._registry
        left = registry.presence_state.pop(self.presence_key, None)
        if left is not None:
            for listener in list(registry.presence_leave):
                _safe_call(listener, self.presence_key, [], left)
            for listener in list(registry.presence_sync):
                _safe_call(listener)
        return "ok"

    def presence_state(self) -> dict[str, list[JsonDict]]:
        return {key: list(states) for key, states in self._registry.presence_state.items()}

    # Broadcast

    async def send(self, event: str, payload: JsonDict) -> str:
        """Deliver ``payload`` to this channel's broadcast listeners for ``event``."""
        registry = self._registry
        listeners = registry.broadcast_listeners.get(event, []) + registry.broadcast_listeners.get("*", [])
        for listener in listeners:
            _safe_call(listener, payload)
        logger.debug(f"[Realtime] Broadcast {event} on {self.name} to {len(listeners)} listeners")
        return "ok"


class RealtimeBus:
    """Per-channel listener registries plus the manual event trigger."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        latency: Optional[Latency] = None,
        faults: Optional[FaultInjector] = None,
    ):
        self.settings = settings or get_settings()
        self.latency = latency or Latency(self.settings)
        self.faults = faults or FaultInjector()
        self._registries: dict[str, ChannelRegistry] = {}
        self._channels: list[RealtimeChannel] = []

    def channel(self, name: str) -> RealtimeChannel:
        handle = RealtimeChannel(self, name)
        self._channels.append(handle)
        return handle

    def registry(self, name: str) -> ChannelRegistry:
        return self._registries.setdefault(name, ChannelRegistry())

    def drop(self, name: str) -> None:
        self._registries.pop(name, None)
        self._channels = [c for c in self._channels if c.name != name]

    def get_channels(self) -> list[RealtimeChannel]:
        return list(self._channels)

    async def remove_channel(self, channel: RealtimeChannel) -> str:
        return await channel.unsubscribe()

    async def remove_all_channels(self) -> list[str]:
        results = [await channel.unsubscribe() for channel in list(self._channels)]
        self._registries.clear()
        logger.debug("[Realtime] Removed all channels")
        return results

    def trigger_realtime_event(
        self,
        table: str,
        event_type: str,
        new: Optional[JsonDict],
        old: Optional[JsonDict] = None,
    ) -> int:
        """
        Deliver a table-change event to matching listeners synchronously.

        Returns:
            Number of listeners the event was delivered to
        """
        try:
            event_type = RealtimeEvent(_event_name(event_type).upper()).value
        except ValueError:
            logger.warning(f"[Realtime] Ignoring unknown event type {event_type} for {table}")
            return 0
        delivered = 0
        for name, registry in list(self._registries.items()):
            for listener in list(registry.table_listeners):
                if listener.table not in (table, "*"):
                    continue
                if listener.event not in (event_type, RealtimeEvent.ALL.value):
                    continue
                if not filter_matches(listener.filter, new if new is not None else old):
                    continue
                payload = RealtimePayload(
                    event_type=event_type,
                    new=new,
                    old=old,
                    table=table,
                    schema=listener.schema,
                )
                if _safe_call(listener.callback, payload):
                    delivered += 1
        logger.debug(f"[Realtime] Triggered {event_type} on {table}, {delivered} listeners")
        return delivered

    def get_subscriptions(self) -> list[dict[str, str]]:
        """Flat list of table-change registrations."""
        return [
            {"channel": name, "table": listener.table, "event": listener.event}
            for name, registry in self._registries.items()
            for listener in registry.table_listeners
        ]

    def reset(self) -> None:
        for channel in self._channels:
            if channel._status_timer is not None:
                channel._status_timer.cancel()
        self._registries.clear()
        self._channels.clear()
