"""
Realtime module interface.
"""

from typing import Optional, Protocol, runtime_checkable

from shared.models import JsonDict

from .service import RealtimeChannel


@runtime_checkable
class IRealtimeService(Protocol):
    """Interface for realtime channels."""

    def channel(self, name: str) -> RealtimeChannel:
        """
        Open a handle on a named channel.

        Handles with the same name share their registrations.
        """
        ...

    async def remove_channel(self, channel: RealtimeChannel) -> str:
        ...

    async def remove_all_channels(self) -> list[str]:
        ...

    def trigger_realtime_event(
        self,
        table: str,
        event_type: str,
        new: Optional[JsonDict],
        old: Optional[JsonDict] = None,
    ) -> int:
        ...
