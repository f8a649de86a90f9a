"""
Realtime module.

Channel registries for table-change events, presence and broadcast.

Public API:
- IRealtimeService: Interface for realtime channels
- RealtimeBus, RealtimeChannel: Emulator implementation
- RealtimePayload, RealtimeEvent, ChannelStatus: Models
"""

from .interfaces import IRealtimeService
from .service import RealtimeBus, RealtimeChannel
from .filters import filter_matches
from .models import ChannelStatus, RealtimeEvent, RealtimePayload

__all__ = [
    # Interface
    "IRealtimeService",
    # Implementation
    "RealtimeBus",
    "RealtimeChannel",
    "filter_matches",
    # Models
    "ChannelStatus",
    "RealtimeEvent",
    "RealtimePayload",
]
