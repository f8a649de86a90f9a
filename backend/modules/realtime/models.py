"""
Realtime module data models.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional
from pydantic import BaseModel, ConfigDict, Field

from shared.models import JsonDict, utc_now_iso


class RealtimeEvent(str, Enum):
    """Table-change event types. ALL matches every type."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ALL = "*"


class ChannelStatus(str, Enum):
    """Statuses reported to subscribe() callbacks."""

    SUBSCRIBED = "SUBSCRIBED"
    CHANNEL_ERROR = "CHANNEL_ERROR"
    TIMED_OUT = "TIMED_OUT"
    CLOSED = "CLOSED"


class RealtimePayload(BaseModel):
    """Table-change notification delivered to listeners."""

    model_config = ConfigDict(populate_by_name=True)

    event_type: str = Field(..., description="INSERT, UPDATE or DELETE")
    new: Optional[JsonDict] = None
    old: Optional[JsonDict] = None
    table: str
    schema_name: str = Field("public", alias="schema")
    commit_timestamp: str = Field(default_factory=utc_now_iso)


TableChangeCallback = Callable[[RealtimePayload], Any]
BroadcastCallback = Callable[[JsonDict], Any]
PresenceSyncCallback = Callable[[], Any]
PresenceDiffCallback = Callable[[str, list[JsonDict], list[JsonDict]], Any]
StatusCallback = Callable[[ChannelStatus, Optional[Exception]], Any]


@dataclass
class TableListener:
    table: str
    event: str
    callback: TableChangeCallback
    schema: str = "public"
    filter: Optional[str] = None


@dataclass
class ChannelRegistry:
    """Everything registered under one channel name."""
    table_listeners: list[TableListener] = field(default_factory=list)
    broadcast_listeners: dict[str, list[BroadcastCallback]] = field(default_factory=dict)
    presence_sync: list[PresenceSyncCallback] = field(default_factory=list)
    presence_join: list[PresenceDiffCallback] = field(default_factory=list)
    presence_leave: list[PresenceDiffCallback] = field(default_factory=list)
    presence_state: dict[str, list[JsonDict]] = field(default_factory=dict)
