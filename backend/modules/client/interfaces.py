"""
Client facade interface.

Application code should depend on IBackendClient so that the emulator and
a hosted client can be swapped by configuration alone.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from modules.auth.interfaces import IAuthService
from modules.database.query import TableQuery
from modules.realtime.service import RealtimeChannel
from modules.storage.interfaces import IStorageService

from .models import RpcResponse


@runtime_checkable
class IBackendClient(Protocol):
    """The provider-compatible surface of a backend client."""

    auth: IAuthService
    storage: IStorageService

    def from_(self, table: str) -> TableQuery:
        ...

    def channel(self, name: str) -> RealtimeChannel:
        ...

    async def rpc(self, name: str, params: Optional[dict[str, Any]] = None) -> RpcResponse:
        """
        Call a server function.

        Returns:
            RpcResponse; unknown names carry a CapabilityError
        """
        ...
