"""
Client module data models.
"""

from typing import Any, Awaitable, Callable, Optional, Union

from shared.models import OperationResult


class RpcResponse(OperationResult):
    """Result of client.rpc()."""

    data: Any = None


RpcHandler = Callable[[Optional[dict[str, Any]]], Union[Any, Awaitable[Any]]]
