"""
Client module exceptions.
"""

from shared.exceptions import CapabilityError


class RpcNotImplementedError(CapabilityError):
    """Raised when an RPC name has no registered handler."""

    def __init__(self, name: str):
        super().__init__(
            f"RPC function '{name}' not implemented in mock",
            capability=f"rpc:{name}",
            code="RPC_NOT_IMPLEMENTED",
        )
