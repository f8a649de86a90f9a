"""
Shared data models used across modules.

These models are shared infrastructure, not emulator semantics.
Module-specific models stay in their respective module directories.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict


# JSON-like row values: str | int | float | bool | None | dict | list
JsonDict = dict[str, Any]


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string, the format rows are stamped with."""
    return datetime.now(timezone.utc).isoformat()


class OperationResult(BaseModel):
    """
    Base for every value returned across the emulator boundary.

    Errors travel as exception instances in ``error`` rather than being
    raised, mirroring the ``{data, error}`` envelope of hosted clients.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        """True when the operation completed without an error."""
        return self.error is None
