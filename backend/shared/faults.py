"""
Simulated error registry.

Tests register an error for a (kind, operation) pair and the matching
emulator operation returns it instead of performing its work.

Operation names:
- auth: the method name, e.g. "sign_in", "sign_up", "sign_out"
- database: "<table>.<select|insert|update|upsert|delete>"
- storage: "<bucket>.<upload|download|remove|list>"
- realtime: "<channel>.subscribe"
"""

import logging
from typing import Literal, Optional

logger = logging.getLogger(__name__)

FaultKind = Literal["auth", "database", "storage", "realtime"]


class FaultInjector:
    """Holds the errors tests want specific operations to fail with."""

    def __init__(self) -> None:
        self._errors: dict[str, dict[str, Exception]] = {}

    def set(self, kind: FaultKind, operation: str, error: Optional[Exception]) -> None:
        """Register ``error`` for an operation, or clear it when ``error`` is None."""
        errors = self._errors.setdefault(kind, {})
        if error is None:
            errors.pop(operation, None)
        else:
            errors[operation] = error
        logger.debug(
            f"[Faults] {'Set' if error else 'Cleared'} simulated error for {kind}:{operation}"
        )

    def get(self, kind: FaultKind, operation: str) -> Optional[Exception]:
        """Return the simulated error for an operation, if any."""
        return self._errors.get(kind, {}).get(operation)

    def clear(self) -> None:
        self._errors.clear()

    def __len__(self) -> int:
        return sum(len(errors) for errors in self._errors.values())
