"""
Base exception classes for the BaaS emulator.

Each module defines its own exceptions that inherit from these bases.
Emulator operations return these as values inside result models instead
of raising them past the public boundary, so callers inspect
``response.error`` the same way they would with a hosted client.
"""

from typing import Optional, Any


class EmulatorError(Exception):
    """
    Base exception for all emulator errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for logging and API-shaped payloads."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(EmulatorError):
    """Input validation failed."""

    pass


class NotFoundError(EmulatorError):
    """Resource not found."""

    pass


class ConflictError(EmulatorError):
    """Resource identity already taken."""

    pass


class AuthenticationError(EmulatorError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class CapabilityError(EmulatorError):
    """The emulator does not provide the requested capability."""

    def __init__(
        self,
        message: str,
        capability: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.capability = capability
        self.details["capability"] = capability


class StorageIOError(EmulatorError):
    """Reading or writing the persistent key-value store failed."""

    def __init__(self, key: str, reason: str):
        super().__init__(
            f"Storage I/O failed for {key}: {reason}",
            code="STORAGE_IO_ERROR",
            details={"key": key},
        )
        self.key = key
