"""
Artificial network latency.

Every public emulator operation awaits one of these delays before touching
shared state, so concurrent callers interleave at delay boundaries only.
"""

import asyncio
from typing import Optional

from .config import Settings, get_settings


# Default per-operation delays in milliseconds
AUTH_DELAY_MS = 500
SIGN_OUT_DELAY_MS = 200
READ_DELAY_MS = 200
WRITE_DELAY_MS = 300
UPLOAD_DELAY_MS = 500
DOWNLOAD_DELAY_MS = 300
URL_DELAY_MS = 100


class Latency:
    """Scaled sleep used by all emulator services."""

    def __init__(self, settings: Optional[Settings] = None):
        self._scale = (settings or get_settings()).emulator_latency_scale

    @property
    def scale(self) -> float:
        return self._scale

    async def wait(self, ms: int = AUTH_DELAY_MS) -> None:
        """
        Sleep for ``ms`` milliseconds times the configured scale.

        A scale of zero still yields to the event loop once.
        """
        await asyncio.sleep(max(ms * self._scale, 0) / 1000)

    def scaled(self, seconds: float) -> float:
        """Scale a delay expressed in seconds (timers scheduled with call_later)."""
        return max(seconds * self._scale, 0)
