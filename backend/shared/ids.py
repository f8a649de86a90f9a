"""
Identifier and token generation.

Row, user and file ids follow a ``<prefix>-<epoch ms>-<random>`` scheme so
they sort roughly by creation time and stay unique within a process.
"""

import time
import uuid


def _random_suffix(length: int = 9) -> str:
    return uuid.uuid4().hex[:length]


def generate_id(prefix: str = "mock-id") -> str:
    """Generate an opaque timestamp+random identifier."""
    return f"{prefix}-{int(time.time() * 1000)}-{_random_suffix()}"


def generate_token(prefix: str = "mock") -> str:
    """Generate an opaque bearer-style token (refresh tokens, OAuth state, signed URLs)."""
    token = f"{prefix}-{int(time.time() * 1000)}-{_random_suffix(13)}-{_random_suffix(13)}"
    return token[:100]
