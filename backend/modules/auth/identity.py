"""
Synthetic identity generation.

Derives display names from email addresses and fabricates provider
identities for simulated OAuth sign-ins.
"""

import random
import re
import time
from typing import Any, Optional
from urllib.parse import quote

from shared.ids import generate_id
from shared.models import utc_now_iso

from .models import User


COMMON_FIRST_NAMES = [
    "John", "Jane", "Michael", "Sarah", "David", "Emily", "James", "Jessica",
    "Robert", "Ashley", "William", "Amanda", "Richard", "Melissa", "Joseph",
    "Deborah", "Thomas", "Stephanie", "Christopher", "Rebecca",
]

COMMON_LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller",
    "Davis", "Rodriguez", "Martinez", "Hernandez", "Lopez", "Wilson",
    "Anderson", "Thomas", "Taylor", "Moore", "Jackson", "Martin", "Lee",
]

# provider -> (first names, email domain)
PROVIDER_IDENTITIES: dict[str, tuple[list[str], str]] = {
    "google": (["Alex", "Sam", "Jordan", "Taylor", "Morgan", "Casey"], "gmail.com"),
    "apple": (["Apple", "Mac", "iOS", "Swift"], "icloud.com"),
    "github": (["Dev", "Coder", "Hacker", "Builder"], "github.com"),
    "twitter": (["Tweet", "Bird", "Social", "Viral"], "twitter.com"),
}

_NAME_SEPARATORS = re.compile(r"[._]")


def _capitalize(part: str) -> str:
    return part[:1].upper() + part[1:].lower()


def avatar_url(full_name: str) -> str:
    return f"https://ui-avatars.com/api/?name={quote(full_name)}&background=random"


def extract_name_from_email(email: str, rng: Optional[random.Random] = None) -> dict[str, str]:
    """
    Derive first, last and full name from an email local-part.

    "john.doe@x" and "jane_smith@x" split into first/last; a single word
    becomes the first name with a random common last name. Parts shorter
    than two characters fall back to the common name lists.

    Returns:
        Dict with first_name, last_name and full_name
    """
    rng = rng or random
    prefix = email.split("@")[0]

    if _NAME_SEPARATORS.search(prefix):
        parts = _NAME_SEPARATORS.split(prefix)
        first_name = _capitalize(parts[0])
        last_name = _capitalize(parts[1])
    else:
        first_name = _capitalize(prefix)
        last_name = rng.choice(COMMON_LAST_NAMES)

    if len(first_name) < 2:
        first_name = rng.choice(COMMON_FIRST_NAMES)
    if len(last_name) < 2:
        last_name = rng.choice(COMMON_LAST_NAMES)

    return {
        "first_name": first_name,
        "last_name": last_name,
        "full_name": f"{first_name} {last_name}",
    }


def build_user(
    email: str,
    metadata: Optional[dict[str, Any]] = None,
    app_metadata: Optional[dict[str, Any]] = None,
) -> User:
    """
    Create a new, unconfirmed user record.

    Caller-supplied metadata wins over the derived name fields.
    """
    names = extract_name_from_email(email)
    user_metadata = {
        **names,
        "avatar_url": avatar_url(names["full_name"]),
        **(metadata or {}),
    }
    return User(
        id=generate_id("mock-user"),
        email=email,
        created_at=utc_now_iso(),
        app_metadata=app_metadata or {"provider": "email", "providers": ["email"]},
        user_metadata=user_metadata,
    )


def provider_identity(provider: str, rng: Optional[random.Random] = None) -> tuple[str, dict[str, Any]]:
    """
    Fabricate the email and profile a social provider would hand back.

    Returns:
        Tuple of (email, user metadata)
    """
    rng = rng or random
    first_names, domain = PROVIDER_IDENTITIES.get(provider, PROVIDER_IDENTITIES["google"])
    first_name = rng.choice(first_names)
    last_name = rng.choice(COMMON_LAST_NAMES[:6])
    email = f"{first_name.lower()}.{last_name.lower()}@{domain}"
    metadata = {
        "provider": provider,
        "social_login": True,
        "provider_id": f"{provider}-{int(time.time() * 1000)}",
        "avatar_url": avatar_url(f"{first_name} {last_name}"),
        "full_name": f"{first_name} {last_name}",
        "first_name": first_name,
        "last_name": last_name,
    }
    return email, metadata
