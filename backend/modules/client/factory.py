"""
Backend selection.

Application code asks for "the backend" and gets either the hosted
Supabase client or the emulator. The emulator, with its clear-text
password table, is only returned when no real credentials are configured
or FORCE_EMULATOR is set.
"""

import logging
from typing import Optional, Union

from supabase import Client

from shared.config import Settings, get_settings
from shared.database import get_supabase_client

from .service import BaasClient, create_emulator_client, get_emulator_client

logger = logging.getLogger(__name__)


def uses_emulator(settings: Optional[Settings] = None) -> bool:
    settings = settings or get_settings()
    return settings.force_emulator or not settings.has_real_backend


def create_backend_client(settings: Optional[Settings] = None) -> Union[Client, BaasClient]:
    """
    Return the backend client for the current configuration.

    Returns:
        Hosted Supabase Client when SUPABASE_URL and SUPABASE_ANON_KEY are
        set and FORCE_EMULATOR is off, otherwise the emulator (the
        process singleton unless explicit settings are given)
    """
    explicit = settings is not None
    settings = settings or get_settings()
    if uses_emulator(settings):
        logger.info("Using local BaaS emulator")
        return create_emulator_client(settings) if explicit else get_emulator_client()

    logger.info(f"Using hosted Supabase backend at {settings.supabase_url}")
    return get_supabase_client(settings)
