"""Async Supabase clients, one per call.

Clients never keep a signed-in session between calls: a request's table
queries run under that request's access token, so RLS sees the caller
and nobody else.
"""
from typing import Optional

from supabase import AsyncClient, AsyncClientOptions, acreate_client

from smartstudy.config import settings
from smartstudy.utils.logger import get_logger

logger = get_logger(__name__)


async def create_supabase_client(access_token: Optional[str] = None) -> AsyncClient:
    """Create a client using SUPABASE_ANON_KEY, acting as ``access_token``'s user when given.

    Uses the anon key: row level security applies, and only the caller's
    token grants access to their rows.
    """
    url = settings.SUPABASE_URL
    key = settings.SUPABASE_ANON_KEY
    if not url or not key:
        raise RuntimeError(
            "SUPABASE_URL and SUPABASE_ANON_KEY must be set in environment"
        )

    client = await acreate_client(
        url,
        key,
        options=AsyncClientOptions(persist_session=False, auto_refresh_token=False),
    )
    if access_token:
        client.postgrest.auth(access_token)
    logger.debug(f"Supabase client created for {url} ({'user' if access_token else 'anon'})")
    return client
