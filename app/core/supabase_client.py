# app/core/supabase_client.py
from functools import lru_cache
from supabase import create_client, Client

from app.core.config import get_settings

settings = get_settings()


@lru_cache
def supabase_admin() -> Client:
    """
    Create a Supabase client with the service role key.

    Use cases:
      - reading the TPOS credentials table (not exposed through RLS)

    WARNING:
      - Never expose service role key to frontend.
      - Only backend should call this.

    Raises:
        RuntimeError: if SUPABASE_SERVICE_ROLE_KEY is not set.
    """
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("Missing SUPABASE_SERVICE_ROLE_KEY in .env")
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)


def fetch_active_tpos_token(table: str) -> str | None:
    """
    Return the most recently created active TPOS bearer token.

    Expected table columns:
      - bearer_token (text)
      - is_active (bool)
      - created_at (timestamptz)

    Returns:
        The token string, or None if no active row exists.
    """
    response = (
        supabase_admin()
        .table(table)
        .select("bearer_token")
        .eq("is_active", True)
        .order("created_at", desc=True)
        .limit(1)
        .execute()
    )
    rows = response.data or []
    if not rows:
        return None
    return rows[0].get("bearer_token") or None
