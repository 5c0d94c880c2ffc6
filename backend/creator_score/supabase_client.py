from functools import lru_cache

from supabase import Client, create_client

from creator_score.config import settings


@lru_cache
def get_supabase() -> Client:
    # Service role client for server-side operations (bypasses RLS when needed)
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key,
    )
