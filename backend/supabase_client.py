from supabase import Client, create_client

from config import Settings


def create_supabase_client(settings: Settings) -> Client:
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required for the supabase claim store")
    return create_client(settings.supabase_url, settings.supabase_service_role_key)
