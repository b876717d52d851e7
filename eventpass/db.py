from supabase import Client, create_client

from eventpass.config import settings


class DatabaseNotConfigured(RuntimeError):
    pass


def _create() -> Client | None:
    if not settings.supabase_url or not settings.supabase_service_role_key:
        return None
    return create_client(settings.supabase_url, settings.supabase_service_role_key)


supabase: Client | None = _create()
