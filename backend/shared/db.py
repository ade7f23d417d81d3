from functools import lru_cache
import os

from dotenv import load_dotenv
from supabase import create_client, Client

load_dotenv()


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """
    Get the shared service-role Supabase client.

    The service role key bypasses row-level security, so this client must only
    be used from trusted backend code (background email jobs, the digest
    scheduler), never handed to a browser session.
    """
    url: str | None = os.getenv("SUPABASE_URL")
    key: str | None = os.getenv("SUPABASE_SERVICE_KEY") or os.getenv(
        "SUPABASE_SERVICE_ROLE_KEY"
    )

    if not url or not key:
        raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set")

    return create_client(url, key)
