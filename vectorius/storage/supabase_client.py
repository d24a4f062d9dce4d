"""Supabase client factory used for attachment storage and auth."""

from supabase import Client, create_client

from vectorius.config import StorageSettings
from vectorius.utils.logger import get_logger

logger = get_logger(__name__)


def get_supabase_client(settings: StorageSettings) -> Client:
    """Initialize and return a service-role Supabase client.

    Raises:
        ValueError: If the project URL or service role key is missing
    """
    if not settings.is_configured():
        raise ValueError(
            "Supabase is not configured. Please set SUPABASE_URL and "
            "SUPABASE_SERVICE_ROLE_KEY."
        )
    return create_client(settings.url, settings.service_role_key)


def get_user_id(client: Client, access_token: str) -> str | None:
    """Resolve a Supabase access token to its user id, or ``None`` if invalid."""
    if not access_token:
        return None
    try:
        response = client.auth.get_user(access_token)
    except Exception as e:
        # Expired or forged tokens raise from the auth client.
        logger.info("Rejected access token: %s", e)
        return None
    user = getattr(response, "user", None)
    return user.id if user else None
