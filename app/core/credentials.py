"""
Google service-account credentials shared by the search and Gemini clients.

Credentials are parsed once per key and cached; access tokens are refreshed in a
worker thread because google-auth's refresh is blocking.
"""

import asyncio
import logging
import threading
from functools import lru_cache

from google.auth import exceptions as google_auth_exceptions
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from app.core.config import GOOGLE_CLOUD_SCOPE, load_service_account_info
from app.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

_refresh_lock = threading.Lock()


@lru_cache(maxsize=4)
def get_credentials(raw_key: str) -> service_account.Credentials:
    """Build scoped credentials from the GOOGLE_JSON_KEY blob."""
    info = load_service_account_info(raw_key)
    try:
        credentials = service_account.Credentials.from_service_account_info(
            info, scopes=[GOOGLE_CLOUD_SCOPE]
        )
    except (ValueError, KeyError, google_auth_exceptions.GoogleAuthError) as e:
        raise ConfigurationError(f"GOOGLE_JSON_KEY is not a usable service account key: {e}") from e
    logger.info("[credentials:get_credentials] loaded service account=%s", info.get("client_email", "?"))
    return credentials


def _refresh_token(credentials: service_account.Credentials) -> str:
    with _refresh_lock:
        if not credentials.valid:
            credentials.refresh(Request())
        return credentials.token


async def get_access_token(raw_key: str) -> str:
    """Return a valid bearer token, refreshing it when expired."""
    credentials = get_credentials(raw_key)
    if credentials.valid and credentials.token:
        return credentials.token
    return await asyncio.to_thread(_refresh_token, credentials)
