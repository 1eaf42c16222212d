import asyncio
from typing import Mapping, Optional, Sequence

from supabase import AsyncClient, AsyncClientOptions, acreate_client

from hostflow.core.config import read_backend_credentials
from hostflow.core.logging import get_logger

logger = get_logger("SUPABASE CLIENT")


class BackendHandle:
    """
    Connection to Supabase, or the "no remote available" sentinel.

    Passed explicitly to whatever needs the remote; callers check
    `configured` before touching `client`.
    """

    def __init__(self, client: Optional[AsyncClient] = None):
        self.client = client

    @classmethod
    def unconfigured(cls) -> "BackendHandle":
        return cls(None)

    @property
    def configured(self) -> bool:
        return self.client is not None


_backend: Optional[BackendHandle] = None
_backend_lock = asyncio.Lock()


async def get_backend(sources: Optional[Sequence[Mapping[str, Optional[str]]]] = None) -> BackendHandle:
    """
    Get or create the process-wide backend handle.

    Credentials are read once; when either is missing the unconfigured
    handle is cached and the app runs in local-only mode.
    """
    global _backend

    if _backend is None:
        async with _backend_lock:
            # Double-check after acquiring lock
            if _backend is None:
                _backend = await _build_backend(sources)

    return _backend


async def _build_backend(sources) -> BackendHandle:
    credentials = read_backend_credentials(sources)

    logger.info(f"Supabase Client Init - URL detected: {bool(credentials.url)}")
    logger.info(f"Supabase Client Init - AnonKey detected: {bool(credentials.anon_key)}")

    if not credentials.complete:
        logger.warning(
            "Supabase credentials not found. "
            "The app will run in local-only mode until credentials are provided."
        )
        return BackendHandle.unconfigured()

    client = await acreate_client(
        credentials.url,
        credentials.anon_key,
        options=AsyncClientOptions(
            persist_session=True,
            auto_refresh_token=True,
        ),
    )
    return BackendHandle(client)


def reset_backend() -> None:
    """Forget the cached handle so the next get_backend() re-reads credentials."""
    global _backend
    _backend = None
