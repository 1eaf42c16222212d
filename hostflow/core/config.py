import os
from typing import Mapping, Optional, Sequence

from dotenv import dotenv_values
from pydantic import BaseModel

DOTENV_PATH = os.getenv("HOSTFLOW_DOTENV_PATH", ".env")

URL_KEYS = ("VITE_SUPABASE_URL", "SUPABASE_URL")
ANON_KEY_KEYS = ("VITE_SUPABASE_ANON_KEY", "SUPABASE_ANON_KEY")

VAULT_TABLE = "vaults"


def default_sources() -> list[Mapping[str, Optional[str]]]:
    """
    Process environment first, then the local .env file.

    The .env file is read as a separate source and never copied into
    os.environ, so a value exported in the shell always wins.
    """
    return [os.environ, dotenv_values(DOTENV_PATH)]


def first_setting(*keys: str, sources: Optional[Sequence[Mapping[str, Optional[str]]]] = None) -> Optional[str]:
    """
    Returns the first non-empty value found for `keys`.

    Keys are tried in the order given; for each key every source is consulted
    before moving on to the next key.
    """
    if sources is None:
        sources = default_sources()

    for key in keys:
        for source in sources:
            value = source.get(key)
            if value and value.strip():
                return value.strip()
    return None


class BackendCredentials(BaseModel):
    url: Optional[str] = None
    anon_key: Optional[str] = None

    @property
    def complete(self) -> bool:
        return bool(self.url and self.anon_key)


def read_backend_credentials(sources: Optional[Sequence[Mapping[str, Optional[str]]]] = None) -> BackendCredentials:
    return BackendCredentials(
        url=first_setting(*URL_KEYS, sources=sources),
        anon_key=first_setting(*ANON_KEY_KEYS, sources=sources),
    )


APP_VERSION = first_setting("HOSTFLOW_APP_VERSION") or "v40"
MASTER_EMAIL = first_setting("HOSTFLOW_MASTER_EMAIL") or ""
CORS_ORIGINS = [
    origin.strip()
    for origin in (first_setting("HOSTFLOW_CORS_ORIGINS") or "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if origin.strip()
]
