import time
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

# --- Vault shape ---

class StayPackage(BaseModel):
    id: str
    title: str
    desc: str
    iconType: str


DEFAULT_STAY_PACKAGES: List[StayPackage] = [
    StayPackage(id="p1", title="Basic Stay", desc="Standard room access.", iconType="home"),
    StayPackage(id="p2", title="Premium Suite", desc="Luxury quarters upgrade.", iconType="star"),
    StayPackage(id="p3", title="Event Hall", desc="Access to gardens and main hall.", iconType="sparkles"),
]

VAULT_COLLECTIONS = (
    "allBookings",
    "allTransactions",
    "allGuests",
    "allStaffLogs",
    "allInventory",
)


def default_vault(email: Optional[str] = None, name: Optional[str] = None) -> Dict[str, Any]:
    """Fresh vault for a user who has none yet. Containers are never shared between calls."""
    vault: Dict[str, Any] = {
        "properties": [],
        "activePropertyId": "all",
    }
    for key in VAULT_COLLECTIONS:
        vault[key] = []
    vault["stayPackages"] = [pkg.model_dump() for pkg in DEFAULT_STAY_PACKAGES]
    vault["timestamp"] = int(time.time() * 1000)
    vault["userEmail"] = email
    vault["userName"] = name
    return vault


# --- Identity ---

class Identity(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_user(cls, user: Any) -> "Identity":
        """Builds an Identity from a Supabase auth user record."""
        metadata = getattr(user, "user_metadata", None) or {}
        return cls(id=str(user.id), email=getattr(user, "email", None), name=metadata.get("full_name"))


# --- Operation results ---

class SessionTokens(BaseModel):
    access_token: str
    refresh_token: str

    @classmethod
    def from_session(cls, session: Any) -> Optional["SessionTokens"]:
        if session is None or not getattr(session, "access_token", None):
            return None
        return cls(access_token=session.access_token, refresh_token=session.refresh_token or "")


class AuthSuccess(BaseModel):
    ok: Literal[True] = True
    state: Dict[str, Any]
    warning: Optional[str] = None
    session: Optional[SessionTokens] = None


class AuthFailure(BaseModel):
    ok: Literal[False] = False
    error: str
    confirmation_pending: bool = False


AuthResult = Union[AuthSuccess, AuthFailure]


class AccountSummary(BaseModel):
    email: str
    last_synced: Optional[datetime] = None
    user_id: str


# --- HTTP payloads ---

class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class SignUpRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)
    name: Optional[str] = None


class PushRequest(BaseModel):
    state: Dict[str, Any]


class AuthResponse(BaseModel):
    ok: bool
    state: Optional[Dict[str, Any]] = None
    warning: Optional[str] = None
    message: Optional[str] = None
    switch_to_login: bool = False
    session: Optional[SessionTokens] = None
