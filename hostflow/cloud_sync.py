"""
Session and vault reconciliation against Supabase.

Each signed-in user owns exactly one row in the `vaults` table; its `state`
column holds the whole application state as one JSON document. Saves replace
the document wholesale (last write wins).

Failure policy:
- authentication problems come back as an `AuthFailure` carrying the
  remote's own reason, never as an exception;
- once a user has proven who they are, a degraded data tier never locks them
  out: login and session resume fall back to a freshly seeded vault;
- `fetch_vault` is the only operation that raises, so that its callers can
  decide on their own fallback.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from hostflow.core.config import APP_VERSION, VAULT_TABLE
from hostflow.core.logging import get_logger
from hostflow.database import BackendHandle
from hostflow.errors import BackendUnavailableError, VaultAccessError
from hostflow.models import (
    AccountSummary,
    AuthFailure,
    AuthResult,
    AuthSuccess,
    Identity,
    SessionTokens,
    default_vault,
)

logger = get_logger("CLOUD SYNC")

NOT_INITIALIZED = "Supabase client not initialized."
NO_USER_RETURNED = "Authentication succeeded but no user was returned."
CONFIRMATION_PENDING = "Confirmation pending: check your email for a link to activate your account."
UNKNOWN_REGISTRATION = "Unknown registration result."
DEFAULT_DISPLAY_NAME = "New Host"


def _error_message(error: Exception) -> str:
    return getattr(error, "message", None) or str(error)


def _vault_email(state: Any) -> Optional[str]:
    if not isinstance(state, dict):
        return None
    email = state.get("userEmail")
    return email if isinstance(email, str) and email else None


class VaultReconciler:
    def __init__(self, backend: BackendHandle, app_version: str = APP_VERSION):
        self.backend = backend
        self.app_version = app_version

    @property
    def client(self):
        return self.backend.client

    # --- Session ---

    async def vault_for(self, identity: Identity) -> Dict[str, Any]:
        """Vault for an authenticated identity; a degraded data tier yields a fresh default vault."""
        try:
            return await self.fetch_vault(identity.id, identity)
        except Exception as e:
            logger.warning(f"Vault fetch failed for {identity.id}, using fallback: {_error_message(e)}")
            return default_vault(identity.email, identity.name)

    async def resume_session(self) -> Optional[Dict[str, Any]]:
        """Vault for the persisted session, or None when nobody is signed in."""
        if not self.backend.configured:
            return None

        try:
            session = await self.client.auth.get_session()
        except Exception as e:
            logger.error(f"Could not read current session: {e}")
            return None

        if session is None or session.user is None:
            return None

        return await self.vault_for(Identity.from_user(session.user))

    async def login(self, email: str, password: str) -> AuthResult:
        if not self.backend.configured:
            return AuthFailure(error=NOT_INITIALIZED)

        logger.info(f"Login attempt for {email}")
        try:
            response = await self.client.auth.sign_in_with_password({
                "email": email.strip().lower(),
                "password": password.strip(),
            })
        except Exception as e:
            logger.error(f"Supabase Auth Error: {getattr(e, 'status', None)} {_error_message(e)}")
            return AuthFailure(error=_error_message(e))

        if response is None or response.user is None:
            return AuthFailure(error=NO_USER_RETURNED)

        identity = Identity.from_user(response.user)
        tokens = SessionTokens.from_session(getattr(response, "session", None))
        logger.info(f"Supabase Auth Success: User ID {identity.id}")

        try:
            state = await self.fetch_vault(identity.id, identity)
            return AuthSuccess(state=state, session=tokens)
        except Exception as e:
            warning = f"Database sync limited: {_error_message(e)}"
            logger.warning(f"Vault access error for {identity.id}: {warning}")
            return AuthSuccess(state=default_vault(identity.email, identity.name), warning=warning, session=tokens)

    async def logout(self, access_token: Optional[str] = None) -> None:
        """Sign out the client's own session, or the session behind `access_token`."""
        if not self.backend.configured:
            return
        try:
            if access_token:
                await self.client.auth.admin.sign_out(access_token)
            else:
                await self.client.auth.sign_out()
        except Exception as e:
            logger.error(f"Supabase SignOut Error: {_error_message(e)}")
            return
        logger.info("Signed out")

    async def create_account(self, email: str, password: str, display_name: Optional[str] = None) -> AuthResult:
        if not self.backend.configured:
            return AuthFailure(error=NOT_INITIALIZED)

        email = email.strip().lower()
        name = (display_name or "").strip() or DEFAULT_DISPLAY_NAME

        logger.info(f"SignUp attempt for {email}")
        try:
            response = await self.client.auth.sign_up({
                "email": email,
                "password": password.strip(),
                "options": {"data": {"full_name": name}},
            })
        except Exception as e:
            logger.error(f"Supabase SignUp Error: {getattr(e, 'status', None)} {_error_message(e)}")
            return AuthFailure(error=_error_message(e))

        user = getattr(response, "user", None)
        session = getattr(response, "session", None)

        if user is not None and session is not None:
            logger.info("SignUp: immediate session established")
            state = default_vault(email, name)
            tokens = SessionTokens.from_session(session)
            if not await self.push_data(state, str(user.id)):
                return AuthSuccess(
                    state=state,
                    warning="Database sync limited: initial vault was not saved.",
                    session=tokens,
                )
            return AuthSuccess(state=state, session=tokens)

        if user is not None:
            logger.info("SignUp: user created, confirmation required")
            return AuthFailure(error=CONFIRMATION_PENDING, confirmation_pending=True)

        return AuthFailure(error=UNKNOWN_REGISTRATION)

    async def current_identity(self, access_token: Optional[str] = None) -> Optional[Identity]:
        """
        Identity behind `access_token`, or behind the client's own session when no token is given.

        An expired, revoked or malformed token resolves to None.
        """
        if not self.backend.configured:
            return None
        try:
            if access_token:
                response = await self.client.auth.get_user(access_token)
            else:
                response = await self.client.auth.get_user()
        except Exception as e:
            logger.error(f"Could not read current user: {_error_message(e)}")
            return None
        user = getattr(response, "user", None)
        return Identity.from_user(user) if user is not None else None

    # --- Vault ---

    async def push_data(self, state: Dict[str, Any], user_id: Optional[str] = None) -> bool:
        """Replace the whole vault for `user_id` (default: the signed-in user)."""
        if not self.backend.configured:
            return False

        if not user_id:
            identity = await self.current_identity()
            user_id = identity.id if identity else None
        if not user_id:
            logger.warning("No user to push vault data for")
            return False

        try:
            await self.client.table(VAULT_TABLE).upsert({
                "user_id": user_id,
                "state": state,
                "last_synced": datetime.now(timezone.utc).isoformat(),
                "app_version": self.app_version,
            }, on_conflict="user_id").execute()
        except Exception as e:
            logger.error(f"Supabase Vault Upsert Error: {_error_message(e)}")
            return False
        return True

    async def fetch_vault(self, user_id: str, identity: Optional[Identity] = None) -> Dict[str, Any]:
        """
        Vault body for `user_id`, provisioning a default one when the row is missing.

        A new vault is stamped with `identity`'s email and name; without one the
        auth service is asked for the current user.

        Raises:
            BackendUnavailableError: no Supabase credentials configured.
            VaultAccessError: the row could not be read, or a missing row could not be created.
        """
        if not self.backend.configured:
            raise BackendUnavailableError()

        try:
            response = await self.client.table(VAULT_TABLE).select("state").eq("user_id", user_id).limit(1).execute()
        except Exception as e:
            logger.error(f"Supabase Vault Select Error: {_error_message(e)}")
            raise VaultAccessError(_error_message(e), user_id) from e

        rows = response.data or []
        if rows:
            return rows[0].get("state")

        logger.info(f"Vault empty for {user_id}. Provisioning new row...")
        if identity is None:
            identity = await self.current_identity()
        fresh_state = default_vault(
            identity.email if identity else None,
            identity.name if identity else None,
        )
        if not await self.push_data(fresh_state, user_id):
            raise VaultAccessError("Vault could not be provisioned.", user_id)
        return fresh_state

    # --- Admin ---

    async def _all_rows(self, columns: str) -> List[Dict[str, Any]]:
        response = await self.client.table(VAULT_TABLE).select(columns).execute()
        return response.data or []

    async def _find_row_by_email(self, columns: str, email: str) -> Optional[Dict[str, Any]]:
        target = email.strip().lower()
        for row in await self._all_rows(columns):
            vault_email = _vault_email(row.get("state"))
            if vault_email is not None and vault_email.lower() == target:
                return row
        return None

    async def admin_list_accounts(self) -> List[AccountSummary]:
        if not self.backend.configured:
            return []
        try:
            rows = await self._all_rows("user_id, last_synced, state")
        except Exception as e:
            logger.error(f"Could not list vaults: {_error_message(e)}")
            return []

        return [
            AccountSummary(
                email=_vault_email(row.get("state")) or f"User {str(row['user_id'])[:8]}",
                last_synced=row.get("last_synced"),
                user_id=str(row["user_id"]),
            )
            for row in rows
        ]

    async def admin_get_user_data(self, email: str) -> Optional[Dict[str, Any]]:
        if not self.backend.configured:
            return None
        try:
            row = await self._find_row_by_email("state", email)
        except Exception as e:
            logger.error(f"Could not scan vaults: {_error_message(e)}")
            return None
        return row["state"] if row else None

    async def admin_delete_account(self, email: str) -> bool:
        """Delete the vault row for `email`. The auth identity itself is left alone."""
        if not self.backend.configured:
            return False
        try:
            row = await self._find_row_by_email("user_id, state", email)
            if row is None:
                return False
            await self.client.table(VAULT_TABLE).delete().eq("user_id", row["user_id"]).execute()
        except Exception as e:
            logger.error(f"Could not delete vault for {email}: {_error_message(e)}")
            return False
        logger.info(f"Deleted vault row for {email}")
        return True
