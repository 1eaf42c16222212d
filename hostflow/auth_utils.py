from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from hostflow.cloud_sync import VaultReconciler
from hostflow.models import Identity

# auto_error off so a missing header is a 401 like any other bad credential
bearer_scheme = HTTPBearer(auto_error=False)


def get_reconciler(request: Request) -> VaultReconciler:
    return request.app.state.reconciler


def get_access_token(
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> str:
    if token is None or not token.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not signed in",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token.credentials


# --- Token Validation ---
async def get_current_identity(
    access_token: Annotated[str, Depends(get_access_token)],
    reconciler: Annotated[VaultReconciler, Depends(get_reconciler)],
) -> Identity:
    """Resolves the caller from their own access token, never from the shared client session."""
    if not reconciler.backend.configured:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Supabase client not initialized.")

    identity = await reconciler.current_identity(access_token)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


# --- Role-Specific Helpers ---
def get_master_identity(
    request: Request,
    identity: Annotated[Identity, Depends(get_current_identity)],
) -> Identity:
    """Restricts to the administrator account."""
    master_email = (request.app.state.master_email or "").strip().lower()
    if not master_email or (identity.email or "").lower() != master_email:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the administrator can access this endpoint.")
    return identity
