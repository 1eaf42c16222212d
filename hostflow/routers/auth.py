from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from hostflow.auth_utils import get_access_token, get_current_identity, get_reconciler
from hostflow.cloud_sync import VaultReconciler
from hostflow.core.logging import get_logger
from hostflow.models import (
    AuthFailure,
    AuthResponse,
    Identity,
    LoginRequest,
    PushRequest,
    SessionTokens,
    SignUpRequest,
)

logger = get_logger("AUTH ROUTER")

router = APIRouter(tags=["auth"])

CONFIRM_EMAIL_NOTICE = (
    "Email confirmation required. Please check your inbox or disable "
    "'Confirm Email' in the Supabase dashboard."
)
INVALID_LOGIN_NOTICE = "Invalid login credentials. Please double check your email and password."
ACCOUNT_CREATED_NOTICE = "Account created! Check your email for a confirmation link to activate your dashboard."
SIGNUP_FAILED_NOTICE = "Signup failed. Ensure your password is at least 6 characters."


def describe_auth_error(failure: AuthFailure) -> str:
    """Turns a remote reason string into the copy shown on the login form."""
    if failure.confirmation_pending:
        return ACCOUNT_CREATED_NOTICE

    msg = failure.error.lower()
    if "email not confirmed" in msg:
        return CONFIRM_EMAIL_NOTICE
    if "invalid login" in msg:
        return INVALID_LOGIN_NOTICE
    return failure.error or SIGNUP_FAILED_NOTICE


@router.post("/auth/login", response_model=AuthResponse)
async def login(form_data: LoginRequest, reconciler: Annotated[VaultReconciler, Depends(get_reconciler)]):
    result = await reconciler.login(form_data.email, form_data.password)

    if isinstance(result, AuthFailure):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=describe_auth_error(result),
        )

    if result.warning:
        logger.warning(f"Auth warning: {result.warning}")
    return AuthResponse(ok=True, state=result.state, warning=result.warning, session=result.session)


@router.post("/auth/signup", response_model=AuthResponse)
async def signup(payload: SignUpRequest, reconciler: Annotated[VaultReconciler, Depends(get_reconciler)]):
    result = await reconciler.create_account(payload.email, payload.password, payload.name)

    if isinstance(result, AuthFailure):
        if result.confirmation_pending:
            return AuthResponse(ok=False, message=describe_auth_error(result), switch_to_login=True)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=describe_auth_error(result),
        )

    return AuthResponse(
        ok=True,
        state=result.state,
        warning=result.warning,
        message="Account initialized! Launching dashboard...",
        session=result.session,
    )


@router.post("/auth/logout")
async def logout(
    access_token: Annotated[str, Depends(get_access_token)],
    reconciler: Annotated[VaultReconciler, Depends(get_reconciler)],
):
    await reconciler.logout(access_token)
    return {"success": True, "message": "Logged out successfully"}


@router.get("/auth/session", response_model=AuthResponse)
async def resume_session(
    identity: Annotated[Identity, Depends(get_current_identity)],
    reconciler: Annotated[VaultReconciler, Depends(get_reconciler)],
):
    return AuthResponse(ok=True, state=await reconciler.vault_for(identity))


@router.post("/auth/session", response_model=AuthResponse)
async def restore_session(tokens: SessionTokens, reconciler: Annotated[VaultReconciler, Depends(get_reconciler)]):
    """Adopt tokens handed over from the page context and resume with them."""
    identity = await reconciler.current_identity(tokens.access_token)
    if identity is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not restore session")
    return AuthResponse(ok=True, state=await reconciler.vault_for(identity), session=tokens)


@router.post("/vault/push")
async def push_vault(
    payload: PushRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    reconciler: Annotated[VaultReconciler, Depends(get_reconciler)],
):
    saved = await reconciler.push_data(payload.state, identity.id)
    if not saved:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Vault could not be saved",
        )
    return {"success": True}
