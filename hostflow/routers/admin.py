from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException

from hostflow.auth_utils import get_master_identity, get_reconciler
from hostflow.cloud_sync import VaultReconciler
from hostflow.core.logging import get_logger
from hostflow.models import AccountSummary

logger = get_logger("ADMIN ROUTER")

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(get_master_identity)],
)


@router.get("/accounts", response_model=List[AccountSummary])
async def list_accounts(reconciler: Annotated[VaultReconciler, Depends(get_reconciler)]):
    return await reconciler.admin_list_accounts()


@router.get("/accounts/{email}")
async def get_account_data(email: str, reconciler: Annotated[VaultReconciler, Depends(get_reconciler)]):
    state = await reconciler.admin_get_user_data(email)
    if state is None:
        raise HTTPException(status_code=404, detail="Vault not found")
    return state


@router.delete("/accounts/{email}")
async def delete_account(email: str, reconciler: Annotated[VaultReconciler, Depends(get_reconciler)]):
    if not await reconciler.admin_delete_account(email):
        raise HTTPException(status_code=404, detail="Vault not found")

    logger.info(f"Admin removed vault for {email}")
    return {"success": True, "email": email}
