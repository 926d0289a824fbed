"""
Clients router — bank representatives looking up clients.

Endpoints:
  GET /clients/{account_number} — Client summary by account number (bank role)

The summary deliberately leaves out bank-internal profile fields.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies import get_session_manager, require_bank
from app.schemas.session import ClientSummary, User
from app.services.session_manager import SessionManager

router = APIRouter()


@router.get(
    "/{account_number}",
    response_model=ClientSummary,
    summary="Look up a client by account number",
)
async def get_client(
    account_number: str,
    bank_user: User = Depends(require_bank),
    manager: SessionManager = Depends(get_session_manager),
):
    client = await manager.get_client_by_account_number(account_number.strip())
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No client with that account number",
        )
    return client
