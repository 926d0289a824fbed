"""
Banks router — the bank directory and verification codes.

Endpoints:
  GET  /banks                                  — Active banks, alphabetical
  GET  /banks/verification-codes               — Every registered bank and its code
  GET  /banks/verification-codes/{bank_name}   — One bank's code ("" if unknown)
  POST /banks/verification-codes/check         — Check a bank/code pair

The verification-code endpoints back the admin screen, which is open to
everyone (see app/services/screen_router.py), so they carry no auth guard
either.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_session_manager
from app.schemas.bank import (
    BankResponse,
    RegistryEntry,
    VerificationCheckRequest,
    VerificationCheckResponse,
    VerificationCodeResponse,
)
from app.services import bank_service
from app.services.session_manager import SessionManager

router = APIRouter()


@router.get(
    "",
    response_model=list[BankResponse],
    summary="List active banks",
)
async def list_banks(db: AsyncSession = Depends(get_db)):
    return await bank_service.list_active_banks(db)


@router.get(
    "/verification-codes",
    response_model=list[RegistryEntry],
    summary="List bank verification codes",
)
async def list_verification_codes(
    manager: SessionManager = Depends(get_session_manager),
):
    return manager.get_bank_list()


@router.get(
    "/verification-codes/{bank_name}",
    response_model=VerificationCodeResponse,
    summary="Get one bank's verification code",
)
async def get_verification_code(
    bank_name: str,
    manager: SessionManager = Depends(get_session_manager),
):
    """Bank names are matched exactly, including case."""
    return VerificationCodeResponse(
        bank_name=bank_name,
        verification_code=manager.get_verification_code(bank_name),
    )


@router.post(
    "/verification-codes/check",
    response_model=VerificationCheckResponse,
    summary="Check a verification code",
)
async def check_verification_code(
    request: VerificationCheckRequest,
    manager: SessionManager = Depends(get_session_manager),
):
    return VerificationCheckResponse(
        bank_name=request.bank_name,
        valid=manager.is_valid_verification_code(request.bank_name, request.code),
    )
