"""
Loan applications router.

Endpoints:
  GET    /loan-applications                   — Applications visible to you
  POST   /loan-applications                   — Apply for a loan (client)
  PATCH  /loan-applications/{application_id}  — Review an application (bank)
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user, require_bank, require_client
from app.schemas.loan_application import (
    LoanApplicationCreateRequest,
    LoanApplicationResponse,
    LoanApplicationStatusUpdate,
)
from app.schemas.session import User
from app.services import loan_service

router = APIRouter()


@router.get(
    "",
    response_model=list[LoanApplicationResponse],
    summary="List loan applications",
)
async def list_applications(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Clients see their own applications; bank representatives see the ones
    addressed to their bank. Newest first.
    """
    applications = await loan_service.list_applications(db, user)
    return [loan_service.to_response(a) for a in applications]


@router.post(
    "",
    response_model=LoanApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Apply for a loan",
)
async def create_application(
    request: LoanApplicationCreateRequest,
    user: User = Depends(require_client),
    db: AsyncSession = Depends(get_db),
):
    application = await loan_service.create_application(db, user, request)
    return loan_service.to_response(application)


@router.patch(
    "/{application_id}",
    response_model=LoanApplicationResponse,
    summary="Review a loan application",
)
async def update_application_status(
    application_id: uuid.UUID,
    request: LoanApplicationStatusUpdate,
    user: User = Depends(require_bank),
    db: AsyncSession = Depends(get_db),
):
    """Move an application to under_review, approved or rejected."""
    application = await loan_service.update_application_status(
        db,
        user,
        application_id,
        status=request.status,
        review_notes=request.review_notes,
    )
    return loan_service.to_response(application)
