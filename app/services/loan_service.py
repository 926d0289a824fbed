"""
Loan application service — creating, listing and reviewing applications.

Role scoping:
  - Clients create applications and see only their own.
  - Bank representatives see applications addressed to their bank and may
    move them to under_review / approved / rejected. A bank representative
    who has not been verified for a bank (no bank_id) sees nothing.

The caller is always the session manager's current user, supplied by the
dependency layer. Scoping happens here, not in the router.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions import LoanApplicationNotFoundError, UnauthorizedAccessError
from app.models.loan_application import LoanApplication, LoanStatus
from app.models.profile import UserType
from app.schemas.loan_application import LoanApplicationCreateRequest, LoanApplicationResponse
from app.schemas.session import User
from app.services import bank_service


def to_response(application: LoanApplication) -> LoanApplicationResponse:
    """Flatten an application and its bank name into the response shape."""
    return LoanApplicationResponse(
        id=application.id,
        applicant_id=application.applicant_id,
        bank_id=application.bank_id,
        bank_name=application.bank.name if application.bank else "N/A",
        amount_cents=application.amount_cents,
        purpose=application.purpose,
        term_months=application.term_months,
        monthly_income_cents=application.monthly_income_cents,
        employment_status=application.employment_status,
        collateral=application.collateral,
        description=application.description,
        status=application.status.value,
        bank_reviewer_id=application.bank_reviewer_id,
        review_notes=application.review_notes,
        reviewed_at=application.reviewed_at,
        created_at=application.created_at,
        updated_at=application.updated_at,
    )


async def _get_application(db: AsyncSession, application_id: uuid.UUID) -> LoanApplication:
    result = await db.execute(
        select(LoanApplication)
        .options(selectinload(LoanApplication.bank))
        .where(LoanApplication.id == application_id)
        .execution_options(populate_existing=True)
    )
    application = result.scalar_one_or_none()
    if application is None:
        raise LoanApplicationNotFoundError(application_id)
    return application


async def list_applications(db: AsyncSession, user: User) -> list[LoanApplication]:
    """Applications visible to the user, newest first."""
    query = (
        select(LoanApplication)
        .options(selectinload(LoanApplication.bank))
        .order_by(LoanApplication.created_at.desc())
    )

    if user.type is UserType.CLIENT:
        query = query.where(LoanApplication.applicant_id == user.id)
    elif user.bank_id is not None:
        query = query.where(LoanApplication.bank_id == user.bank_id)
    else:
        return []

    result = await db.execute(query)
    return list(result.scalars().all())


async def create_application(
    db: AsyncSession,
    user: User,
    request: LoanApplicationCreateRequest,
) -> LoanApplication:
    """
    Submit a new application on behalf of a client.

    Raises:
        UnauthorizedAccessError: If the user is not a client.
        BankNotFoundError: If the target bank doesn't exist or is inactive.
    """
    if user.type is not UserType.CLIENT:
        raise UnauthorizedAccessError("Only clients can create loan applications")

    await bank_service.get_active_bank(db, request.bank_id)

    application = LoanApplication(
        applicant_id=user.id,
        **request.model_dump(),
    )
    db.add(application)
    await db.flush()
    return await _get_application(db, application.id)


async def update_application_status(
    db: AsyncSession,
    user: User,
    application_id: uuid.UUID,
    status: str,
    review_notes: str | None = None,
) -> LoanApplication:
    """
    Record a bank representative's decision on an application.

    Raises:
        UnauthorizedAccessError: If the user is not a bank representative of
            the bank the application is addressed to.
        LoanApplicationNotFoundError: If the application doesn't exist.
    """
    if user.type is not UserType.BANK:
        raise UnauthorizedAccessError("Only bank users can update application status")

    application = await _get_application(db, application_id)
    if user.bank_id is None or application.bank_id != user.bank_id:
        raise UnauthorizedAccessError("This application was sent to another bank")

    application.status = LoanStatus(status)
    application.review_notes = review_notes
    application.bank_reviewer_id = user.id
    application.reviewed_at = datetime.now(timezone.utc)
    await db.flush()
    return application
