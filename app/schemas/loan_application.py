"""
Pydantic schemas for loan application endpoints.

All monetary amounts are expressed in integer cents.
"""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class LoanApplicationCreateRequest(BaseModel):
    """Request body for POST /loan-applications."""
    bank_id: uuid.UUID
    amount_cents: int = Field(gt=0, description="Requested amount in cents")
    purpose: str = Field(min_length=1, max_length=200)
    term_months: int = Field(gt=0, le=360)
    monthly_income_cents: int = Field(ge=0)
    employment_status: str = Field(min_length=1, max_length=50)
    collateral: str | None = None
    description: str | None = None


class LoanApplicationStatusUpdate(BaseModel):
    """Request body for PATCH /loan-applications/{application_id}."""
    status: Literal["approved", "rejected", "under_review"]
    review_notes: str | None = None


class LoanApplicationResponse(BaseModel):
    """Public representation of a loan application."""
    id: uuid.UUID
    applicant_id: uuid.UUID
    bank_id: uuid.UUID
    bank_name: str
    amount_cents: int
    purpose: str
    term_months: int
    monthly_income_cents: int
    employment_status: str
    collateral: str | None
    description: str | None
    status: str
    bank_reviewer_id: uuid.UUID | None
    review_notes: str | None
    reviewed_at: datetime | None
    created_at: datetime
    updated_at: datetime
