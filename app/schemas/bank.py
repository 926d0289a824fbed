"""
Pydantic schemas for the bank directory and verification codes.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class BankResponse(BaseModel):
    """Public representation of a bank directory row."""
    id: uuid.UUID
    name: str
    code: str
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class RegistryEntry(BaseModel):
    """One recognized bank and its verification code."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    code: str
    verification_code: str


class VerificationCodeResponse(BaseModel):
    """Response body for GET /banks/verification-codes/{bank_name}."""
    bank_name: str
    verification_code: str


class VerificationCheckRequest(BaseModel):
    """Request body for POST /banks/verification-codes/check."""
    bank_name: str
    code: str


class VerificationCheckResponse(BaseModel):
    bank_name: str
    valid: bool
