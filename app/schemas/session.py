"""
Pydantic schemas for the session layer.

User and AuthState are the values the session manager publishes. They are
frozen: every listener gets an immutable snapshot, and a new snapshot is
built on every change.

AuthState.is_authenticated is computed from user, so the two can never
disagree.
"""

import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field

from app.models.credit_score import RiskLevel
from app.models.profile import UserType


class User(BaseModel):
    """Projection of a profile row, as seen by screens."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    name: str
    email: str
    type: UserType
    bank: str | None = None
    bank_id: uuid.UUID | None = None
    account_number: str | None = None
    credit_score: int | None = None
    risk_level: RiskLevel | None = None
    is_verified: bool = False


class ClientSummary(BaseModel):
    """Client projection returned to bank representatives (no bank fields)."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    name: str
    email: str
    type: UserType
    account_number: str | None = None
    credit_score: int | None = None
    risk_level: RiskLevel | None = None


class AuthState(BaseModel):
    """Process-wide authentication state."""

    model_config = ConfigDict(frozen=True)

    user: User | None = None
    is_loading: bool = False

    @computed_field
    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @classmethod
    def bootstrapping(cls) -> "AuthState":
        return cls(user=None, is_loading=True)

    @classmethod
    def anonymous(cls) -> "AuthState":
        return cls(user=None, is_loading=False)


# ---------------------------------------------------------------------------
# Request / response bodies
# ---------------------------------------------------------------------------

class SessionResponse(BaseModel):
    """Response body for GET /session."""
    state: AuthState
    profile_error: str | None = None


class LoginRequest(BaseModel):
    """Request body for POST /session/login."""
    email: EmailStr
    password: str = Field(min_length=1)
    type: Literal["client", "bank"]
    bank: str | None = None
    account_number: str | None = None
    verification_code: str | None = None


class SignupRequest(BaseModel):
    """Request body for POST /session/signup."""
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(min_length=6)
    type: Literal["client", "bank"]
    bank: str | None = None
    account_number: str | None = None
    verification_code: str | None = None
