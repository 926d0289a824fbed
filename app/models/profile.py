"""
Profile model — the application-level record of a user.

One Profile exists per Credential and shares its primary key. The profile
decides everything the session layer cares about:

  - user_type: "client" or "bank", set at signup
  - bank_name / bank_id / is_verified: set together when a bank user passes
    the verification-code check (role elevation)
  - account_number: required for client logins
  - credit_scores: computed score records, newest first

verification_code holds the last code used for elevation, encrypted at rest
with Fernet. It is kept for audit only; gating always goes through the
verification code registry.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime, Enum, ForeignKey, LargeBinary
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class UserType(str, enum.Enum):
    """
    The role a profile holds.

    Inherits from str so the enum value serializes naturally to JSON
    and compares equal to the raw strings sent by the login form.
    """
    CLIENT = "client"   # Individual whose credit is scored
    BANK = "bank"       # Bank representative reviewing clients


class Profile(Base):
    __tablename__ = "profiles"

    # Same id as the credential: one profile per credential subject
    id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("auth_users.id"),
        primary_key=True,
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        default="",
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    user_type: Mapped[UserType] = mapped_column(
        Enum(UserType),
        default=UserType.CLIENT,
        nullable=False,
    )

    bank_name: Mapped[str | None] = mapped_column(
        String(200),
        nullable=True,
    )

    bank_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("banks.id"),
        nullable=True,
    )

    # Looked up by bank representatives, so indexed
    account_number: Mapped[str | None] = mapped_column(
        String(32),
        nullable=True,
        index=True,
    )

    phone: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )

    address: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    is_verified: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # Fernet-encrypted audit copy of the last verification code used
    verification_code: Mapped[bytes | None] = mapped_column(
        LargeBinary,
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # --- Relationships ---
    bank: Mapped["Bank"] = relationship()

    # Newest first, so credit_scores[0] is the latest score
    credit_scores: Mapped[list["CreditScore"]] = relationship(
        back_populates="profile",
        order_by="CreditScore.calculated_at.desc()",
    )
