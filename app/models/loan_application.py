"""
LoanApplication model — a client's request for credit from a bank.

Clients create applications addressed to one bank; bank representatives of
that bank review them. Amounts are integer cents, like every other amount
in the system.

Status lifecycle:
    pending ──> under_review ──> approved
        │             │
        └─────────────┴──────> rejected
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, Enum, ForeignKey, CheckConstraint, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class LoanStatus(str, enum.Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class LoanApplication(Base):
    __tablename__ = "loan_applications"

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_loan_applications_positive_amount"),
        CheckConstraint("term_months > 0", name="ck_loan_applications_positive_term"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    applicant_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id"),
        nullable=False,
        index=True,
    )

    bank_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("banks.id"),
        nullable=False,
        index=True,
    )

    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    purpose: Mapped[str] = mapped_column(String(200), nullable=False)
    term_months: Mapped[int] = mapped_column(Integer, nullable=False)
    monthly_income_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    employment_status: Mapped[str] = mapped_column(String(50), nullable=False)
    collateral: Mapped[str | None] = mapped_column(String(500), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[LoanStatus] = mapped_column(
        Enum(LoanStatus),
        default=LoanStatus.PENDING,
        nullable=False,
    )

    # Set when a bank representative acts on the application
    bank_reviewer_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("profiles.id"),
        nullable=True,
    )
    review_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
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
