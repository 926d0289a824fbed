"""
CreditScore model — a computed credit score for a client profile.

Scores are produced elsewhere and only read here. A profile may have many
score records over time; only the most recent (by calculated_at) is
projected into the session user.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Integer, DateTime, Enum, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class RiskLevel(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CreditScore(Base):
    __tablename__ = "credit_scores"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id"),
        nullable=False,
        index=True,
    )

    score: Mapped[int] = mapped_column(Integer, nullable=False)

    risk_level: Mapped[RiskLevel] = mapped_column(
        Enum(RiskLevel),
        nullable=False,
    )

    # Component scores that make up the overall score
    payment_history_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    credit_utilization_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    credit_history_length_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    credit_types_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    new_credit_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    calculated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # --- Relationships ---
    profile: Mapped["Profile"] = relationship(
        back_populates="credit_scores",
    )
