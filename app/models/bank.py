"""
Bank model — the bank directory.

Bank rows are reference data: the seed script loads the ten recognized
Zimbabwean banks. Role elevation resolves a bank's id from its name here,
and loan applications are addressed to a bank by id.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Bank(Base):
    __tablename__ = "banks"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # Display name, also the registry key for verification codes
    name: Mapped[str] = mapped_column(
        String(200),
        unique=True,
        nullable=False,
    )

    # Short code, e.g. "CBZ"
    code: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    website: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Inactive banks stay resolvable for old profiles but are hidden from lists
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
