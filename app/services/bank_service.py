"""
Bank directory service — reading the banks table.
"""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import BankNotFoundError
from app.models.bank import Bank


async def list_active_banks(db: AsyncSession) -> list[Bank]:
    """Active banks, alphabetically."""
    result = await db.execute(
        select(Bank)
        .where(Bank.is_active.is_(True))
        .order_by(Bank.name.asc())
    )
    return list(result.scalars().all())


async def get_active_bank(db: AsyncSession, bank_id: uuid.UUID) -> Bank:
    """
    Fetch an active bank by id.

    Raises:
        BankNotFoundError: If no active bank has this id.
    """
    bank = await db.get(Bank, bank_id)
    if bank is None or not bank.is_active:
        raise BankNotFoundError(bank_id)
    return bank
