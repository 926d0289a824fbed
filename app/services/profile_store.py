"""
Profile store — exact-match access to the profiles and banks tables.

Each method is one round trip with its own short-lived database session,
matching the REST-style table API the session manager was written against:

    get_profile(id)                      select * from profiles where id = :id
    get_client_by_account_number(n)      ... where account_number = :n and user_type = 'client'
    update_profile(id, patch)            update profiles set ... where id = :id  -> rowcount
    insert_profile(values)               insert into profiles (...)
    get_bank_id(name)                    select id from banks where name = :name

Profiles are returned with their credit scores loaded (newest first), and
detached from the session, so callers may read them freely but must not
expect lazy loads.

Any database failure surfaces as ProfileStoreError.
"""

import uuid
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from app.database import store_transaction
from app.exceptions import ProfileStoreError
from app.models.bank import Bank
from app.models.profile import Profile, UserType
from app.security import encrypt_value


def _encode(values: dict[str, Any]) -> dict[str, Any]:
    """Encrypt the verification code audit copy before it reaches the table."""
    encoded = dict(values)
    code = encoded.get("verification_code")
    if isinstance(code, str):
        encoded["verification_code"] = encrypt_value(code)
    return encoded


class ProfileStore:
    """Profile and bank directory tables, addressed by exact-match filters."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    def _transaction(self):
        return store_transaction(self._session_factory, ProfileStoreError, "Profile store")

    async def get_profile(self, subject_id: uuid.UUID) -> Profile | None:
        async with self._transaction() as db:
            result = await db.execute(
                select(Profile)
                .options(selectinload(Profile.credit_scores))
                .where(Profile.id == subject_id)
            )
            return result.scalar_one_or_none()

    async def get_client_by_account_number(self, account_number: str) -> Profile | None:
        """
        Find the client profile with this account number.

        Returns None unless exactly one client matches.
        """
        async with self._transaction() as db:
            result = await db.execute(
                select(Profile)
                .options(selectinload(Profile.credit_scores))
                .where(
                    Profile.account_number == account_number,
                    Profile.user_type == UserType.CLIENT,
                )
                .limit(2)
            )
            matches = result.scalars().all()
        return matches[0] if len(matches) == 1 else None

    async def update_profile(self, subject_id: uuid.UUID, patch: dict[str, Any]) -> int:
        """Apply patch to the profile row; returns the number of rows affected."""
        async with self._transaction() as db:
            result = await db.execute(
                update(Profile)
                .where(Profile.id == subject_id)
                .values(**_encode(patch))
            )
            return result.rowcount

    async def insert_profile(self, values: dict[str, Any]) -> None:
        async with self._transaction() as db:
            db.add(Profile(**_encode(values)))

    async def get_bank_id(self, bank_name: str) -> uuid.UUID | None:
        async with self._transaction() as db:
            result = await db.execute(select(Bank.id).where(Bank.name == bank_name))
            return result.scalar_one_or_none()
