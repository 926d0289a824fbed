"""
Credential store — sign-up, password sign-in, sessions, and change events.

The session manager talks to the credential store only through the
CredentialStore protocol below. It mirrors the auth client of a hosted
backend-as-a-service:

    get_current_session()                 -> Session | None
    sign_in_with_password(email, pw)      -> Session   (InvalidCredentialsError)
    sign_up(email, pw, data)              -> Session   (SignupError)
    sign_out()                            -> None
    set_session(session)                  -> Session   (CredentialStoreError)
    refresh_session()                     -> Session | None
    on_auth_state_change(handler)         -> Subscription

on_auth_state_change handlers are called synchronously, from inside the
store call that caused the change. Subscribing immediately delivers an
INITIAL_SESSION event with the current session (or None), so a subscriber
must be ready to receive a call before on_auth_state_change() returns.

SqlCredentialStore implements the protocol on top of the async SQLAlchemy
database:
  - Credentials live in auth_users with Argon2id password hashes
  - A session is a signed JWT; its claims include the profile's role, so
    refresh_session() re-reads the profile and re-issues the token
  - When create_profile_stub is on, sign_up() also inserts a stub profile
    row in the same transaction, like a hosted "on new user" trigger
"""

import enum
import logging
import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Any, Protocol

from jose import JWTError
from pydantic import BaseModel, ConfigDict
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import settings
from app.database import store_transaction
from app.exceptions import CredentialStoreError, InvalidCredentialsError, SignupError
from app.models.credential import Credential
from app.models.profile import Profile, UserType
from app.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)


class AuthChangeEvent(str, enum.Enum):
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


class CredentialUser(BaseModel):
    """The identity part of a session: subject id, email, signup metadata."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    email: str
    user_metadata: dict[str, Any] = {}


class Session(BaseModel):
    """Proof of authentication issued by the credential store."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    expires_at: datetime
    user: CredentialUser


AuthStateHandler = Callable[[AuthChangeEvent, Session | None], None]


class Subscription:
    """Handle returned by on_auth_state_change(); call unsubscribe() to stop."""

    def __init__(self, unsubscribe: Callable[[], None]):
        self._unsubscribe = unsubscribe
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._unsubscribe()


class CredentialStore(Protocol):
    async def get_current_session(self) -> Session | None: ...

    async def sign_in_with_password(self, email: str, password: str) -> Session: ...

    async def sign_up(self, email: str, password: str, data: dict[str, Any]) -> Session: ...

    async def sign_out(self) -> None: ...

    async def set_session(self, session: Session) -> Session: ...

    async def refresh_session(self) -> Session | None: ...

    def on_auth_state_change(self, handler: AuthStateHandler) -> Subscription: ...


class SqlCredentialStore:
    """
    CredentialStore backed by the auth_users table.

    One instance holds one current session, the way a browser's auth client
    holds the session of its tab.

    Args:
        session_factory: async_sessionmaker bound to the application database.
        create_profile_stub: insert a stub profile on sign_up. Defaults to
            settings.PROFILE_STUB_ON_SIGNUP.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        create_profile_stub: bool | None = None,
    ):
        self._session_factory = session_factory
        self._create_profile_stub = (
            settings.PROFILE_STUB_ON_SIGNUP
            if create_profile_stub is None
            else create_profile_stub
        )
        self._session: Session | None = None
        self._handlers: list[AuthStateHandler] = []

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _transaction(self):
        return store_transaction(self._session_factory, CredentialStoreError, "Credential store")

    def _notify(self, event: AuthChangeEvent, session: Session | None) -> None:
        for handler in list(self._handlers):
            try:
                handler(event, session)
            except Exception:
                logger.exception("Auth state handler failed for %s", event.value)

    async def _issue_session(self, db: AsyncSession, credential: Credential) -> Session:
        """Build a session whose claims reflect the credential's current profile."""
        result = await db.execute(
            select(Profile.user_type, Profile.bank_id).where(Profile.id == credential.id)
        )
        row = result.one_or_none()

        claims: dict[str, Any] = {"sub": str(credential.id), "email": credential.email}
        if row is not None:
            claims["user_type"] = row.user_type.value
            claims["bank_id"] = str(row.bank_id) if row.bank_id else None

        token, expires_at = create_access_token(data=claims)
        return Session(
            access_token=token,
            expires_at=expires_at,
            user=CredentialUser(
                id=credential.id,
                email=credential.email,
                user_metadata=dict(credential.user_metadata or {}),
            ),
        )

    # ------------------------------------------------------------------
    # CredentialStore protocol
    # ------------------------------------------------------------------

    async def get_current_session(self) -> Session | None:
        """
        Return the current session if its token is still valid.

        An expired token or a deactivated credential ends the session
        (without a SIGNED_OUT event, matching a hosted client reading its
        stored session).
        """
        session = self._session
        if session is None:
            return None

        try:
            decode_access_token(session.access_token)
        except JWTError:
            logger.info("Stored session for %s has expired", session.user.id)
            self._session = None
            return None

        async with self._transaction() as db:
            credential = await db.get(Credential, session.user.id)

        if credential is None or not credential.is_active:
            self._session = None
            return None
        return session

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        """
        Authenticate with email and password.

        Returns the same error for "wrong password", "email not found" and
        "deactivated" so callers can't enumerate accounts.
        """
        async with self._transaction() as db:
            result = await db.execute(select(Credential).where(Credential.email == email))
            credential = result.scalar_one_or_none()

            if credential is None:
                raise InvalidCredentialsError()
            if not verify_password(password, credential.hashed_password):
                raise InvalidCredentialsError()
            if not credential.is_active:
                raise InvalidCredentialsError()

            session = await self._issue_session(db, credential)

        self._session = session
        self._notify(AuthChangeEvent.SIGNED_IN, session)
        return session

    async def sign_up(self, email: str, password: str, data: dict[str, Any]) -> Session:
        """
        Create a credential and sign it in.

        Args:
            email: Login email, must not be registered yet.
            password: Plaintext password, hashed before storage.
            data: Auxiliary signup metadata (name, user_type, bank_name, ...).

        Raises:
            SignupError: If the email is taken or the insert fails.
        """
        try:
            async with self._transaction() as db:
                result = await db.execute(select(Credential.id).where(Credential.email == email))
                if result.scalar_one_or_none() is not None:
                    raise SignupError("User already registered")

                credential = Credential(
                    email=email,
                    hashed_password=hash_password(password),
                    user_metadata={k: v for k, v in data.items() if v is not None},
                )
                db.add(credential)
                await db.flush()

                if self._create_profile_stub:
                    db.add(
                        Profile(
                            id=credential.id,
                            email=email,
                            name=data.get("name") or "",
                            user_type=UserType(data.get("user_type") or UserType.CLIENT.value),
                        )
                    )
                    await db.flush()

                session = await self._issue_session(db, credential)
        except CredentialStoreError as exc:
            if isinstance(exc.__cause__, IntegrityError):
                raise SignupError("User already registered") from exc
            raise SignupError(exc.detail) from exc

        logger.info("Credential created for %s", credential.id)
        self._session = session
        self._notify(AuthChangeEvent.SIGNED_IN, session)
        return session

    async def sign_out(self) -> None:
        self._session = None
        self._notify(AuthChangeEvent.SIGNED_OUT, None)

    async def set_session(self, session: Session) -> Session:
        """
        Make a previously issued session current again.

        Raises:
            CredentialStoreError: If the token has expired or the credential
                is gone or deactivated.
        """
        try:
            decode_access_token(session.access_token)
        except JWTError as exc:
            raise CredentialStoreError("Session token is no longer valid") from exc

        async with self._transaction() as db:
            credential = await db.get(Credential, session.user.id)
        if credential is None or not credential.is_active:
            raise CredentialStoreError("Session subject is no longer active")

        self._session = session
        self._notify(AuthChangeEvent.SIGNED_IN, session)
        return session

    async def refresh_session(self) -> Session | None:
        """
        Re-issue the current session's token with fresh profile claims.

        Best-effort: does nothing when signed out.
        """
        current = self._session
        if current is None:
            return None

        async with self._transaction() as db:
            credential = await db.get(Credential, current.user.id)
            if credential is None or not credential.is_active:
                return None
            session = await self._issue_session(db, credential)

        self._session = session
        self._notify(AuthChangeEvent.TOKEN_REFRESHED, session)
        return session

    def on_auth_state_change(self, handler: AuthStateHandler) -> Subscription:
        self._handlers.append(handler)

        def _remove() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        subscription = Subscription(_remove)
        handler(AuthChangeEvent.INITIAL_SESSION, self._session)
        return subscription
