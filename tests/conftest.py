"""
Test fixtures for the CreditScore Pro test suite.

This module provides shared fixtures used across all test files:

  - db_engine / session_factory: Fresh in-memory SQLite database per test
  - banks: The ten recognized banks loaded into the bank directory
  - client_user / bank_user / second_bank_user: Registered users
  - credential_store / profile_store: Stores bound to the test database
  - manager: A started SessionManager, bootstrapped to "signed out"
  - client: Async HTTP test client wired to that manager

Key design decisions:
  - In-memory SQLite (sqlite+aiosqlite://) is used for speed and isolation.
  - Users are registered through their own SqlCredentialStore instance, so
    the registration's SIGNED_IN events never reach the manager under test.
  - ASGITransport does not run the lifespan, so the client fixture puts the
    test manager on app.state itself and overrides get_db.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault(
    "VERIFICATION_CODE_ENCRYPTION_KEY",
    "oI65YAQvhKm1qFt-jmntJaUIvUP3Lu_QvoPibrLO7rE=",
)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import uuid  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Bank, CreditScore, RiskLevel, UserType  # noqa: E402
from app.services.credential_store import SqlCredentialStore  # noqa: E402
from app.services.profile_store import ProfileStore  # noqa: E402
from app.services.session_manager import SessionManager  # noqa: E402
from app.services.verification_registry import DEFAULT_BANKS  # noqa: E402


TEST_DATABASE_URL = "sqlite+aiosqlite://"

CLIENT_EMAIL = "tendai.moyo@example.com"
CLIENT_PASSWORD = "ClientPass123!"
CLIENT_ACCOUNT = "ACC001234567"

BANK_EMAIL = "officer@cbz.example.com"
BANK_PASSWORD = "BankPass123!"

SECOND_BANK_EMAIL = "officer@steward.example.com"
SECOND_BANK_PASSWORD = "StewardPass123!"


async def register_user(
    session_factory,
    email: str,
    password: str,
    name: str,
    user_type: UserType,
    with_profile: bool = True,
    **profile_fields,
) -> uuid.UUID:
    """Create a credential (and profile) without touching the manager under test."""
    store = SqlCredentialStore(session_factory, create_profile_stub=with_profile)
    session = await store.sign_up(
        email, password, {"name": name, "user_type": user_type.value}
    )
    if profile_fields:
        await ProfileStore(session_factory).update_profile(session.user.id, profile_fields)
    return session.user.id


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def banks(session_factory) -> dict[str, uuid.UUID]:
    """Load the bank directory; returns bank name -> id."""
    rows = [Bank(name=name, code=code) for name, code, _ in DEFAULT_BANKS]
    async with session_factory() as db:
        db.add_all(rows)
        await db.commit()
    return {bank.name: bank.id for bank in rows}


@pytest_asyncio.fixture
async def client_user(session_factory, banks) -> uuid.UUID:
    """A registered client with an account number and one credit score."""
    user_id = await register_user(
        session_factory,
        CLIENT_EMAIL,
        CLIENT_PASSWORD,
        "Tendai Moyo",
        UserType.CLIENT,
        account_number=CLIENT_ACCOUNT,
    )
    async with session_factory() as db:
        db.add(
            CreditScore(
                user_id=user_id,
                score=712,
                risk_level=RiskLevel.LOW,
                payment_history_score=85,
                credit_utilization_score=70,
                credit_history_length_score=60,
                credit_types_score=75,
                new_credit_score=80,
            )
        )
        await db.commit()
    return user_id


@pytest_asyncio.fixture
async def bank_user(session_factory, banks) -> uuid.UUID:
    """A registered bank representative, not yet verified for any bank."""
    return await register_user(
        session_factory, BANK_EMAIL, BANK_PASSWORD, "Rudo Chikwanha", UserType.BANK
    )


@pytest_asyncio.fixture
async def second_bank_user(session_factory, banks) -> uuid.UUID:
    return await register_user(
        session_factory,
        SECOND_BANK_EMAIL,
        SECOND_BANK_PASSWORD,
        "Farai Ndlovu",
        UserType.BANK,
    )


@pytest_asyncio.fixture
async def credential_store(session_factory):
    return SqlCredentialStore(session_factory, create_profile_stub=True)


@pytest_asyncio.fixture
async def profile_store(session_factory):
    return ProfileStore(session_factory)


@pytest_asyncio.fixture
async def manager(credential_store, profile_store, banks):
    """A started manager that has finished bootstrapping (signed out)."""
    session_manager = SessionManager(credential_store, profile_store, fallback_timeout=5.0)
    await session_manager.start()
    await session_manager.wait_idle()
    yield session_manager
    await session_manager.close()


@pytest_asyncio.fixture
async def client(session_factory, manager):
    """
    Async HTTP test client with the test database and manager injected.
    """

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.state.session_manager = manager

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


async def login_client(client) -> dict:
    response = await client.post(
        "/session/login",
        json={
            "email": CLIENT_EMAIL,
            "password": CLIENT_PASSWORD,
            "type": "client",
            "account_number": CLIENT_ACCOUNT,
        },
    )
    assert response.status_code == 200, f"Login failed: {response.text}"
    return response.json()


async def login_bank(client, email=BANK_EMAIL, password=BANK_PASSWORD, bank="CBZ Bank", code="CBZ-VERIFY-2024") -> dict:
    response = await client.post(
        "/session/login",
        json={
            "email": email,
            "password": password,
            "type": "bank",
            "bank": bank,
            "verification_code": code,
        },
    )
    assert response.status_code == 200, f"Login failed: {response.text}"
    return response.json()
