"""
Database engine, session management, and base model class.

This module sets up SQLAlchemy 2.0 with async support. Key components:

  - engine: The async database engine (connection pool for production DBs)
  - AsyncSessionLocal: Factory for creating async database sessions
  - Base: Declarative base class that all ORM models inherit from
  - get_db(): FastAPI dependency that provides a session per request
  - store_transaction(): one credential/profile store call, errors wrapped

The credential and profile stores do not use get_db(). Each of their calls
opens its own short session through store_transaction(), because every call
stands for one round trip to the hosted tables (and the session manager
outlives any single request).
"""

from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from app.config import settings


# echo=True in debug mode logs all SQL statements.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
)

# expire_on_commit=False prevents lazy-load errors after commit:
# without this, accessing attributes on a committed object would trigger
# a synchronous DB call, which fails in async context.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


async def get_db():
    """
    FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)):
            ...

    The session is automatically committed on success and rolled back
    on any exception, then closed when the request completes.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def store_transaction(
    session_factory: async_sessionmaker[AsyncSession],
    error_cls: type[Exception],
    label: str,
):
    """
    One store call: open a session, commit on success, and re-raise any
    SQLAlchemy failure as error_cls (keeping the original as __cause__).

    Domain errors raised inside the block roll back and propagate unchanged.

    Usage in a store:
        async with store_transaction(self._session_factory, ProfileStoreError, "Profile store") as db:
            ...
    """
    try:
        async with session_factory() as session:
            yield session
            await session.commit()
    except SQLAlchemyError as exc:
        raise error_cls(f"{label} request failed: {exc}") from exc
