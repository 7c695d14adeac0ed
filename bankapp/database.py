"""
Ledger storage: the async engine, the session factory and the ORM base.

  - engine: async engine built from settings.DATABASE_URL (aiosqlite by
    default; any SQLAlchemy async URL works)
  - AsyncSessionLocal: one session per request
  - Base: declarative base for users, accounts, transactions and flags
  - get_db(): the request-scoped session dependency

Session lifecycle:
  Each API request gets its own session via get_db(). Money movement does
  NOT rely on this dependency for atomicity: every balance mutation runs
  inside bankapp.ledger.ledger_unit, which commits or rolls back explicitly.
  get_db() only commits whatever else the request left pending, and rolls
  back on any exception so no half-written state leaks out of a failed request.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from bankapp.config import settings


# echo=True in debug mode logs all SQL statements
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
)

# expire_on_commit=False: committed objects stay readable in async context
# (otherwise attribute access after commit would trigger a lazy load).
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
        @router.get("/accounts")
        async def list_accounts(db: AsyncSession = Depends(get_db)):
            ...

    The session is committed on success and rolled back on any exception,
    then closed when the request completes. Rejected transfers leave no
    trace in the ledger, so domain errors roll back like everything else.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
