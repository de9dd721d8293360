"""Database configuration and session management."""

import os
from typing import Any, AsyncGenerator, Sequence

from sqlalchemy import insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from stockpilot.core.errors import ConcurrencyConflictError


def normalize_database_url(url: str) -> str:
    """Rewrite provider URLs (postgres://, postgresql://) to the asyncpg driver."""
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


DATABASE_URL = normalize_database_url(
    os.getenv(
        "DATABASE_URL",
        "postgresql+asyncpg://stockpilot:dev_password_change_in_prod@db:5432/stockpilot_dev",
    )
)

engine = create_async_engine(
    DATABASE_URL,
    echo=os.getenv("DB_ECHO", "false").lower() == "true",
)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# Declarative base
Base = declarative_base()


async def insert_if_absent(
    db: AsyncSession,
    model: Any,
    rows: Sequence[dict[str, Any]],
    conflict_columns: Sequence[str],
) -> int:
    """
    INSERT rows, skipping any that collide on ``conflict_columns``.

    Uses ON CONFLICT DO NOTHING on PostgreSQL and SQLite. Other backends get a
    plain INSERT; a unique-key collision there raises ConcurrencyConflictError
    and the caller re-reads the winning row.

    Returns the number of rows actually inserted.
    """
    if not rows:
        return 0

    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(model).values(list(rows))
        stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_columns))
    elif dialect == "sqlite":
        stmt = sqlite.insert(model).values(list(rows))
        stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_columns))
    else:
        stmt = insert(model).values(list(rows))

    try:
        result = await db.execute(stmt)
    except IntegrityError as exc:
        raise ConcurrencyConflictError(
            f"{model.__tablename__} row already exists",
            details={"columns": list(conflict_columns)},
        ) from exc
    return max(result.rowcount or 0, 0)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
