"""
Async database engine and session factory.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings
from app.core.exceptions import ConflictError

logger = logging.getLogger(__name__)

async_engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a session scoped to one request.

    The whole request runs in a single transaction: committed when the
    endpoint returns, rolled back if anything raises.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def flush_or_conflict(db: AsyncSession, code: str, message: str) -> None:
    """
    Flush pending writes, turning a unique-constraint race into ConflictError.

    The session must be rolled back afterwards; ``get_db`` does that when the
    error propagates.
    """
    try:
        await db.flush()
    except IntegrityError as exc:
        logger.warning("Integrity conflict (%s): %s", code, exc.orig)
        raise ConflictError(code, message) from exc
