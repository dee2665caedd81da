"""
Unit of work over an async session factory.

Each unit of work opens its own session and transaction. Leaving the block
normally commits; any exception (including cancellation) rolls back before
the error propagates.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from rentroll.core.exceptions import ConcurrentModification, PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@asynccontextmanager
async def unit_of_work(session_factory: async_sessionmaker) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        try:
            async with session.begin():
                yield session
        except StaleDataError as exc:
            logger.warning(f"[UOW] Rolled back on stale version: {exc}")
            raise ConcurrentModification(
                "contract was modified by another transaction"
            ) from exc
        except SQLAlchemyError as exc:
            logger.error(f"[UOW] Rolled back on database error: {exc}")
            raise PersistenceError(f"database error: {exc.__class__.__name__}") from exc


@asynccontextmanager
async def read_session(session_factory: async_sessionmaker) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        try:
            yield session
        except SQLAlchemyError as exc:
            logger.error(f"[UOW] Read failed: {exc}")
            raise PersistenceError(f"database error: {exc.__class__.__name__}") from exc


async def with_deadline(work: Awaitable[T], timeout: Optional[float]) -> T:
    """Await *work*, cancelling it (and so rolling its transaction back) on timeout."""
    if not timeout:
        return await work
    try:
        return await asyncio.wait_for(work, timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.error(f"[UOW] Deadline of {timeout}s exceeded; transaction rolled back")
        raise PersistenceError("unit of work deadline exceeded") from exc
