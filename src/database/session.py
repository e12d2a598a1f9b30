import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from src.database.engine import async_session

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session, committed when the handler succeeds.

    Pricing and compliance writes only flush; the commit happens here so a
    failed tier edit or review never leaves half-written rows behind.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception as exc:
            logger.debug("Rolling back session after %s", type(exc).__name__)
            await session.rollback()
            raise
