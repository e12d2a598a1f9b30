from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.config import settings

engine = create_async_engine(
    settings.database_url,
    pool_size=10,
    pool_pre_ping=True,
    pool_recycle=1800,
    max_overflow=5,
    echo=settings.log_level.lower() == "debug",
)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

# Synchronous engine for Alembic migrations
sync_engine = create_engine(
    settings.database_url_sync,
    pool_size=2,
    pool_pre_ping=True,
)
