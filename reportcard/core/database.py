from datetime import datetime, timezone
from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncAttrs
from sqlalchemy.orm import DeclarativeBase

from reportcard.core.config import settings
from reportcard.core.logger import logger

# sqlite drivers do not take pool sizing arguments
pool_options = {} if settings.DATABASE_URL.startswith("sqlite") else {"pool_size": 5, "max_overflow": 10}

engine = create_async_engine(
    url=settings.DATABASE_URL,
    echo=False,
    **pool_options,
)
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

class Base(AsyncAttrs, DeclarativeBase):
    pass

async def get_db() -> AsyncGenerator[AsyncSession | Any, Any]:
    async with AsyncSessionLocal() as session:
        logger.debug("Database session opened")
        try:
            yield session
        finally:
            logger.debug("Database session closed")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
