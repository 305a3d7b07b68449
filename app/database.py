"""
Database engine, session factory and declarative base
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
import structlog

from app.config import settings
from app.core.errors import StorageError

logger = structlog.get_logger()

engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    pool_pre_ping=True,
    pool_recycle=300,
)
SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def get_db():
    """Yield a request-scoped session"""
    async with SessionLocal() as session:
        yield session


async def commit(db: AsyncSession) -> None:
    """Commit the session, turning driver failures into StorageError"""
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Database commit failed", error=str(e))
        raise StorageError() from e
