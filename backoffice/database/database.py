from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from backoffice.core.config import settings
import logging

logger = logging.getLogger(__name__)

# Async engine for application use
async_engine = create_async_engine(
    settings.async_database_url,
    pool_pre_ping=True,
    echo=settings.DEBUG and settings.ENVIRONMENT != "test",
    poolclass=NullPool if settings.ENVIRONMENT == "test" else None
)

# Async session for application
AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)

Base = declarative_base()


# Async dependency for application endpoints
async def get_async_db():
    """Genera una sesión de base de datos asíncrona para endpoints."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.error(f"Database error: {e}")
            await session.rollback()
            raise
        finally:
            await session.close()


async def create_tables() -> None:
    """Crea las tablas que falten (solo desarrollo, no hay migraciones)."""
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
