"""Async database engine and session factory."""

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from restock_bot.config import settings

engine = create_async_engine(
    settings.database_url,
    pool_pre_ping=True,
    pool_size=settings.max_concurrency,
    max_overflow=0,
)

AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)
