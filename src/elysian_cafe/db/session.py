from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from elysian_cafe.config import Settings, settings as default_settings


def make_engine(settings: Settings = default_settings) -> AsyncEngine:
    """
    Асинхронный движок для DATABASE_URL (sqlite+aiosqlite или postgresql+asyncpg).
    Сессии открывает само хранилище, см. SqlDocumentStore.
    """
    return create_async_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO, future=True)
