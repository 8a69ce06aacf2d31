import logging

from elysian_cafe.config import Settings, settings as default_settings
from elysian_cafe.db.session import make_engine
from elysian_cafe.store import DocumentStore, MemoryDocumentStore, SqlDocumentStore

logger = logging.getLogger(__name__)


async def build_store(settings: Settings = default_settings) -> DocumentStore:
    """
    Создаёт хранилище по STORE_BACKEND.
    Для sql при AUTO_CREATE_SCHEMA таблица создаётся сразу (удобно для sqlite в разработке),
    в проде схема накатывается через alembic.
    """
    if settings.STORE_BACKEND == "memory":
        return MemoryDocumentStore(transaction_attempts=settings.STORE_TRANSACTION_ATTEMPTS)
    if settings.STORE_BACKEND != "sql":
        raise ValueError(f"Unknown STORE_BACKEND: {settings.STORE_BACKEND}")

    store = SqlDocumentStore(make_engine(settings), transaction_attempts=settings.STORE_TRANSACTION_ATTEMPTS)
    if settings.AUTO_CREATE_SCHEMA:
        await store.create_schema()
        logger.info("Schema ensured (AUTO_CREATE_SCHEMA)")
    return store
