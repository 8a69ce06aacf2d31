import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ..db.base import Base
from ..models import Document
from .base import DocumentStore, Key, Write, apply_writes, group_writes

logger = logging.getLogger(__name__)


class _Conflict(Exception):
    pass


class SqlDocumentStore(DocumentStore):
    """
    Хранилище поверх одной таблицы documents (SQLAlchemy asyncio).
    Коммит идёт в одной транзакции БД; каждое изменение строки проверяет
    версию через UPDATE ... WHERE version = :прочитанная.
    """

    def __init__(self, engine: AsyncEngine, transaction_attempts: int = 5):
        super().__init__(transaction_attempts)
        self.engine = engine
        self._sessionmaker = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    async def create_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def _load(self, collection: str, doc_id: str) -> Tuple[Optional[Dict[str, Any]], int]:
        async with self._sessionmaker() as session:
            row = await session.get(Document, (collection, doc_id))
            if row is None:
                return None, 0
            return dict(row.data), row.version

    async def _load_collection(self, collection: str) -> List[Tuple[str, Dict[str, Any]]]:
        async with self._sessionmaker() as session:
            result = await session.execute(
                select(Document).where(Document.collection == collection).order_by(Document.created_at)
            )
            return [(row.id, dict(row.data)) for row in result.scalars().all()]

    async def _commit(self, reads: Dict[Key, int], writes: List[Write]) -> bool:
        grouped = group_writes(writes)
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    for key in reads.keys() - grouped.keys():
                        if await self._current_version(session, key) != reads[key]:
                            raise _Conflict(key)

                    for key, key_writes in grouped.items():
                        await self._apply(session, key, key_writes, reads.get(key))
        except _Conflict as conflict:
            logger.debug(f"Version conflict on {conflict.args[0]}")
            return False
        except (IntegrityError, OperationalError) as exc:
            # дубль первичного ключа или блокировка БД: та же гонка, пробуем снова
            logger.debug(f"Commit rejected by database: {exc}")
            return False
        return True

    @staticmethod
    async def _current_version(session: AsyncSession, key: Key) -> int:
        collection, doc_id = key
        result = await session.execute(
            select(Document.version).where(Document.collection == collection, Document.id == doc_id)
        )
        version = result.scalar_one_or_none()
        return version or 0

    @staticmethod
    async def _apply(session: AsyncSession, key: Key, key_writes: List[Write], expected: Optional[int]) -> None:
        collection, doc_id = key
        result = await session.execute(
            select(Document).where(Document.collection == collection, Document.id == doc_id).with_for_update()
        )
        row = result.scalar_one_or_none()
        version = row.version if row is not None else 0
        if expected is not None and version != expected:
            raise _Conflict(key)

        data = apply_writes(dict(row.data) if row is not None else None, key_writes)

        if row is None:
            if data is not None:
                session.add(Document(collection=collection, id=doc_id, data=data, version=1))
                await session.flush()
            return

        if data is None:
            stmt = delete(Document).where(
                Document.collection == collection, Document.id == doc_id, Document.version == version
            )
        else:
            stmt = (
                update(Document)
                .where(Document.collection == collection, Document.id == doc_id, Document.version == version)
                .values(data=data, version=version + 1)
            )
        outcome = await session.execute(stmt.execution_options(synchronize_session=False))
        if outcome.rowcount != 1:
            raise _Conflict(key)
