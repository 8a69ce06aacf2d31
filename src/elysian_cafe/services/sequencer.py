import logging
from typing import Optional

from ..errors import NumberingFailed
from ..schemas.system import OrderCounter
from ..store import DocumentStore, Transaction

logger = logging.getLogger(__name__)

COUNTERS = ("system", "counters")


class OrderSequencer:
    """
    Выдаёт человекочитаемые номера заказов: 1, 2, 3...
    Пропуски допустимы, заблокированный заказ недопустим.
    """

    def __init__(self, store: DocumentStore):
        self._store = store

    @staticmethod
    async def _increment(transaction: Transaction) -> int:
        document = await transaction.get(*COUNTERS)
        current = OrderCounter.model_validate(document or {}).order_number
        next_number = current + 1
        transaction.set(*COUNTERS, {"orderNumber": next_number}, merge=True)
        return next_number

    async def allocate(self) -> int:
        try:
            return await self._store.run_transaction(self._increment)
        except Exception as exc:
            raise NumberingFailed(exc) from exc

    async def allocate_order_number(self) -> Optional[int]:
        """Номер или None, если транзакция счётчика не прошла."""
        try:
            return await self.allocate()
        except NumberingFailed as exc:
            logger.warning(str(exc))
            return None

    async def peek(self) -> int:
        document = await self._store.get_document(*COUNTERS)
        return OrderCounter.model_validate(document or {}).order_number

    async def reset(self, value: int = 0) -> None:
        await self._store.set_document(*COUNTERS, {"orderNumber": value}, merge=True)
        logger.info(f"Order counter reset to {value}")
