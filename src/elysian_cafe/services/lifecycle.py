"""
Жизненный цикл заказа: pending -> served | cancelled.

Сюда же входит шлюз оформления (пустая корзина, флаг acceptingOrders)
и сама отправка заказа.
"""
import logging
from typing import Mapping, Optional, Union

from ..errors import (
    ConfigReadFailed,
    EmptyCart,
    InvalidTransition,
    OrderNotFound,
    OrdersClosed,
    PersistenceFailed,
)
from ..schemas.order import (
    PAYMENT_STATUS_BY_MODE,
    Order,
    OrderStatus,
    PaymentMode,
    PaymentStatus,
    SubmitResult,
)
from ..schemas.system import SystemConfig
from ..store import SERVER_TIMESTAMP, DocumentStore, Transaction
from .cart import CartAggregator
from .payment import build_upi_link
from .sequencer import OrderSequencer

logger = logging.getLogger(__name__)

ORDERS = "orders"
CONFIG = ("system", "config")

TRANSITIONS = {
    OrderStatus.pending: frozenset({OrderStatus.served, OrderStatus.cancelled}),
    OrderStatus.served: frozenset(),
    OrderStatus.cancelled: frozenset(),
}

ConfigInput = Union[SystemConfig, Mapping, None]


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return OrderStatus(target) in TRANSITIONS[OrderStatus(current)]


def _as_config(config: ConfigInput) -> SystemConfig:
    if isinstance(config, SystemConfig):
        return config
    return SystemConfig.model_validate(dict(config or {}))


def check_submit(cart: CartAggregator, config: ConfigInput) -> None:
    if len(cart) == 0:
        raise EmptyCart()
    if not _as_config(config).is_open:
        raise OrdersClosed()


def can_submit(cart: CartAggregator, config: ConfigInput) -> bool:
    """False для пустой корзины и для acceptingOrders == False; отсутствующий флаг = открыто."""
    try:
        check_submit(cart, config)
    except (EmptyCart, OrdersClosed):
        return False
    return True


class OrderLifecycle:

    def __init__(
        self,
        store: DocumentStore,
        sequencer: Optional[OrderSequencer] = None,
        payee_name: str = "",
        currency: str = "INR",
    ):
        self._store = store
        self._sequencer = sequencer or OrderSequencer(store)
        self._payee_name = payee_name
        self._currency = currency

    async def read_config(self) -> SystemConfig:
        """Свежее чтение system/config, без кеша. Ошибка чтения закрывает оформление."""
        try:
            document = await self._store.get_document(*CONFIG)
            return SystemConfig.model_validate(document or {})
        except Exception as exc:
            logger.error(f"Config check failed: {exc}")
            raise ConfigReadFailed(exc) from exc

    async def submit(self, cart: CartAggregator, payment_mode: PaymentMode = PaymentMode.cash) -> SubmitResult:
        if len(cart) == 0:
            raise EmptyCart()

        config = await self.read_config()
        check_submit(cart, config)

        total_price = cart.total()
        order_number = await self._sequencer.allocate_order_number()
        payment_status = PAYMENT_STATUS_BY_MODE[PaymentMode(payment_mode)]

        payload = {
            "items": [line.to_document() for line in cart.to_item_lines()],
            "totalPrice": total_price,
            "status": OrderStatus.pending.value,
            "paymentStatus": payment_status.value,
            "timestamp": SERVER_TIMESTAMP,
        }
        if order_number is not None:
            payload["orderNumber"] = order_number

        try:
            order_id = await self._store.add_document(ORDERS, payload)
        except Exception as exc:
            logger.exception("Order write failed")
            raise PersistenceFailed(exc) from exc

        cart.clear()
        logger.info(f"Order {order_id} placed (number={order_number}, total={total_price}, payment={payment_status.value})")

        payment_link = None
        if payment_status is PaymentStatus.awaiting_verification and config.upi_id:
            reference = f"#{order_number}" if order_number is not None else order_id[:5]
            payment_link = build_upi_link(
                payee_id=config.upi_id,
                payee_name=config.payee_name or self._payee_name,
                amount=total_price,
                order_ref=order_id,
                note=f"Elysian order {reference}",
                currency=self._currency,
            )

        return SubmitResult(
            order_id=order_id,
            order_number=order_number,
            total_price=total_price,
            payment_status=payment_status,
            payment_link=payment_link,
        )

    async def get_order(self, order_id: str) -> Order:
        document = await self._store.get_document(ORDERS, order_id)
        if document is None:
            raise OrderNotFound(order_id)
        return Order.model_validate(document)

    async def transition(self, order_id: str, target: OrderStatus) -> Order:
        """
        Переводит заказ в target. Проверка статуса и запись идут в одной транзакции.
        """
        target = OrderStatus(target)

        async def mutate(transaction: Transaction) -> Order:
            document = await transaction.get(ORDERS, order_id)
            if document is None:
                raise OrderNotFound(order_id)
            order = Order.model_validate(document)
            if not can_transition(order.status, target):
                raise InvalidTransition(order_id, order.status.value, target.value)
            transaction.update(ORDERS, order_id, {"status": target.value})
            return order.model_copy(update={"status": target})

        order = await self._store.run_transaction(mutate)
        logger.info(f"Order {order_id} -> {target.value}")
        return order

    async def mark_served(self, order_id: str) -> Order:
        return await self.transition(order_id, OrderStatus.served)

    async def cancel(self, order_id: str) -> Order:
        return await self.transition(order_id, OrderStatus.cancelled)
