from decimal import Decimal

import pytest

from elysian_cafe.errors import (
    ConfigReadFailed,
    EmptyCart,
    InvalidTransition,
    OrderNotFound,
    OrdersClosed,
    PersistenceFailed,
)
from elysian_cafe.schemas.order import OrderStatus, PaymentMode, PaymentStatus
from elysian_cafe.schemas.system import SystemConfig
from elysian_cafe.services.cart import CartAggregator
from elysian_cafe.services.lifecycle import OrderLifecycle, can_submit, can_transition
from elysian_cafe.store import MemoryDocumentStore


async def _open(store, **extra):
    await store.set_document("system", "config", {"acceptingOrders": True, **extra})


def test_can_submit(burger):
    cart = CartAggregator([burger])

    assert can_submit(cart, {"acceptingOrders": True}) is True
    assert can_submit(cart, {}) is True
    assert can_submit(cart, None) is True
    assert can_submit(cart, SystemConfig(accepting_orders=False)) is False
    assert can_submit(cart, {"acceptingOrders": False}) is False
    assert can_submit(CartAggregator(), {"acceptingOrders": True}) is False


def test_transition_table():
    assert can_transition(OrderStatus.pending, OrderStatus.served)
    assert can_transition(OrderStatus.pending, OrderStatus.cancelled)
    assert not can_transition(OrderStatus.served, OrderStatus.cancelled)
    assert not can_transition(OrderStatus.cancelled, OrderStatus.served)
    assert not can_transition(OrderStatus.served, OrderStatus.pending)


async def test_submit_creates_pending_order(store, burger, dip):
    await _open(store)
    lifecycle = OrderLifecycle(store)
    cart = CartAggregator([burger, burger, dip])

    result = await lifecycle.submit(cart)

    assert result.order_number == 1
    assert result.total_price == Decimal("130")
    assert result.payment_status is PaymentStatus.cash
    assert result.payment_link is None
    assert result.message == "Order Placed! Your number: #1. Please proceed to the counter."
    assert cart.is_empty

    order = await lifecycle.get_order(result.order_id)
    assert order.status is OrderStatus.pending
    assert order.total_price == Decimal("130")
    assert [item.id for item in order.items] == ["a", "a", "b"]
    assert order.timestamp is not None
    assert order.display_number == "#1"


async def test_empty_cart_touches_nothing(burger):
    class CountingStore(MemoryDocumentStore):
        loads = 0

        async def _load(self, collection, doc_id):
            self.loads += 1
            return await super()._load(collection, doc_id)

    store = CountingStore()
    lifecycle = OrderLifecycle(store)

    with pytest.raises(EmptyCart) as exc:
        await lifecycle.submit(CartAggregator())

    assert str(exc.value) == "Your cart is empty!"
    assert store.loads == 0


async def test_closed_shop_rejects_and_keeps_cart(memory_store, burger):
    await memory_store.set_document("system", "config", {"acceptingOrders": False})
    lifecycle = OrderLifecycle(memory_store)
    cart = CartAggregator([burger])

    with pytest.raises(OrdersClosed):
        await lifecycle.submit(cart)

    assert len(cart) == 1
    assert await memory_store.query("orders") == []


async def test_config_is_read_on_every_submit(memory_store, burger):
    await _open(memory_store)
    lifecycle = OrderLifecycle(memory_store)
    await lifecycle.submit(CartAggregator([burger]))

    await memory_store.set_document("system", "config", {"acceptingOrders": False})

    with pytest.raises(OrdersClosed):
        await lifecycle.submit(CartAggregator([burger]))


async def test_missing_config_means_open(memory_store, burger):
    lifecycle = OrderLifecycle(memory_store)

    result = await lifecycle.submit(CartAggregator([burger]))

    assert result.order_id


async def test_config_read_failure_blocks_submit(burger):
    class Unreachable(MemoryDocumentStore):
        async def _load(self, collection, doc_id):
            raise ConnectionError("offline")

    lifecycle = OrderLifecycle(Unreachable())
    cart = CartAggregator([burger])

    with pytest.raises(ConfigReadFailed):
        await lifecycle.submit(cart)
    assert len(cart) == 1


async def test_order_without_number_when_counter_fails(memory_store, burger):
    class BrokenSequencer:
        async def allocate_order_number(self):
            return None

    await _open(memory_store)
    lifecycle = OrderLifecycle(memory_store, sequencer=BrokenSequencer())

    result = await lifecycle.submit(CartAggregator([burger]))
    order = await lifecycle.get_order(result.order_id)

    assert result.order_number is None
    assert result.message == "Order Placed! Please proceed to the counter."
    assert order.order_number is None
    assert order.display_number == result.order_id[:5]


async def test_persistence_failure_keeps_cart(burger):
    class ReadOnly(MemoryDocumentStore):
        async def add_document(self, collection, fields):
            raise ConnectionError("write refused")

    store = ReadOnly()
    await _open(store)
    lifecycle = OrderLifecycle(store)
    cart = CartAggregator([burger])

    with pytest.raises(PersistenceFailed) as exc:
        await lifecycle.submit(cart)

    assert str(exc.value) == "Something went wrong. Try again!"
    assert len(cart) == 1


async def test_upi_order_awaits_verification(memory_store, burger):
    await _open(memory_store, upiId="cafe@upi")
    lifecycle = OrderLifecycle(memory_store, payee_name="Elysian Cafe")

    result = await lifecycle.submit(CartAggregator([burger]), PaymentMode.upi)
    order = await lifecycle.get_order(result.order_id)

    assert result.payment_status is PaymentStatus.awaiting_verification
    assert order.payment_status == "awaiting_verification"
    assert result.payment_link.startswith("upi://pay?pa=cafe%40upi&pn=Elysian%20Cafe&am=50.00")


async def test_upi_without_payee_has_no_link(memory_store, burger):
    await _open(memory_store)
    lifecycle = OrderLifecycle(memory_store)

    result = await lifecycle.submit(CartAggregator([burger]), PaymentMode.upi)

    assert result.payment_status is PaymentStatus.awaiting_verification
    assert result.payment_link is None


async def test_serve_then_cancel_is_rejected(store, burger):
    await _open(store)
    lifecycle = OrderLifecycle(store)
    result = await lifecycle.submit(CartAggregator([burger]))

    served = await lifecycle.mark_served(result.order_id)
    assert served.status is OrderStatus.served

    with pytest.raises(InvalidTransition):
        await lifecycle.cancel(result.order_id)
    assert (await lifecycle.get_order(result.order_id)).status is OrderStatus.served


async def test_cancel_pending_order(memory_store, burger):
    lifecycle = OrderLifecycle(memory_store)
    result = await lifecycle.submit(CartAggregator([burger]))

    cancelled = await lifecycle.cancel(result.order_id)

    assert cancelled.status is OrderStatus.cancelled
    with pytest.raises(InvalidTransition):
        await lifecycle.mark_served(result.order_id)


async def test_transition_unknown_order(memory_store):
    lifecycle = OrderLifecycle(memory_store)

    with pytest.raises(OrderNotFound):
        await lifecycle.mark_served("missing")
