import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from elysian_cafe.api.deps import get_lifecycle, get_store
from elysian_cafe.crud.order import count_by_status, get_order_by_id, get_orders
from elysian_cafe.errors import (
    ConfigReadFailed,
    EmptyCart,
    InvalidTransition,
    OrderNotFound,
    OrdersClosed,
    PersistenceFailed,
)
from elysian_cafe.schemas.order import OrderRead, OrderStatus, OrderSubmit, StatusCounts, SubmitResult
from elysian_cafe.services.cart import CartAggregator
from elysian_cafe.services.lifecycle import OrderLifecycle
from elysian_cafe.store import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("/", response_model=SubmitResult, status_code=201)
async def submit_order(order_in: OrderSubmit, lifecycle: OrderLifecycle = Depends(get_lifecycle)):
    """
    Оформляет заказ из корзины клиента (копии позиций меню).
    Номер заказа выдаётся по возможности: при сбое счётчика заказ создаётся без номера.
    """
    cart = CartAggregator(order_in.items)
    try:
        return await lifecycle.submit(cart, order_in.payment_mode)
    except EmptyCart as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OrdersClosed as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (ConfigReadFailed, PersistenceFailed) as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/", response_model=List[OrderRead])
async def list_orders(
    status: Optional[OrderStatus] = Query(None, description="Фильтр по статусу"),
    limit: Optional[int] = Query(None, ge=1, description="Количество записей для вывода"),
    store: DocumentStore = Depends(get_store),
):
    """
    Возвращает список заказов, новые первыми.
    Позиции сгруппированы: одна строка на блюдо с количеством.
    """
    orders = await get_orders(store, status=status, limit=limit)
    return [OrderRead.from_order(o) for o in orders]


@router.get("/counts", response_model=StatusCounts)
async def order_counts(store: DocumentStore = Depends(get_store)):
    """
    Счётчики для экрана персонала: pending / served / cancelled.
    """
    return count_by_status(await get_orders(store))


@router.get("/{order_id}", response_model=OrderRead)
async def get_order(
    order_id: str = Path(..., description="ID заказа"),
    store: DocumentStore = Depends(get_store),
):
    """
    Возвращает детализацию заказа по id.
    """
    order = await get_order_by_id(store, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return OrderRead.from_order(order)


async def _transition(lifecycle: OrderLifecycle, order_id: str, target: OrderStatus) -> OrderRead:
    try:
        order = await lifecycle.transition(order_id, target)
    except OrderNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    return OrderRead.from_order(order)


@router.post("/{order_id}/serve", response_model=OrderRead)
async def serve_order(order_id: str, lifecycle: OrderLifecycle = Depends(get_lifecycle)):
    """
    Mark Done: pending -> served.
    """
    return await _transition(lifecycle, order_id, OrderStatus.served)


@router.post("/{order_id}/cancel", response_model=OrderRead)
async def cancel_order(order_id: str, lifecycle: OrderLifecycle = Depends(get_lifecycle)):
    """
    Отмена: pending -> cancelled. Подтверждение остаётся на стороне клиента.
    """
    return await _transition(lifecycle, order_id, OrderStatus.cancelled)
