from typing import Dict, List

from fastapi import APIRouter, Depends, Query

from elysian_cafe.api.deps import get_store
from elysian_cafe.crud.order import (
    PERIODS,
    get_orders_by_hour_stats,
    get_orders_by_weekday_stats,
    get_orders_stats_by_category,
    get_orders_stats_by_item,
    get_orders_summary_stats,
    get_payment_mode_stats,
    get_revenue_over_time,
    get_status_stats,
    get_time_of_day_stats,
)
from elysian_cafe.schemas.order import StatusCounts
from elysian_cafe.store import DocumentStore


router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/summary")
async def stats_summary(
    period: str = Query("all", enum=PERIODS, description="Период: all | today | week | month"),
    store: DocumentStore = Depends(get_store),
):
    """
    Общая статистика по обслуженным заказам:
    - количество заказов
    - общая выручка
    - средний чек
    - рост к предыдущему периоду
    """
    return await get_orders_summary_stats(store, period=period)


@router.get("/by-item")
async def stats_by_item(
    period: str = Query("all", enum=PERIODS),
    limit: int = Query(10, ge=1, description="Сколько позиций вернуть"),
    store: DocumentStore = Depends(get_store),
) -> List[dict]:
    """
    Топ самых продаваемых позиций (по количеству).
    """
    return await get_orders_stats_by_item(store, period=period, limit=limit)


@router.get("/by-category")
async def stats_by_category(
    period: str = Query("all", enum=PERIODS),
    store: DocumentStore = Depends(get_store),
) -> List[dict]:
    return await get_orders_stats_by_category(store, period=period)


@router.get("/by-hour")
async def stats_by_hour(
    period: str = Query("all", enum=PERIODS),
    store: DocumentStore = Depends(get_store),
) -> List[dict]:
    """
    Часы пик: заказы и выручка по часам суток.
    """
    return await get_orders_by_hour_stats(store, period=period)


@router.get("/by-weekday")
async def stats_by_weekday(
    period: str = Query("all", enum=PERIODS),
    store: DocumentStore = Depends(get_store),
) -> List[dict]:
    return await get_orders_by_weekday_stats(store, period=period)


@router.get("/payment-modes")
async def stats_payment_modes(store: DocumentStore = Depends(get_store)) -> Dict[str, int]:
    """
    Заказы по способу оплаты: Cash / UPI / Other.
    """
    return await get_payment_mode_stats(store)


@router.get("/statuses", response_model=StatusCounts)
async def stats_statuses(store: DocumentStore = Depends(get_store)):
    return await get_status_stats(store)


@router.get("/over-time")
async def stats_over_time(
    period: str = Query("all", enum=PERIODS),
    store: DocumentStore = Depends(get_store),
) -> List[dict]:
    """
    Выручка и заказы по дням за последние 7 дней.
    """
    return await get_revenue_over_time(store, period=period)


@router.get("/time-of-day")
async def stats_time_of_day(
    period: str = Query("all", enum=PERIODS),
    store: DocumentStore = Depends(get_store),
) -> List[dict]:
    return await get_time_of_day_stats(store, period=period)
