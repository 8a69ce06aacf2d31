from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple
from zoneinfo import ZoneInfo

from elysian_cafe.config import settings
from elysian_cafe.schemas.order import Order, OrderStatus, PaymentStatus, StatusCounts
from elysian_cafe.store import DocumentStore, Filter, OrderBy

ORDERS = "orders"

PERIODS = ["all", "today", "week", "month"]

# известные метки оплаты; всё остальное (и отсутствие метки) идёт в "Other"
PAYMENT_MODE_LABELS = {
    PaymentStatus.cash.value: "Cash",
    PaymentStatus.awaiting_verification.value: "UPI",
    "upi": "UPI",
}


async def get_orders(
    store: DocumentStore,
    status: Optional[str] = None,
    statuses: Optional[List[str]] = None,
    limit: Optional[int] = None,
) -> List[Order]:
    """
    Возвращает список заказов, новые первыми (по timestamp).
    Поддерживает фильтр по одному статусу или по списку статусов.
    """
    filters = []
    if status:
        filters.append(Filter("status", "==", OrderStatus(status).value))
    if statuses:
        filters.append(Filter("status", "in", [OrderStatus(s).value for s in statuses]))

    documents = await store.query(ORDERS, filters, OrderBy("timestamp", descending=True))
    if limit:
        documents = documents[:limit]
    return [Order.model_validate(document) for document in documents]


async def get_order_by_id(store: DocumentStore, order_id: str) -> Optional[Order]:
    document = await store.get_document(ORDERS, order_id)
    if document is None:
        return None
    return Order.model_validate(document)


def count_by_status(orders: Iterable[Order]) -> StatusCounts:
    counts = StatusCounts()
    for order in orders:
        setattr(counts, order.status.value, getattr(counts, order.status.value) + 1)
    return counts


def classify_payment(payment_status: Optional[str]) -> str:
    return PAYMENT_MODE_LABELS.get((payment_status or "").lower(), "Other")


def _local(order: Order, tz: ZoneInfo) -> datetime:
    return order.timestamp.astimezone(tz)


def _period_bounds(period: str, now: datetime, tz: ZoneInfo) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Начало текущего периода и начало предыдущего (для роста)."""
    if period == "today":
        start = now.astimezone(tz).replace(hour=0, minute=0, second=0, microsecond=0)
        return start, start - timedelta(days=1)
    if period == "week":
        start = now - timedelta(days=7)
        return start, start - timedelta(days=7)
    if period == "month":
        start = now - timedelta(days=30)
        return start, start - timedelta(days=30)
    return None, None


def _revenue(orders: Iterable[Order]) -> Decimal:
    return sum((order.total_price for order in orders), Decimal("0"))


def _growth(current, previous) -> float:
    if not previous:
        return 0.0
    return round(float((current - previous) / previous * 100), 1)


async def _served_orders(store: DocumentStore) -> List[Order]:
    orders = await get_orders(store, status=OrderStatus.served.value)
    return [order for order in orders if order.timestamp is not None]


def _since(orders: Iterable[Order], start: Optional[datetime]) -> List[Order]:
    if start is None:
        return list(orders)
    return [order for order in orders if order.timestamp >= start]


async def get_served_orders(store: DocumentStore, period: str = "all", now: Optional[datetime] = None) -> List[Order]:
    now = now or datetime.now(timezone.utc)
    start, _ = _period_bounds(period, now, ZoneInfo(settings.TIMEZONE))
    return _since(await _served_orders(store), start)


async def get_orders_summary_stats(store: DocumentStore, period: str = "all", now: Optional[datetime] = None) -> dict:
    """
    Сводная статистика по обслуженным (served) заказам за период:
    - количество заказов, выручка, средний чек, самый крупный заказ
    - выручка за сегодня / 7 дней / 30 дней
    - среднее число позиций в заказе
    - рост выручки и количества заказов к предыдущему такому же периоду
    """
    tz = ZoneInfo(settings.TIMEZONE)
    now = now or datetime.now(timezone.utc)
    served = await _served_orders(store)
    start, previous_start = _period_bounds(period, now, tz)
    current = _since(served, start)

    count_orders = len(current)
    total_revenue = _revenue(current)
    avg_check = round(total_revenue / count_orders, 2) if count_orders else Decimal("0")
    highest_order = max((order.total_price for order in current), default=Decimal("0"))
    total_items = sum(len(order.items) for order in current)

    today = _since(current, _period_bounds("today", now, tz)[0])
    week = _since(current, _period_bounds("week", now, tz)[0])
    month = _since(current, _period_bounds("month", now, tz)[0])

    revenue_growth = orders_growth = 0.0
    if start is not None:
        previous = [order for order in served if previous_start <= order.timestamp < start]
        revenue_growth = _growth(total_revenue, _revenue(previous))
        orders_growth = _growth(count_orders, len(previous))

    return {
        "period": period,
        "count_orders": count_orders,
        "total_revenue": float(total_revenue),
        "avg_check": float(avg_check),
        "highest_order": float(highest_order),
        "avg_items_per_order": round(total_items / count_orders, 2) if count_orders else 0.0,
        "today_revenue": float(_revenue(today)),
        "today_orders": len(today),
        "week_revenue": float(_revenue(week)),
        "week_orders": len(week),
        "month_revenue": float(_revenue(month)),
        "month_orders": len(month),
        "revenue_growth": revenue_growth,
        "orders_growth": orders_growth,
    }


async def get_orders_stats_by_item(
    store: DocumentStore,
    period: str = "all",
    limit: int = 10,
    now: Optional[datetime] = None,
) -> List[dict]:
    """
    Самые продаваемые позиции: количество и выручка по каждой строке заказа.
    Сортировка по количеству.
    """
    items: Dict[str, dict] = {}
    for order in await get_served_orders(store, period, now):
        for line in order.items:
            name = line.name or "Unknown"
            row = items.setdefault(name, {"name": name, "category": line.category.value, "quantity": 0, "revenue": Decimal("0")})
            row["quantity"] += 1
            row["revenue"] += line.price

    rows = sorted(items.values(), key=lambda row: row["quantity"], reverse=True)[:limit]
    return [{**row, "revenue": float(row["revenue"])} for row in rows]


async def get_orders_stats_by_category(
    store: DocumentStore,
    period: str = "all",
    now: Optional[datetime] = None,
) -> List[dict]:
    categories: Dict[str, dict] = {}
    for order in await get_served_orders(store, period, now):
        for line in order.items:
            row = categories.setdefault(line.category.value, {"category": line.category.value, "count": 0, "revenue": Decimal("0")})
            row["count"] += 1
            row["revenue"] += line.price

    return [{**row, "revenue": float(row["revenue"])} for row in categories.values()]


async def get_orders_by_hour_stats(
    store: DocumentStore,
    period: str = "all",
    now: Optional[datetime] = None,
) -> List[dict]:
    """
    Возвращает статистику заказов по часам суток (локальное время заведения).
    """
    tz = ZoneInfo(settings.TIMEZONE)
    hours = {h: {"count_orders": 0, "total_revenue": Decimal("0")} for h in range(24)}
    for order in await get_served_orders(store, period, now):
        bucket = hours[_local(order, tz).hour]
        bucket["count_orders"] += 1
        bucket["total_revenue"] += order.total_price

    # полный диапазон 0–23, чтобы в ответе были и "пустые" часы
    return [
        {
            "hour": h,
            "count_orders": hours[h]["count_orders"],
            "total_revenue": float(hours[h]["total_revenue"]),
        }
        for h in range(24)
    ]


async def get_orders_by_weekday_stats(
    store: DocumentStore,
    period: str = "all",
    now: Optional[datetime] = None,
) -> List[dict]:
    """
    Возвращает статистику заказов по дням недели (0=Понедельник ... 6=Воскресенье).
    """
    tz = ZoneInfo(settings.TIMEZONE)
    weekday_names = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
    weekdays = {i: {"count_orders": 0, "total_revenue": Decimal("0")} for i in range(7)}
    for order in await get_served_orders(store, period, now):
        bucket = weekdays[_local(order, tz).weekday()]
        bucket["count_orders"] += 1
        bucket["total_revenue"] += order.total_price

    return [
        {
            "weekday": i,
            "weekday_name": weekday_names[i],
            "count_orders": weekdays[i]["count_orders"],
            "total_revenue": float(weekdays[i]["total_revenue"]),
        }
        for i in range(7)
    ]


async def get_payment_mode_stats(store: DocumentStore) -> Dict[str, int]:
    """
    Количество заказов по способу оплаты (по всем заказам, не только served).
    cash -> Cash, awaiting_verification -> UPI, остальное -> Other.
    """
    counts = {"Cash": 0, "UPI": 0, "Other": 0}
    for order in await get_orders(store):
        counts[classify_payment(order.payment_status)] += 1
    return counts


async def get_status_stats(store: DocumentStore) -> StatusCounts:
    return count_by_status(await get_orders(store))


async def get_revenue_over_time(
    store: DocumentStore,
    period: str = "all",
    now: Optional[datetime] = None,
    days: int = 7,
) -> List[dict]:
    """
    Выручка и количество обслуженных заказов по дням за последние `days` дней
    (локальные сутки заведения, сегодня последним).
    """
    tz = ZoneInfo(settings.TIMEZONE)
    now = now or datetime.now(timezone.utc)
    today = now.astimezone(tz).date()
    series = {today - timedelta(days=i): {"revenue": Decimal("0"), "orders": 0} for i in range(days - 1, -1, -1)}

    for order in await get_served_orders(store, period, now):
        bucket = series.get(_local(order, tz).date())
        if bucket is None:
            continue
        bucket["revenue"] += order.total_price
        bucket["orders"] += 1

    return [
        {"date": day.isoformat(), "revenue": float(bucket["revenue"]), "orders": bucket["orders"]}
        for day, bucket in series.items()
    ]


# (название, первый час, час после последнего)
TIME_OF_DAY = [
    ("Night (12AM-6AM)", 0, 6),
    ("Morning (6AM-12PM)", 6, 12),
    ("Afternoon (12PM-6PM)", 12, 18),
    ("Evening (6PM-12AM)", 18, 24),
]


async def get_time_of_day_stats(
    store: DocumentStore,
    period: str = "all",
    now: Optional[datetime] = None,
) -> List[dict]:
    """
    Обслуженные заказы по времени суток: ночь, утро, день, вечер.
    """
    tz = ZoneInfo(settings.TIMEZONE)
    buckets = {name: {"revenue": Decimal("0"), "orders": 0} for name, _, _ in TIME_OF_DAY}
    for order in await get_served_orders(store, period, now):
        hour = _local(order, tz).hour
        name = next(name for name, start, end in TIME_OF_DAY if start <= hour < end)
        buckets[name]["revenue"] += order.total_price
        buckets[name]["orders"] += 1

    return [
        {"name": name, "revenue": float(buckets[name]["revenue"]), "orders": buckets[name]["orders"]}
        for name, _, _ in TIME_OF_DAY
    ]
