import enum
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, computed_field

from .base import Schema
from .menu import Category, VegType


class OrderStatus(str, enum.Enum):
    pending = "pending"
    served = "served"
    cancelled = "cancelled"


class PaymentMode(str, enum.Enum):
    cash = "cash"
    upi = "upi"


class PaymentStatus(str, enum.Enum):
    cash = "cash"
    # только метка: оплату никто не подтверждает
    awaiting_verification = "awaiting_verification"


PAYMENT_STATUS_BY_MODE = {
    PaymentMode.cash: PaymentStatus.cash,
    PaymentMode.upi: PaymentStatus.awaiting_verification,
}


class ItemLine(Schema):
    """Копия позиции меню на момент добавления в корзину."""

    id: str = ""
    name: str = ""
    price: Decimal = Field(Decimal("0"), ge=0)
    category: Category = Category.dips
    veg_type: VegType = VegType.veg


class GroupedLine(ItemLine):
    quantity: int
    line_total: Decimal


class Order(Schema):
    id: str
    order_number: Optional[int] = None
    items: List[ItemLine] = []
    total_price: Decimal = Decimal("0")
    status: OrderStatus = OrderStatus.pending
    payment_status: Optional[str] = None
    timestamp: Optional[datetime] = None

    @computed_field
    @property
    def display_number(self) -> str:
        if self.order_number is not None:
            return f"#{self.order_number}"
        return self.id[:5]


class OrderRead(Order):
    grouped_items: List[GroupedLine] = []

    @classmethod
    def from_document(cls, document: dict):
        return cls.from_order(Order.model_validate(document))

    @classmethod
    def from_order(cls, order: Order):
        from ..services.cart import group_lines

        return cls(
            **dict(order),
            grouped_items=list(group_lines(order.items)),
        )


class OrderSubmit(Schema):
    items: List[ItemLine] = []
    payment_mode: PaymentMode = PaymentMode.cash


class SubmitResult(Schema):
    order_id: str
    order_number: Optional[int] = None
    total_price: Decimal
    payment_status: PaymentStatus
    payment_link: Optional[str] = None

    @computed_field
    @property
    def message(self) -> str:
        if self.order_number is not None:
            return f"Order Placed! Your number: #{self.order_number}. Please proceed to the counter."
        return "Order Placed! Please proceed to the counter."


class StatusCounts(Schema):
    pending: int = 0
    served: int = 0
    cancelled: int = 0
