from typing import Optional

from pydantic import ConfigDict, Field, field_validator

from .base import Schema


class SystemConfig(Schema):
    # None = поле не задано, считается "принимаем"
    accepting_orders: Optional[bool] = None
    upi_id: str = ""
    payee_name: str = ""

    @property
    def is_open(self) -> bool:
        return self.accepting_orders is not False


class ConfigUpdate(Schema):
    accepting_orders: Optional[bool] = None
    upi_id: Optional[str] = None
    payee_name: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class AcceptingOrdersUpdate(Schema):
    # без значения = переключить
    accepting_orders: Optional[bool] = None


class OrderCounter(Schema):
    order_number: int = 0

    @field_validator("order_number", mode="before")
    @classmethod
    def missing_is_zero(cls, value):
        return 0 if value is None else value


class CounterReset(Schema):
    order_number: int = Field(0, ge=0)
