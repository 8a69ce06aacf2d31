import enum
from decimal import Decimal
from typing import Optional

from pydantic import ConfigDict, Field, field_validator

from .base import Schema


class Category(str, enum.Enum):
    specials = "Specials"
    combos = "Combos"
    burgers = "Burgers"
    pizzas = "Pizzas"
    pancakes = "Pancakes"
    cheesecakes = "Cheesecakes"
    dips = "Dips"


# порядок разделов на витрине
CATEGORY_ORDER = list(Category)


class VegType(str, enum.Enum):
    veg = "Veg"
    non_veg = "Non-Veg"


class MenuItemCreate(Schema):
    name: str
    price: Decimal = Field(Decimal("0"), ge=0)
    category: Category = Category.dips
    veg_type: VegType = VegType.veg
    available: bool = True
    description: str = ""
    image_url: str = ""

    @field_validator("name", "description", "image_url")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()


class MenuItem(MenuItemCreate):
    id: str
    name: str = ""


class MenuItemUpdate(Schema):
    name: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    category: Optional[Category] = None
    veg_type: Optional[VegType] = None
    available: Optional[bool] = None
    description: Optional[str] = None
    image_url: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", "description", "image_url")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value is not None else value


class SeedItem(Schema):
    """Позиция для заливки меню. Без цены только обновляет описание существующей."""

    name: str
    description: str = ""
    price: Optional[Decimal] = Field(None, ge=0)
    category: Category = Category.dips
    veg_type: VegType = VegType.veg
    available: bool = True
    image_url: str = ""
