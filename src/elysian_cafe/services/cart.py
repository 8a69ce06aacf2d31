"""
Корзина: упорядоченный список копий позиций меню, дубли разрешены.

Группировка и сумма всегда пересчитываются из списка, отдельного
состояния количеств нет.
"""
from decimal import Decimal
from typing import Dict, Iterable, Iterator, List, Mapping, Union

from ..schemas.menu import MenuItem
from ..schemas.order import GroupedLine, ItemLine

CartInput = Union[ItemLine, MenuItem, Mapping]


def snapshot(item: CartInput) -> ItemLine:
    """Денормализованная копия позиции: цена и название фиксируются в момент добавления."""
    if isinstance(item, ItemLine):
        return item.model_copy()
    if isinstance(item, MenuItem):
        return ItemLine(
            id=item.id,
            name=item.name,
            price=item.price,
            category=item.category,
            veg_type=item.veg_type,
        )
    return ItemLine.model_validate(dict(item))


def group_key(line: ItemLine) -> str:
    return line.id or line.name


def group_lines(lines: Iterable[ItemLine]) -> Iterator[GroupedLine]:
    """
    Одна строка на каждый id (или name, если id пуст) в порядке первого появления.
    Цена строки берётся из первого вхождения, line_total суммирует фактические цены.
    """
    groups: Dict[str, List[ItemLine]] = {}
    for line in lines:
        groups.setdefault(group_key(line), []).append(line)

    for members in groups.values():
        first = members[0]
        yield GroupedLine(
            **first.model_dump(),
            quantity=len(members),
            line_total=sum((member.price for member in members), Decimal("0")),
        )


class CartAggregator:

    def __init__(self, items: Iterable[CartInput] = ()):
        self._items: List[ItemLine] = [snapshot(item) for item in items]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ItemLine]:
        return iter(list(self._items))

    @property
    def is_empty(self) -> bool:
        return not self._items

    def items(self) -> List[ItemLine]:
        return [item.model_copy() for item in self._items]

    def add(self, item: CartInput) -> ItemLine:
        line = snapshot(item)
        self._items.append(line)
        return line

    def remove_by_index(self, index: int) -> ItemLine:
        if not 0 <= index < len(self._items):
            raise IndexError(f"Cart has no item at position {index}")
        return self._items.pop(index)

    def remove_by_id_once(self, item_id: str) -> bool:
        """Убирает одну копию; ключ тот же, что в grouped_view (id, а без id название)."""
        for index, item in enumerate(self._items):
            if group_key(item) == item_id:
                del self._items[index]
                return True
        return False

    def quantity_of(self, item_id: str) -> int:
        return sum(1 for item in self._items if group_key(item) == item_id)

    def grouped_view(self) -> Iterator[GroupedLine]:
        """
        Строки с количеством. price у строки из первого вхождения, поэтому сумму
        строки брать из line_total, а не quantity * price: копии одной позиции
        могли попасть в корзину по разным ценам.
        """
        return group_lines(self._items)

    def total(self) -> Decimal:
        return sum((item.price for item in self._items), Decimal("0"))

    def to_item_lines(self) -> List[ItemLine]:
        return self.items()

    def clear(self) -> None:
        self._items.clear()
