from decimal import Decimal

import pytest

from elysian_cafe.schemas.order import ItemLine
from elysian_cafe.services.cart import CartAggregator, group_lines


def test_grouped_view_and_total(burger, dip):
    cart = CartAggregator([burger, burger, dip])

    grouped = list(cart.grouped_view())

    assert [(line.id, line.quantity, line.line_total) for line in grouped] == [
        ("a", 2, Decimal("100")),
        ("b", 1, Decimal("30")),
    ]
    assert cart.total() == Decimal("130")
    assert len(cart) == 3


def test_grouped_quantities_sum_to_cart_length(burger, dip):
    cart = CartAggregator([dip, burger, dip, burger, dip])

    grouped = list(cart.grouped_view())

    assert sum(line.quantity for line in grouped) == len(cart)
    assert sum(line.line_total for line in grouped) == cart.total()
    # порядок первого появления
    assert [line.id for line in grouped] == ["b", "a"]


def test_add_snapshots_price(burger):
    cart = CartAggregator()
    cart.add(burger)
    burger.price = Decimal("999")

    assert cart.total() == Decimal("50")


def test_remove_by_index(burger, dip):
    cart = CartAggregator([burger, dip, burger])

    removed = cart.remove_by_index(1)

    assert removed.id == "b"
    assert [item.id for item in cart] == ["a", "a"]
    with pytest.raises(IndexError):
        cart.remove_by_index(5)


def test_remove_by_id_once_removes_single_copy(burger, dip):
    cart = CartAggregator([burger, dip, burger])

    assert cart.remove_by_id_once("a") is True
    assert cart.quantity_of("a") == 1
    assert [item.id for item in cart] == ["b", "a"]
    assert cart.remove_by_id_once("zzz") is False
    assert len(cart) == 2


def test_clear_empties_cart(burger):
    cart = CartAggregator([burger])
    cart.clear()

    assert cart.is_empty
    assert cart.total() == Decimal("0")
    assert list(cart.grouped_view()) == []


def test_group_lines_falls_back_to_name():
    lines = [
        ItemLine(name="Tea", price=10),
        ItemLine(name="Tea", price=12),
        ItemLine(name="Coffee", price=20),
    ]

    grouped = list(group_lines(lines))

    assert [(line.name, line.quantity) for line in grouped] == [("Tea", 2), ("Coffee", 1)]
    # цена строки из первого вхождения, сумма по фактическим ценам
    assert grouped[0].price == Decimal("10")
    assert grouped[0].line_total == Decimal("22")


def test_cart_accepts_mappings():
    cart = CartAggregator([{"id": "x", "name": "Pizza", "price": "120", "category": "Pizzas", "vegType": "Veg"}])

    line = cart.items()[0]
    assert line.price == Decimal("120")
    assert line.category.value == "Pizzas"


def test_line_total_covers_mixed_prices():
    cart = CartAggregator([ItemLine(id="a", price=50), ItemLine(id="a", price=60)])

    (line,) = cart.grouped_view()

    assert line.quantity == 2
    assert line.price == Decimal("50")
    assert line.line_total == Decimal("110")
    assert sum(grouped.line_total for grouped in cart.grouped_view()) == cart.total()


def test_lines_without_id_are_keyed_by_name():
    cart = CartAggregator([ItemLine(name="Tea", price=10), ItemLine(name="Coffee", price=20), ItemLine(name="Tea", price=10)])

    assert cart.quantity_of("Tea") == 2
    assert cart.quantity_of("") == 0
    assert cart.quantity_of("Tea") == next(line.quantity for line in cart.grouped_view() if line.name == "Tea")

    assert cart.remove_by_id_once("Tea") is True
    assert [line.name for line in cart] == ["Coffee", "Tea"]
