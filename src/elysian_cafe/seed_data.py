from decimal import Decimal

from elysian_cafe.schemas.menu import Category, SeedItem, VegType

V, NV = VegType.veg, VegType.non_veg


def _item(name, price, category, veg_type, description):
    return SeedItem(
        name=name,
        price=Decimal(price),
        category=category,
        veg_type=veg_type,
        description=description,
    )


DEFAULT_MENU = [
    _item("Strawberry Dip", 79, Category.dips, V, "Fresh strawberries paired with a rich chocolate dip."),
    _item("Strawberry Thangulu", 69, Category.dips, V, "Crunchy candied strawberries on a stick."),
    _item("Marshmallow Dip", 89, Category.dips, V, "Fluffy marshmallows with a side of warm chocolate sauce."),
    _item("Marshmallow Toasted (5pcs)", 79, Category.dips, V, "Perfectly toasted golden-brown marshmallows."),
    _item("Biscuit Marshmallow (5pcs)", 69, Category.dips, V, "Marshmallows sandwiched between crispy biscuits."),
    _item("Pancakes (Plain)", 39, Category.pancakes, V, "Fluffy, golden pancakes served with butter."),
    _item("Pancakes + Honey", 49, Category.pancakes, V, "Classic pancakes drizzled with pure honey."),
    _item("Pancakes + Honey & Fruits", 59, Category.pancakes, V, "Pancakes topped with honey and fresh seasonal fruits."),
    _item("Pancakes + Nutella", 79, Category.pancakes, V, "Indulgent pancakes smothered in Nutella."),
    _item("Veg Burger", 79, Category.burgers, V, "Classic vegetable patty burger with fresh lettuce and mayo."),
    _item("Burger Cheese Veg", 89, Category.burgers, V, "Veg burger loaded with a slice of melting cheese."),
    _item("Burger Non-Veg", 99, Category.burgers, NV, "Juicy chicken patty burger with special sauce."),
    _item("Burger Cheese Non-Veg", 109, Category.burgers, NV, "Chicken burger topped with premium cheese."),
    _item("Mini Pizzas Veg", 59, Category.pizzas, V, "Bite-sized pizzas with fresh veggie toppings."),
    _item("Mini Pizzas Non-Veg", 69, Category.pizzas, NV, "Mini pizzas topped with savory chicken chunks."),
    _item("Pancakes + Strawberry Dip", 99, Category.combos, V, "Fluffy pancakes served with our signature strawberry dip."),
    _item("Marshmallows Dip + Nutella Pancake", 129, Category.combos, V, "The ultimate sweet combo of dips and pancakes."),
    _item("Burger + Mini Pizza (Veg)", 119, Category.combos, V, "A satisfying combo of a veg burger and mini pizza."),
    _item("Burger + Mini Pizza (Non-Veg)", 139, Category.combos, NV, "A hearty meal with a chicken burger and mini pizza."),
    _item("Biscoff Cheesecake", 149, Category.cheesecakes, V, "Rich and creamy Biscoff cheesecake."),
    _item("Blueberry Cheesecake", 139, Category.cheesecakes, V, "Classic cheesecake with blueberry topping."),
    _item("Chocolate Cheesecake", 139, Category.cheesecakes, V, "Decadent chocolate cheesecake."),
    _item("Chocopops", 99, Category.specials, V, "Delicious bite-sized chocolate pops."),
]
