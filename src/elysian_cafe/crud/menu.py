import logging
from typing import Dict, Iterable, List, Optional

from elysian_cafe.schemas.menu import (
    CATEGORY_ORDER,
    Category,
    MenuItem,
    MenuItemCreate,
    MenuItemUpdate,
    SeedItem,
)
from elysian_cafe.seed_data import DEFAULT_MENU
from elysian_cafe.store import DocumentStore, Filter, Transaction

logger = logging.getLogger(__name__)

MENU = "menu"


def sort_for_storefront(items: Iterable[MenuItem]) -> List[MenuItem]:
    """Сортировка как на витрине: по порядку разделов, внутри раздела по цене."""
    rank = {category: index for index, category in enumerate(CATEGORY_ORDER)}
    return sorted(items, key=lambda item: (rank[item.category], item.price))


def group_by_category(items: Iterable[MenuItem]) -> Dict[Category, List[MenuItem]]:
    grouped = {category: [] for category in CATEGORY_ORDER}
    for item in sort_for_storefront(items):
        grouped[item.category].append(item)
    return grouped


async def get_menu(
    store: DocumentStore,
    only_available: bool = True,
    category: Optional[Category] = None,
    search: Optional[str] = None,
) -> List[MenuItem]:
    """
    Возвращает позиции меню.
    По умолчанию только доступные (available != False), как на витрине.
    Админка передаёт only_available=False и может фильтровать по категории и подстроке названия.
    """
    filters = []
    if category:
        filters.append(Filter("category", "==", Category(category).value))

    documents = await store.query(MENU, filters)
    items = [MenuItem.model_validate(document) for document in documents]

    if only_available:
        items = [item for item in items if item.available is not False]
    if search:
        needle = search.lower()
        items = [item for item in items if needle in item.name.lower()]
    return sort_for_storefront(items)


async def get_menu_item(store: DocumentStore, item_id: str) -> Optional[MenuItem]:
    document = await store.get_document(MENU, item_id)
    if document is None:
        return None
    return MenuItem.model_validate(document)


async def create_menu_item(store: DocumentStore, item_in: MenuItemCreate) -> MenuItem:
    item_id = await store.add_document(MENU, item_in.to_document())
    logger.info(f"Menu item added: {item_in.name} ({item_id})")
    return MenuItem(id=item_id, **item_in.model_dump())


async def update_menu_item(store: DocumentStore, item_id: str, item_in: MenuItemUpdate) -> Optional[MenuItem]:
    """
    Частичное обновление позиции. Уже оформленные заказы не затрагиваются:
    в них лежат копии позиций.
    """
    if await store.get_document(MENU, item_id) is None:
        return None
    changes = item_in.to_document(exclude_unset=True)
    if changes:
        await store.update_document(MENU, item_id, changes)
    return await get_menu_item(store, item_id)


async def toggle_availability(store: DocumentStore, item_id: str) -> Optional[MenuItem]:
    item = await get_menu_item(store, item_id)
    if item is None:
        return None
    await store.update_document(MENU, item_id, {"available": not item.available})
    return item.model_copy(update={"available": not item.available})


async def delete_menu_item(store: DocumentStore, item_id: str) -> bool:
    """
    Удаляет позицию.
    """
    if await store.get_document(MENU, item_id) is None:
        return False
    await store.delete_document(MENU, item_id)
    return True


async def delete_all_menu_items(store: DocumentStore) -> int:
    """
    Удаляет всё меню одной транзакцией. Возвращает количество удалённых позиций.
    """
    item_ids = [document["id"] for document in await store.query(MENU)]

    async def mutate(transaction: Transaction) -> int:
        for item_id in item_ids:
            transaction.delete(MENU, item_id)
        return len(item_ids)

    deleted = await store.run_transaction(mutate)
    logger.info(f"Menu cleared: {deleted} items deleted")
    return deleted


async def seed_menu(store: DocumentStore, items: Iterable[SeedItem] = DEFAULT_MENU) -> dict:
    """
    Заливка меню по названию, одной транзакцией (всё или ничего):
    - позиции с ценой, которых нет, добавляются;
    - у существующих обновляется только описание.
    """
    items = list(items)
    existing = {document.get("name"): document["id"] for document in await store.query(MENU)}

    async def mutate(transaction: Transaction) -> dict:
        added = updated = 0
        for item in items:
            item_id = existing.get(item.name)
            if item_id is None:
                if item.price is None:
                    continue
                transaction.add(MENU, item.to_document())
                added += 1
            else:
                transaction.update(MENU, item_id, {"description": item.description})
                updated += 1
        return {"added": added, "updated": updated}

    result = await store.run_transaction(mutate)
    logger.info(f"Menu seeded: {result['added']} added, {result['updated']} updated")
    return result
