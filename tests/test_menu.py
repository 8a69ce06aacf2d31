from decimal import Decimal

import pytest

from elysian_cafe.crud.menu import MENU, delete_all_menu_items, get_menu, seed_menu
from elysian_cafe.schemas.menu import SeedItem
from elysian_cafe.seed_data import DEFAULT_MENU
from elysian_cafe.store import DocumentNotFound, MemoryDocumentStore


class CountingStore(MemoryDocumentStore):
    commits = 0

    async def _commit(self, reads, writes):
        self.commits += 1
        return await super()._commit(reads, writes)


async def test_seed_commits_once():
    store = CountingStore()

    result = await seed_menu(store)

    assert result == {"added": len(DEFAULT_MENU), "updated": 0}
    assert store.commits == 1
    assert len(await get_menu(store)) == len(DEFAULT_MENU)


async def test_seed_updates_description_only(memory_store):
    await memory_store.add_document(MENU, {"name": "Tea", "price": "10", "description": "old"})

    result = await seed_menu(memory_store, [SeedItem(name="Tea", description="hot", price=Decimal("99"))])

    (tea,) = await memory_store.query(MENU)
    assert result == {"added": 0, "updated": 1}
    assert tea["description"] == "hot"
    assert tea["price"] == "10"


async def test_seed_is_all_or_nothing(memory_store):
    tea_id = await memory_store.add_document(MENU, {"name": "Tea", "price": "10"})
    query = memory_store.query

    async def query_then_delete(collection, filters=(), order_by=None):
        documents = await query(collection, filters, order_by)
        # позицию удалили в админке, пока шла заливка
        await memory_store.delete_document(MENU, tea_id)
        return documents

    memory_store.query = query_then_delete
    with pytest.raises(DocumentNotFound):
        await seed_menu(memory_store, [SeedItem(name="Tea", description="hot"), SeedItem(name="Coffee", price=20)])
    memory_store.query = query

    assert await memory_store.query(MENU) == []


async def test_delete_all_menu_items(store):
    await seed_menu(store)

    assert await delete_all_menu_items(store) == len(DEFAULT_MENU)
    assert await store.query(MENU) == []
    assert await delete_all_menu_items(store) == 0
