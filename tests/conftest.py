import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from elysian_cafe.schemas.menu import Category, MenuItem, VegType
from elysian_cafe.store import MemoryDocumentStore, SqlDocumentStore


@pytest.fixture()
def memory_store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture()
async def sql_store(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    store = SqlDocumentStore(engine)
    await store.create_schema()
    try:
        yield store
    finally:
        await engine.dispose()


@pytest.fixture(params=["memory", "sql"])
async def store(request, tmp_path):
    if request.param == "memory":
        yield MemoryDocumentStore()
        return
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    sql = SqlDocumentStore(engine)
    await sql.create_schema()
    try:
        yield sql
    finally:
        await engine.dispose()


@pytest.fixture()
def burger() -> MenuItem:
    return MenuItem(id="a", name="Veg Burger", price=50, category=Category.burgers, veg_type=VegType.veg)


@pytest.fixture()
def dip() -> MenuItem:
    return MenuItem(id="b", name="Strawberry Dip", price=30, category=Category.dips, veg_type=VegType.veg)
