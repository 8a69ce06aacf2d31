from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from elysian_cafe.api.deps import get_store
from elysian_cafe.crud.menu import (
    create_menu_item,
    delete_all_menu_items,
    delete_menu_item,
    get_menu,
    get_menu_item,
    seed_menu,
    toggle_availability,
    update_menu_item,
)
from elysian_cafe.schemas.menu import Category, MenuItem, MenuItemCreate, MenuItemUpdate
from elysian_cafe.store import DocumentStore


router = APIRouter(prefix="/menu", tags=["menu"])


@router.get("/", response_model=List[MenuItem])
async def list_menu(store: DocumentStore = Depends(get_store)):
    """
    Меню витрины: только доступные позиции, по разделам и по цене.
    """
    return await get_menu(store)


@router.get("/all", response_model=List[MenuItem])
async def list_all_menu(
    category: Optional[Category] = Query(None, description="Фильтр по категории"),
    search: Optional[str] = Query(None, description="Поиск по названию"),
    available: Optional[bool] = Query(None, description="True - только доступные, False - только скрытые"),
    store: DocumentStore = Depends(get_store),
):
    """
    Меню для админки, включая скрытые позиции.
    """
    items = await get_menu(store, only_available=False, category=category, search=search)
    if available is not None:
        items = [item for item in items if item.available is available]
    return items


@router.get("/{item_id}", response_model=MenuItem)
async def get_item(item_id: str = Path(..., description="ID позиции"), store: DocumentStore = Depends(get_store)):
    item = await get_menu_item(store, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return item


@router.post("/", response_model=MenuItem, status_code=201)
async def create_item(item_in: MenuItemCreate, store: DocumentStore = Depends(get_store)):
    return await create_menu_item(store, item_in)


@router.patch("/{item_id}", response_model=MenuItem)
async def patch_item(item_id: str, item_in: MenuItemUpdate, store: DocumentStore = Depends(get_store)):
    """
    Частичное обновление позиции меню.
    """
    item = await update_menu_item(store, item_id, item_in)
    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return item


@router.post("/{item_id}/toggle", response_model=MenuItem)
async def toggle_item(item_id: str, store: DocumentStore = Depends(get_store)):
    """
    Скрывает/показывает позицию на витрине без удаления.
    """
    item = await toggle_availability(store, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return item


@router.delete("/")
async def remove_all_items(store: DocumentStore = Depends(get_store)):
    """
    Удаляет всё меню разом (подтверждение на стороне админки).
    """
    return {"deleted": await delete_all_menu_items(store)}


@router.delete("/{item_id}", status_code=204)
async def remove_item(item_id: str, store: DocumentStore = Depends(get_store)):
    deleted = await delete_menu_item(store, item_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Menu item not found")


@router.post("/seed")
async def seed(store: DocumentStore = Depends(get_store)):
    """
    Заливает стандартное меню (добавляет недостающее, обновляет описания).
    """
    return await seed_menu(store)
