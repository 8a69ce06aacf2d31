"""
Живые обновления по WebSocket: очередь заказов для бариста и флаг приёма заказов.

Каждое сообщение - полный снимок, а не дифф.
"""
import asyncio
import logging
from typing import Any, Callable

from fastapi import APIRouter, Depends, WebSocket

from elysian_cafe.api.deps import get_store
from elysian_cafe.crud.order import ORDERS
from elysian_cafe.schemas.order import OrderRead
from elysian_cafe.schemas.system import SystemConfig
from elysian_cafe.services.lifecycle import CONFIG
from elysian_cafe.store import DocumentStore, OrderBy

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/live", tags=["live"])


def render_orders(documents) -> list:
    return [OrderRead.from_document(document).model_dump(mode="json", by_alias=True) for document in documents]


def render_config(document) -> dict:
    config = SystemConfig.model_validate(document or {})
    return {**config.to_document(), "isOpen": config.is_open}


async def _wait_disconnect(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def _stream(websocket: WebSocket, store: DocumentStore, collection: str, render: Callable[[Any], Any], **options):
    await websocket.accept()
    snapshots: asyncio.Queue = asyncio.Queue()

    def on_error(exc: Exception) -> None:
        logger.warning(f"Live feed '{collection}' failed: {exc}")

    unsubscribe = await store.subscribe(collection, snapshots.put_nowait, on_error=on_error, **options)
    disconnected = asyncio.create_task(_wait_disconnect(websocket))
    try:
        while True:
            next_snapshot = asyncio.create_task(snapshots.get())
            done, _ = await asyncio.wait({next_snapshot, disconnected}, return_when=asyncio.FIRST_COMPLETED)
            if disconnected in done:
                next_snapshot.cancel()
                break
            await websocket.send_json(render(next_snapshot.result()))
    finally:
        unsubscribe()
        disconnected.cancel()


@router.websocket("/orders")
async def live_orders(websocket: WebSocket, store: DocumentStore = Depends(get_store)):
    """
    Все заказы, новые первыми. Новый снимок после каждой записи в orders.
    """
    await _stream(websocket, store, ORDERS, render_orders, order_by=OrderBy("timestamp", descending=True))


@router.websocket("/config")
async def live_config(websocket: WebSocket, store: DocumentStore = Depends(get_store)):
    collection, doc_id = CONFIG
    await _stream(websocket, store, collection, render_config, doc_id=doc_id)
