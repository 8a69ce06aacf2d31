from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from elysian_cafe.api.deps import get_store
from elysian_cafe.store import DocumentStore

router = APIRouter()


@router.get("/health", summary="Health check")
async def health_check(store: DocumentStore = Depends(get_store)):
    """
    Health-check: приложение живо и хранилище отвечает на чтение.
    """
    await store.get_document("system", "config")
    return {
        "status": "ok",
        "store": type(store).__name__,
        "timestamp": datetime.now(timezone.utc),
    }
