import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from elysian_cafe.api import health
from elysian_cafe.api.routes.live import router as live_router
from elysian_cafe.api.routes.menu import router as menu_router
from elysian_cafe.api.routes.orders import router as orders_router
from elysian_cafe.api.routes.stats import router as stats_router
from elysian_cafe.api.routes.system import router as system_router
from elysian_cafe.config import settings
from elysian_cafe.db.deps import build_store
from elysian_cafe.services.lifecycle import OrderLifecycle
from elysian_cafe.services.sequencer import OrderSequencer
from elysian_cafe.store import DocumentStore, SqlDocumentStore

logger = logging.getLogger(__name__)


def create_app(store: Optional[DocumentStore] = None) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.basicConfig(level=settings.LOG_LEVEL)
        app.state.store = store if store is not None else await build_store()
        app.state.sequencer = OrderSequencer(app.state.store)
        app.state.lifecycle = OrderLifecycle(
            app.state.store,
            app.state.sequencer,
            payee_name=settings.UPI_PAYEE_NAME,
            currency=settings.CURRENCY,
        )
        logger.info(f"Application started ({type(app.state.store).__name__})")
        yield
        await app.state.store.wait_for_deliveries()
        if isinstance(app.state.store, SqlDocumentStore):
            await app.state.store.engine.dispose()
        logger.info("Application stopped")

    app = FastAPI(title="Elysian Cafe", lifespan=lifespan)

    # Подключаем роуты
    app.include_router(health.router)
    app.include_router(menu_router)
    app.include_router(orders_router)
    app.include_router(system_router)
    app.include_router(stats_router)
    app.include_router(live_router)
    return app


app = create_app()
