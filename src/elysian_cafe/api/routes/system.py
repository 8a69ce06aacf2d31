from fastapi import APIRouter, Depends

from elysian_cafe.api.deps import get_sequencer, get_store
from elysian_cafe.crud.system import ensure_config, set_accepting_orders, update_config
from elysian_cafe.schemas.system import (
    AcceptingOrdersUpdate,
    ConfigUpdate,
    CounterReset,
    OrderCounter,
    SystemConfig,
)
from elysian_cafe.services.sequencer import OrderSequencer
from elysian_cafe.store import DocumentStore


router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config", response_model=SystemConfig)
async def read_config(store: DocumentStore = Depends(get_store)):
    """
    Текущая конфигурация. Если документа нет, он создаётся с acceptingOrders=True.
    """
    return await ensure_config(store)


@router.post("/config/accepting", response_model=SystemConfig)
async def accepting_orders(update: AcceptingOrdersUpdate, store: DocumentStore = Depends(get_store)):
    """
    Вкл/выкл приём заказов. Пустое тело переключает текущее состояние.
    """
    return await set_accepting_orders(store, update.accepting_orders)


@router.put("/config", response_model=SystemConfig)
async def put_config(config_in: ConfigUpdate, store: DocumentStore = Depends(get_store)):
    return await update_config(store, config_in)


@router.get("/counter", response_model=OrderCounter)
async def read_counter(sequencer: OrderSequencer = Depends(get_sequencer)):
    return OrderCounter(order_number=await sequencer.peek())


@router.post("/counter/reset", response_model=OrderCounter)
async def reset_counter(reset: CounterReset, sequencer: OrderSequencer = Depends(get_sequencer)):
    """
    Сбрасывает нумерацию (например, на новый день). Следующий заказ получит order_number + 1.
    """
    await sequencer.reset(reset.order_number)
    return OrderCounter(order_number=reset.order_number)
