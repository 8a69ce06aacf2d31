import logging
from typing import Optional

from elysian_cafe.schemas.system import ConfigUpdate, SystemConfig
from elysian_cafe.store import DocumentStore, Transaction

logger = logging.getLogger(__name__)

CONFIG = ("system", "config")


async def get_config(store: DocumentStore) -> SystemConfig:
    document = await store.get_document(*CONFIG)
    return SystemConfig.model_validate(document or {})


async def ensure_config(store: DocumentStore) -> SystemConfig:
    """
    Создаёт system/config с acceptingOrders=True, если документа ещё нет.
    """
    async def mutate(transaction: Transaction) -> SystemConfig:
        document = await transaction.get(*CONFIG)
        if document is None:
            transaction.set(*CONFIG, {"acceptingOrders": True})
            return SystemConfig(accepting_orders=True)
        return SystemConfig.model_validate(document)

    return await store.run_transaction(mutate)


async def set_accepting_orders(store: DocumentStore, accepting: Optional[bool] = None) -> SystemConfig:
    """
    Включает/выключает приём заказов. Без значения переключает текущее состояние.
    """
    async def mutate(transaction: Transaction) -> SystemConfig:
        config = SystemConfig.model_validate(await transaction.get(*CONFIG) or {})
        value = (not config.is_open) if accepting is None else accepting
        transaction.set(*CONFIG, {"acceptingOrders": value}, merge=True)
        return config.model_copy(update={"accepting_orders": value})

    config = await store.run_transaction(mutate)
    logger.info(f"Accepting orders: {'ON' if config.is_open else 'OFF'}")
    return config


async def update_config(store: DocumentStore, config_in: ConfigUpdate) -> SystemConfig:
    changes = config_in.to_document(exclude_unset=True)
    if changes:
        await store.set_document(*CONFIG, changes, merge=True)
    return await get_config(store)
