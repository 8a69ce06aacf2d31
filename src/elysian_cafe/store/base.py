"""
Документное хранилище: общий контракт и логика, не зависящая от бэкенда.

Документ это обычный dict; при чтении в него добавляется ключ "id".
Транзакции оптимистичные: у каждого документа есть версия, коммит проходит
только если версии всех прочитанных документов не изменились.
"""
import abc
import asyncio
import enum
import inspect
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from pydantic_core import to_jsonable_python

logger = logging.getLogger(__name__)

MAX_IN_VALUES = 10

Key = Tuple[str, str]


class StoreError(Exception):
    """Базовая ошибка хранилища."""
    pass


class DocumentNotFound(StoreError):

    def __init__(self, collection, doc_id):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"Document '{collection}/{doc_id}' not found")


class TransactionAborted(StoreError):
    """Транзакция не смогла закоммититься за отведённое число попыток."""

    def __init__(self, attempts):
        self.attempts = attempts
        super().__init__(f"Transaction aborted after {attempts} attempts")


class _ServerTimestamp:
    def __repr__(self):
        return "SERVER_TIMESTAMP"


# Заменяется временем сервера (UTC) в момент записи
SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass(frozen=True)
class Filter:
    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in ("==", "in"):
            raise ValueError(f"Unsupported filter operator: {self.op}")
        if self.op == "in":
            values = list(self.value)
            if not values or len(values) > MAX_IN_VALUES:
                raise ValueError(f"'in' filter takes 1 to {MAX_IN_VALUES} values")
            object.__setattr__(self, "value", tuple(values))

    def matches(self, document: Dict[str, Any]) -> bool:
        if self.field not in document:
            return False
        if self.op == "==":
            return document[self.field] == self.value
        return document[self.field] in self.value


@dataclass(frozen=True)
class OrderBy:
    field: str
    descending: bool = False


class WriteMode(str, enum.Enum):
    set = "set"
    merge = "merge"
    update = "update"
    delete = "delete"


@dataclass(frozen=True)
class Write:
    collection: str
    doc_id: str
    mode: WriteMode
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> Key:
        return (self.collection, self.doc_id)


def apply_writes(current: Optional[Dict[str, Any]], writes: Iterable[Write]) -> Optional[Dict[str, Any]]:
    """Применяет записи к текущему содержимому документа. None значит документа нет."""
    data = None if current is None else dict(current)
    for write in writes:
        if write.mode is WriteMode.set:
            data = dict(write.fields)
        elif write.mode is WriteMode.merge:
            data = {**(data or {}), **write.fields}
        elif write.mode is WriteMode.update:
            if data is None:
                raise DocumentNotFound(write.collection, write.doc_id)
            data = {**data, **write.fields}
        else:
            data = None
    return data


def group_writes(writes: Iterable[Write]) -> Dict[Key, List[Write]]:
    grouped: Dict[Key, List[Write]] = {}
    for write in writes:
        grouped.setdefault(write.key, []).append(write)
    return grouped


def apply_query(
    documents: Iterable[Dict[str, Any]],
    filters: Sequence[Filter] = (),
    order_by: Optional[OrderBy] = None,
) -> List[Dict[str, Any]]:
    result = [doc for doc in documents if all(f.matches(doc) for f in filters)]
    if order_by is not None:
        # документы без поля сортировки в выборку не попадают
        result = [doc for doc in result if doc.get(order_by.field) is not None]
        result.sort(key=lambda doc: doc[order_by.field], reverse=order_by.descending)
    return result


def server_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def resolve_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Подставляет время сервера и приводит значения к JSON-совместимому виду."""
    now = None
    resolved = {}
    for name, value in fields.items():
        if name == "id":
            continue
        if value is SERVER_TIMESTAMP:
            now = now or server_now()
            value = now
        resolved[name] = value
    return to_jsonable_python(resolved)


def _with_id(doc_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    return {**data, "id": doc_id}


async def _invoke(callback: Callable[..., Any], *args) -> None:
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class Transaction:
    """
    Буфер одной попытки транзакции: все чтения раньше записей,
    записи применяются только при коммите.
    """

    def __init__(self, store: "DocumentStore"):
        self._store = store
        self.reads: Dict[Key, int] = {}
        self.writes: List[Write] = []

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        if self.writes:
            raise StoreError("Transactions must perform all reads before any writes")
        data, version = await self._store._load(collection, doc_id)
        self.reads.setdefault((collection, doc_id), version)
        return None if data is None else _with_id(doc_id, data)

    def set(self, collection: str, doc_id: str, fields: Dict[str, Any], merge: bool = False) -> None:
        mode = WriteMode.merge if merge else WriteMode.set
        self.writes.append(Write(collection, doc_id, mode, resolve_fields(fields)))

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        self.writes.append(Write(collection, doc_id, WriteMode.update, resolve_fields(fields)))

    def delete(self, collection: str, doc_id: str) -> None:
        self.writes.append(Write(collection, doc_id, WriteMode.delete))

    def add(self, collection: str, fields: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        # ожидаемая версия 0: документа с таким id не должно быть на момент коммита
        self.reads[(collection, doc_id)] = 0
        self.set(collection, doc_id, fields)
        return doc_id


@dataclass
class _Subscription:
    collection: str
    on_change: Callable[[Any], Any]
    on_error: Optional[Callable[[Exception], Any]] = None
    doc_id: Optional[str] = None
    filters: Tuple[Filter, ...] = ()
    order_by: Optional[OrderBy] = None
    active: bool = True
    # есть изменения, которые подписчик ещё не видел
    dirty: bool = False
    task: Optional[asyncio.Task] = None


class DocumentStore(abc.ABC):
    """
    Контракт хранилища. Наследники реализуют только чтение сырых документов
    с версиями и атомарный коммит набора записей.
    """

    def __init__(self, transaction_attempts: int = 5):
        self.transaction_attempts = transaction_attempts
        self._subscriptions: List[_Subscription] = []
        self._deliveries: Set[asyncio.Task] = set()

    @abc.abstractmethod
    async def _load(self, collection: str, doc_id: str) -> Tuple[Optional[Dict[str, Any]], int]:
        """Возвращает (данные, версия); для отсутствующего документа (None, 0)."""

    @abc.abstractmethod
    async def _load_collection(self, collection: str) -> List[Tuple[str, Dict[str, Any]]]:
        ...

    @abc.abstractmethod
    async def _commit(self, reads: Dict[Key, int], writes: List[Write]) -> bool:
        """Атомарно применяет записи. False, если прочитанные версии устарели."""

    async def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        data, _ = await self._load(collection, doc_id)
        return None if data is None else _with_id(doc_id, data)

    async def set_document(self, collection: str, doc_id: str, fields: Dict[str, Any], merge: bool = False) -> None:
        mode = WriteMode.merge if merge else WriteMode.set
        await self._write([Write(collection, doc_id, mode, resolve_fields(fields))])

    async def add_document(self, collection: str, fields: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        # версия 0 в чтениях: документ с таким id не должен существовать
        await self._write(
            [Write(collection, doc_id, WriteMode.set, resolve_fields(fields))],
            reads={(collection, doc_id): 0},
        )
        return doc_id

    async def update_document(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        await self._write([Write(collection, doc_id, WriteMode.update, resolve_fields(fields))])

    async def delete_document(self, collection: str, doc_id: str) -> None:
        await self._write([Write(collection, doc_id, WriteMode.delete)])

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
    ) -> List[Dict[str, Any]]:
        documents = [_with_id(doc_id, data) for doc_id, data in await self._load_collection(collection)]
        return apply_query(documents, filters, order_by)

    async def run_transaction(self, mutator: Callable[[Transaction], Awaitable[Any]]) -> Any:
        """
        Выполняет mutator(transaction) и коммитит его записи.
        При конфликте версий mutator перезапускается.
        Исключения из mutator пробрасываются без повторов.
        """
        for attempt in range(1, self.transaction_attempts + 1):
            transaction = Transaction(self)
            result = await mutator(transaction)
            if await self._commit(transaction.reads, transaction.writes):
                self._notify({write.collection for write in transaction.writes})
                return result
            logger.debug(f"Transaction conflict, attempt {attempt}/{self.transaction_attempts}")
        raise TransactionAborted(self.transaction_attempts)

    async def _write(self, writes: List[Write], reads: Optional[Dict[Key, int]] = None) -> None:
        for attempt in range(1, self.transaction_attempts + 1):
            if await self._commit(reads or {}, writes):
                self._notify({write.collection for write in writes})
                return
            logger.debug(f"Write conflict, attempt {attempt}/{self.transaction_attempts}")
        raise TransactionAborted(self.transaction_attempts)

    async def subscribe(
        self,
        collection: str,
        on_change: Callable[[Any], Any],
        on_error: Optional[Callable[[Exception], Any]] = None,
        doc_id: Optional[str] = None,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
    ) -> Callable[[], None]:
        """
        Подписка на коллекцию (или один документ при doc_id).
        Текущий снимок доставляется сразу, затем после каждой записи в коллекцию.
        Возвращает функцию отписки.
        """
        subscription = _Subscription(
            collection=collection,
            on_change=on_change,
            on_error=on_error,
            doc_id=doc_id,
            filters=tuple(filters),
            order_by=order_by,
        )
        self._subscriptions.append(subscription)

        def unsubscribe() -> None:
            subscription.active = False
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

        await self._deliver(subscription)
        return unsubscribe

    def _notify(self, collections: Iterable[str]) -> None:
        """
        Планирует доставку снимков и сразу возвращает управление записи.
        На подписку работает не больше одной задачи: изменения, пришедшие
        во время доставки, сливаются в один следующий снимок.
        """
        collections = set(collections)
        for subscription in list(self._subscriptions):
            if subscription.active and subscription.collection in collections:
                subscription.dirty = True
                if subscription.task is None or subscription.task.done():
                    subscription.task = asyncio.create_task(self._deliver_pending(subscription))
                    self._deliveries.add(subscription.task)
                    subscription.task.add_done_callback(self._deliveries.discard)

    async def _deliver_pending(self, subscription: _Subscription) -> None:
        while subscription.dirty and subscription.active:
            subscription.dirty = False
            await self._deliver(subscription)

    async def wait_for_deliveries(self) -> None:
        """Ждёт, пока все запланированные снимки дойдут до подписчиков."""
        while self._deliveries:
            await asyncio.gather(*list(self._deliveries))

    async def _deliver(self, subscription: _Subscription) -> None:
        try:
            if subscription.doc_id is not None:
                snapshot = await self.get_document(subscription.collection, subscription.doc_id)
            else:
                snapshot = await self.query(subscription.collection, subscription.filters, subscription.order_by)
            await _invoke(subscription.on_change, snapshot)
        except Exception as exc:
            # ошибки подписчика не доходят до записи, которая его разбудила
            if subscription.on_error is None:
                logger.exception(f"Subscription on '{subscription.collection}' failed")
            else:
                await _invoke(subscription.on_error, exc)
