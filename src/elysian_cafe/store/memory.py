import asyncio
import copy
from typing import Any, Dict, List, Optional, Tuple

from .base import DocumentStore, Key, Write, apply_writes, group_writes


class MemoryDocumentStore(DocumentStore):
    """Хранилище в памяти процесса. Коммиты сериализуются через asyncio.Lock."""

    def __init__(self, transaction_attempts: int = 5):
        super().__init__(transaction_attempts)
        self._documents: Dict[Key, Tuple[Dict[str, Any], int]] = {}
        self._lock = asyncio.Lock()

    async def _load(self, collection: str, doc_id: str) -> Tuple[Optional[Dict[str, Any]], int]:
        # отдаём управление циклу, как это делал бы сетевой бэкенд
        await asyncio.sleep(0)
        entry = self._documents.get((collection, doc_id))
        if entry is None:
            return None, 0
        data, version = entry
        return copy.deepcopy(data), version

    async def _load_collection(self, collection: str) -> List[Tuple[str, Dict[str, Any]]]:
        return [
            (doc_id, copy.deepcopy(data))
            for (name, doc_id), (data, _) in self._documents.items()
            if name == collection
        ]

    def _version(self, key: Key) -> int:
        entry = self._documents.get(key)
        return entry[1] if entry else 0

    async def _commit(self, reads: Dict[Key, int], writes: List[Write]) -> bool:
        async with self._lock:
            for key, version in reads.items():
                if self._version(key) != version:
                    return False

            staged = {}
            for key, key_writes in group_writes(writes).items():
                entry = self._documents.get(key)
                staged[key] = apply_writes(entry[0] if entry else None, key_writes)

            for key, data in staged.items():
                if data is None:
                    self._documents.pop(key, None)
                else:
                    self._documents[key] = (copy.deepcopy(data), self._version(key) + 1)
        return True
