from .base import (
    SERVER_TIMESTAMP,
    DocumentNotFound,
    DocumentStore,
    Filter,
    OrderBy,
    StoreError,
    Transaction,
    TransactionAborted,
)
from .memory import MemoryDocumentStore
from .sql import SqlDocumentStore

__all__ = [
    "SERVER_TIMESTAMP",
    "DocumentNotFound",
    "DocumentStore",
    "Filter",
    "OrderBy",
    "StoreError",
    "Transaction",
    "TransactionAborted",
    "MemoryDocumentStore",
    "SqlDocumentStore",
]
