"""Services package."""

from src.services.storage import (
    CorruptedStorageError,
    DuplicateRecordError,
    GoogleSheetsClient,
    GoogleSheetsKeyValueStorage,
    InMemoryStorage,
    KeyValueStorageInterface,
    LedgerStore,
    LocalFileStorage,
    NotFoundError,
    PersistenceWriteError,
    RecordNotFoundError,
    StorageConnectionError,
    StorageError,
    StoreNotLoadedError,
)

__all__ = [
    "CorruptedStorageError",
    "DuplicateRecordError",
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueStorage",
    "InMemoryStorage",
    "KeyValueStorageInterface",
    "LedgerStore",
    "LocalFileStorage",
    "NotFoundError",
    "PersistenceWriteError",
    "RecordNotFoundError",
    "StorageConnectionError",
    "StorageError",
    "StoreNotLoadedError",
]
