"""
Storage Services Package

Provides the key-value storage interface, its backends, and the ledger
store built on top of them. The default backend is a local JSON file;
Google Sheets and in-memory backends are swappable.
"""

from src.services.storage.interface import (
    CorruptedStorageError,
    DuplicateRecordError,
    KeyValueStorageInterface,
    NotFoundError,
    PersistenceWriteError,
    RecordNotFoundError,
    StorageConnectionError,
    StorageError,
    StoreNotLoadedError,
)
from src.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueStorage,
)
from src.services.storage.local_file import LocalFileStorage
from src.services.storage.memory import InMemoryStorage
from src.services.storage.ledger_store import (
    DEFAULT_STORAGE_KEY,
    LedgerStore,
    parse_ledger_data,
    serialize_ledger,
)

__all__ = [
    # Interface
    "KeyValueStorageInterface",
    # Exceptions
    "CorruptedStorageError",
    "DuplicateRecordError",
    "NotFoundError",
    "PersistenceWriteError",
    "RecordNotFoundError",
    "StorageConnectionError",
    "StorageError",
    "StoreNotLoadedError",
    # Backends
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueStorage",
    "InMemoryStorage",
    "LocalFileStorage",
    # Ledger store
    "DEFAULT_STORAGE_KEY",
    "LedgerStore",
    "parse_ledger_data",
    "serialize_ledger",
]
