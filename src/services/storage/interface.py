"""
Abstract Storage Interface

DESIGN DECISION: The ledger lives under a single key of a key-value store.
An abstract interface for that store allows us to:
1. Keep a local JSON file as the default backend
2. Use in-memory storage for testing
3. Put the ledger in a Google Sheet the owners can open directly
4. Keep ledger logic decoupled from where the bytes end up

The interface is intentionally tiny: read, write and remove one value.
A write replaces the whole value in one step, so a reader never sees a
half-written ledger.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for durable key-value storage.

    Any backend (local file, Google Sheets, ...) must implement these
    methods.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The stored text, or None if the key is absent

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """
        Replace the value stored under a key.

        Raises:
            StorageError: If the write fails (quota, permissions, network)
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> bool:
        """
        Delete a key.

        Returns:
            True if the key existed
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class RecordNotFoundError(NotFoundError):
    """No month record with the given id in the ledger."""
    pass


class DuplicateRecordError(StorageError):
    """Two month records share the same id."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


class CorruptedStorageError(StorageError):
    """
    The stored ledger exists but is not a valid ledger.

    Session-fatal: the caller must offer retry or wipe-and-restart, and
    nothing may silently overwrite the stored value.
    """
    pass


class PersistenceWriteError(StorageError):
    """
    Writing the ledger failed.

    Non-fatal: the in-memory ledger stays authoritative and the next
    mutation writes it again.
    """
    pass


class StoreNotLoadedError(StorageError):
    """save() called before a successful load()."""
    pass
