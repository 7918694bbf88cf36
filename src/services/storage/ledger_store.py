"""
Ledger Persistence Store

The store is the system of record for the ledger. It reads the ledger
once at startup and writes the whole ledger after every mutation.

GUARANTEES:
- load() never guesses: an unreadable ledger raises CorruptedStorageError
  instead of returning a partial or empty one
- save() serializes everything before touching the backend, then performs
  a single write, so a later load() sees the old ledger or the new one
- save() is refused until load() succeeded, so a corrupted value is never
  overwritten except through an explicit reset()
"""

import json
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError

from src.models.ledger import STORED_CONTEXT, Ledger, LedgerAdapter, duplicate_ids
from src.observability import LedgerEventLogger
from src.services.storage.interface import (
    CorruptedStorageError,
    DuplicateRecordError,
    KeyValueStorageInterface,
    PersistenceWriteError,
    StorageError,
    StoreNotLoadedError,
)


DEFAULT_STORAGE_KEY = "flat_money_data"


def serialize_ledger(ledger: Ledger) -> str:
    """Ledger as the JSON array text stored on disk and in backups."""
    return json.dumps(
        [record.to_storage_dict() for record in ledger],
        ensure_ascii=False,
    )


def parse_ledger_data(data: Any) -> Ledger:
    """
    Validate decoded JSON as a ledger.

    Raises:
        ValueError: Not a list, an element is not a month record, or
                    two records share an id. The message says which.
    """
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of month records, got {type(data).__name__}")
    try:
        ledger = LedgerAdapter.validate_python(data, context=STORED_CONTEXT)
    except ValidationError as e:
        raise ValueError(f"Invalid month record: {e}")
    duplicates = duplicate_ids(ledger)
    if duplicates:
        raise ValueError(f"Duplicate record ids: {', '.join(duplicates)}")
    return ledger


class LedgerStore:
    """
    Loads and saves the ledger under one key of a key-value backend.
    """

    def __init__(
        self,
        backend: KeyValueStorageInterface,
        key: str = DEFAULT_STORAGE_KEY,
        event_logger: Optional[LedgerEventLogger] = None,
    ):
        self._backend = backend
        self._key = key
        self._events = event_logger or LedgerEventLogger()
        self._loaded = False
        self.last_saved_at: Optional[datetime] = None

    @property
    def key(self) -> str:
        return self._key

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def load(self) -> Ledger:
        """
        Read the ledger from the backend.

        Returns:
            The stored ledger, or an empty one if nothing is stored

        Raises:
            CorruptedStorageError: The stored value is not a valid ledger
            StorageError: The backend could not be read at all
        """
        self._loaded = False
        try:
            raw = self._backend.read(self._key)
        except CorruptedStorageError as e:
            self._events.log_storage_corrupted(str(e), self._key)
            raise

        if raw is None:
            self._loaded = True
            self._events.log_ledger_loaded(0, self._key)
            return []

        try:
            ledger = parse_ledger_data(json.loads(raw))
        except ValueError as e:
            # json.JSONDecodeError is a ValueError too
            self._events.log_storage_corrupted(str(e), self._key)
            raise CorruptedStorageError(
                f"Stored ledger under {self._key!r} is corrupted: {e}"
            ) from e

        self._loaded = True
        self._events.log_ledger_loaded(len(ledger), self._key)
        return ledger

    def save(self, ledger: Ledger) -> datetime:
        """
        Write the whole ledger.

        Returns:
            The time of this successful save

        Raises:
            StoreNotLoadedError: load() has not succeeded yet
            DuplicateRecordError: Two records share an id
            PersistenceWriteError: The backend write failed
        """
        if not self._loaded:
            raise StoreNotLoadedError("Ledger must be loaded before it can be saved")

        duplicates = duplicate_ids(ledger)
        if duplicates:
            raise DuplicateRecordError(f"Duplicate record ids: {', '.join(duplicates)}")

        payload = serialize_ledger(ledger)
        try:
            self._backend.write(self._key, payload)
        except StorageError as e:
            self._events.log_save_failed(str(e), len(ledger))
            raise PersistenceWriteError(f"Failed to save ledger: {e}") from e

        self.last_saved_at = datetime.now(timezone.utc)
        self._events.log_ledger_saved(len(ledger), self._key)
        return self.last_saved_at

    def reset(self) -> None:
        """
        Irreversibly delete the stored ledger.

        A fresh load() is required before the next save().
        """
        self._backend.remove(self._key)
        self._loaded = False
        self.last_saved_at = None
        self._events.log_storage_reset(self._key)
