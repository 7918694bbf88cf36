"""
Main Orchestrator for FlatMoney

This module ties together all the components and owns the ledger for
the lifetime of the app:
1. Startup (load → READY, or ERROR when the stored ledger is corrupted)
2. Month editing (draft → validate → replace in ledger → save)
3. Delete / reset / import (confirm → mutate → save)
4. Insight (record → summary → payload → cancellable AI request)

DESIGN DECISION: The session enforces the boundaries:
- The ledger is only changed through this class, and every change is saved
- Destructive actions need the injected confirmation callback to say yes
- A corrupted stored ledger stops the session instead of being overwritten
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional, Union

from src.agents import InsightAgent, InsightPayload, InsightRequest
from src.config import get_settings
from src.currency import CurrencyMaskCodec
from src.models.ledger import Ledger, MonthRecord, chronological
from src.observability import LedgerEventLogger, configure_logging, get_logger
from src.services.storage import (
    GoogleSheetsKeyValueStorage,
    InMemoryStorage,
    KeyValueStorageInterface,
    LedgerStore,
    LocalFileStorage,
    PersistenceWriteError,
    RecordNotFoundError,
    StorageError,
)
from src.summary import DerivedSummary, LedgerTotals, summarize, summarize_ledger
from src.sync import (
    ImportPolicy,
    ImportResolver,
    ImportResult,
    ImportValidationError,
    decode_import_payload,
    export_ledger,
)
from src.validation import MonthRecordDraft, MonthRecordValidator, RecordValidationError


logger = get_logger(__name__)


class AppState(str, Enum):
    """Top-level state of the session."""
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class SessionNotReadyError(Exception):
    """A ledger operation was attempted while the session is not READY."""
    pass


ConfirmCallback = Callable[[str], bool]


def _deny_all(description: str) -> bool:
    return False


class LedgerSession:
    """
    Owns the in-memory ledger and routes every mutation through the store.

    Flow for any mutation:
    1. Check the session is READY
    2. Confirm (delete, reset, import over a non-empty ledger)
    3. Replace the ledger value
    4. Save; a failed save is logged and retried on the next mutation

    Human confirmation (step 2) is MANDATORY for destructive actions.
    Without a confirmation callback they are always declined.
    """

    def __init__(
        self,
        store: LedgerStore,
        validator: Optional[MonthRecordValidator] = None,
        resolver: Optional[ImportResolver] = None,
        insight_agent: Optional[InsightAgent] = None,
        codec: Optional[CurrencyMaskCodec] = None,
        event_logger: Optional[LedgerEventLogger] = None,
        confirm_destructive_action: Optional[ConfirmCallback] = None,
    ):
        self._store = store
        self._validator = validator or MonthRecordValidator()
        self._resolver = resolver or ImportResolver()
        self._insight_agent = insight_agent
        self._codec = codec or CurrencyMaskCodec(get_settings().ledger.locale)
        self._events = event_logger or LedgerEventLogger()
        self._confirm = confirm_destructive_action or _deny_all

        self._ledger: Ledger = []
        self.state = AppState.LOADING
        self.error_message: Optional[str] = None
        self.pending_write = False

    # -- lifecycle ----------------------------------------------------------

    def start(self) -> AppState:
        """
        Load the ledger from the store.

        A corrupted or unreadable stored ledger puts the session in ERROR;
        the stored value stays untouched until retry_load() or
        wipe_and_restart().
        """
        self.state = AppState.LOADING
        try:
            self._ledger = self._store.load()
        except StorageError as e:
            self._ledger = []
            self.state = AppState.ERROR
            self.error_message = str(e)
            return self.state

        self.state = AppState.READY
        self.error_message = None
        self.pending_write = False
        return self.state

    def retry_load(self) -> AppState:
        """Try loading again (e.g. after the storage was fixed by hand)."""
        return self.start()

    def wipe_and_restart(self) -> AppState:
        """
        Delete the stored ledger and start with an empty one.

        Needs confirmation; when declined the session state is unchanged.
        """
        if not self._confirm("Apagar todos os dados salvos e começar do zero?"):
            return self.state
        self._store.reset()
        return self.start()

    @property
    def last_saved_at(self) -> Optional[datetime]:
        return self._store.last_saved_at

    def _require_ready(self) -> None:
        if self.state != AppState.READY:
            raise SessionNotReadyError(
                f"Ledger is not available (state: {self.state.value})"
            )

    # -- reads --------------------------------------------------------------

    @property
    def records(self) -> tuple[MonthRecord, ...]:
        """Snapshot of the ledger in insertion order."""
        return tuple(self._ledger)

    def records_chronological(self) -> tuple[MonthRecord, ...]:
        return tuple(chronological(self._ledger))

    def get_record(self, record_id: str) -> MonthRecord:
        for record in self._ledger:
            if record.id == record_id:
                return record
        raise RecordNotFoundError(f"No month record with id {record_id!r}")

    def summary(self, record_id: str) -> DerivedSummary:
        return summarize(self.get_record(record_id))

    def totals(self, year: Optional[int] = None) -> LedgerTotals:
        return summarize_ledger(self._ledger, year=year)

    def export_backup(self) -> str:
        """Backup text of the current ledger."""
        self._require_ready()
        return export_ledger(self._ledger)

    # -- mutations ----------------------------------------------------------

    def _persist(self) -> None:
        """Save the current ledger, remembering a failed write."""
        try:
            self._store.save(self._ledger)
        except PersistenceWriteError as e:
            # The in-memory ledger stays authoritative; the next mutation
            # writes the whole ledger again.
            self.pending_write = True
            logger.warning("ledger_save_pending", error=str(e), record_count=len(self._ledger))
            return
        self.pending_write = False

    def flush(self) -> bool:
        """Retry a pending write. Returns True when nothing is pending."""
        self._require_ready()
        if self.pending_write:
            self._persist()
        return not self.pending_write

    def save_month(
        self,
        draft: MonthRecordDraft,
        editing_id: Optional[str] = None,
    ) -> MonthRecord:
        """
        Create a month, or replace the month being edited.

        Raises:
            RecordValidationError: The draft has errors; nothing changed
            RecordNotFoundError: ``editing_id`` is not in the ledger
        """
        self._require_ready()
        existing = self.get_record(editing_id) if editing_id else None

        try:
            record = self._validator.build(draft, existing=existing)
        except RecordValidationError as e:
            self._events.log_record_rejected(
                [issue.model_dump() for issue in e.issues],
                record_id=editing_id,
            )
            raise

        if existing:
            self._ledger = [record if r.id == existing.id else r for r in self._ledger]
            self._events.log_record_updated(record.id, record.label)
        else:
            self._ledger = [*self._ledger, record]
            self._events.log_record_created(record.id, record.label)

        self._persist()
        return record

    def delete_month(self, record_id: str) -> bool:
        """
        Delete a month after confirmation.

        Returns:
            True if deleted, False if the user declined
        """
        self._require_ready()
        record = self.get_record(record_id)

        if not self._confirm(f"Excluir o registro de {record.label}?"):
            return False

        self._ledger = [r for r in self._ledger if r.id != record_id]
        self._events.log_record_deleted(record.id, record.label)
        self._persist()
        return True

    def import_ledger(
        self,
        payload: Union[str, bytes, Any],
        policy: Optional[ImportPolicy] = None,
    ) -> Optional[ImportResult]:
        """
        Import an external ledger (backup text or decoded records).

        The payload is validated first; confirmation is only asked when
        the current ledger has records.

        Returns:
            The import result, or None if the user declined

        Raises:
            ImportValidationError: The payload is not a valid ledger
        """
        self._require_ready()
        resolver = ImportResolver(policy) if policy else self._resolver

        try:
            incoming = (
                decode_import_payload(payload)
                if isinstance(payload, (str, bytes))
                else payload
            )
            result = resolver.resolve(self._ledger, incoming)
        except ImportValidationError as e:
            self._events.log_import_rejected(str(e), len(e.issues))
            raise

        if self._ledger and not self._confirm(
            f"Importar {result.incoming_count} registro(s)? "
            f"Os {len(self._ledger)} registro(s) atuais serão substituídos."
        ):
            return None

        self._ledger = list(result.ledger)
        self._events.log_ledger_imported(
            len(self._ledger), result.replaced_count, result.policy.value
        )
        self._persist()
        return result

    def reset(self) -> bool:
        """
        Erase all data after confirmation, then reload (empty).

        Returns:
            True if reset, False if the user declined
        """
        self._require_ready()
        if not self._confirm("Apagar TODOS os registros? Esta ação não pode ser desfeita."):
            return False
        self._store.reset()
        self.start()
        return True

    # -- insight ------------------------------------------------------------

    def request_insight(self, record_id: str) -> InsightRequest:
        """
        Start an insight request for a month.

        Must be called from inside a running event loop. The request only
        holds a formatted snapshot of the month.
        """
        record = self.get_record(record_id)
        if self._insight_agent is None:
            self._insight_agent = InsightAgent(event_logger=self._events)
        payload = InsightPayload.from_record(record, self._codec)
        return InsightRequest(self._insight_agent, payload)


def create_backend(backend: Optional[str] = None) -> KeyValueStorageInterface:
    """Storage backend named by ``backend`` or by the storage settings."""
    settings = get_settings().storage
    name = backend or settings.backend

    if name == "memory":
        return InMemoryStorage()
    if name == "sheets":
        return GoogleSheetsKeyValueStorage()
    return LocalFileStorage(Path(settings.data_dir))


def create_session(
    backend: Optional[KeyValueStorageInterface] = None,
    confirm_destructive_action: Optional[ConfirmCallback] = None,
    start: bool = True,
) -> LedgerSession:
    """
    Factory function to create a ready-to-use session.

    Args:
        backend: Storage backend. Defaults to the configured one.
        confirm_destructive_action: Asked before delete, reset and
                    import over existing data.
        start: Load the ledger immediately.

    Returns:
        The session (READY, or ERROR if the stored ledger is corrupted)
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)

    event_logger = LedgerEventLogger()
    store = LedgerStore(
        backend or create_backend(),
        key=settings.storage.key,
        event_logger=event_logger,
    )
    session = LedgerSession(
        store=store,
        event_logger=event_logger,
        confirm_destructive_action=confirm_destructive_action,
    )
    if start:
        session.start()
    return session
