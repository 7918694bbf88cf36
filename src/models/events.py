"""
Ledger Event Models for FlatMoney

Significant ledger operations are emitted as structured log events.
This provides:
1. Debugging information when storage or imports go wrong
2. A consistent shape for every log line about the ledger

DESIGN DECISION: Events are log lines only. They are never persisted or
replayed, so they are not a history of edits.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class LedgerEventType(str, Enum):
    """Types of events the ledger emits."""
    # Record lifecycle
    RECORD_CREATED = "record_created"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"
    RECORD_REJECTED = "record_rejected"

    # Persistence
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_SAVED = "ledger_saved"
    SAVE_FAILED = "save_failed"
    STORAGE_CORRUPTED = "storage_corrupted"
    STORAGE_RESET = "storage_reset"

    # Import / sync
    LEDGER_IMPORTED = "ledger_imported"
    IMPORT_REJECTED = "import_rejected"

    # External collaborators
    INSIGHT_FAILED = "insight_failed"


class EventSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class LedgerEvent(BaseModel):
    """A single ledger event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: LedgerEventType
    severity: EventSeverity = Field(default=EventSeverity.INFO)

    # Which record is this about, if any
    record_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "record_id": self.record_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.record_created(record_id, "Março/2024")
        event = LedgerEventBuilder.save_failed("quota exceeded")
    """

    @staticmethod
    def record_created(record_id: str, label: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.RECORD_CREATED,
            record_id=record_id,
            description=f"Month record created: {label}",
            details={"label": label},
            is_user_action=True,
        )

    @staticmethod
    def record_updated(record_id: str, label: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.RECORD_UPDATED,
            record_id=record_id,
            description=f"Month record replaced: {label}",
            details={"label": label},
            is_user_action=True,
        )

    @staticmethod
    def record_deleted(record_id: str, label: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.RECORD_DELETED,
            record_id=record_id,
            description=f"Month record deleted: {label}",
            details={"label": label},
            is_user_action=True,
        )

    @staticmethod
    def record_rejected(issues: list[dict], record_id: Optional[str] = None) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.RECORD_REJECTED,
            severity=EventSeverity.WARNING,
            record_id=record_id,
            description=f"Month record rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def ledger_loaded(record_count: int, key: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LEDGER_LOADED,
            description=f"Ledger loaded with {record_count} records",
            details={"record_count": record_count, "key": key},
        )

    @staticmethod
    def ledger_saved(record_count: int, key: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LEDGER_SAVED,
            severity=EventSeverity.DEBUG,
            description=f"Ledger saved with {record_count} records",
            details={"record_count": record_count, "key": key},
        )

    @staticmethod
    def save_failed(error_message: str, record_count: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.SAVE_FAILED,
            severity=EventSeverity.ERROR,
            description="Ledger could not be written; keeping in-memory state",
            details={"record_count": record_count},
            error_message=error_message,
        )

    @staticmethod
    def storage_corrupted(error_message: str, key: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STORAGE_CORRUPTED,
            severity=EventSeverity.CRITICAL,
            description="Stored ledger is corrupted",
            details={"key": key},
            error_message=error_message,
        )

    @staticmethod
    def storage_reset(key: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STORAGE_RESET,
            severity=EventSeverity.WARNING,
            description="Stored ledger wiped",
            details={"key": key},
            is_user_action=True,
        )

    @staticmethod
    def ledger_imported(record_count: int, replaced_count: int, policy: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LEDGER_IMPORTED,
            description=f"Ledger imported with {record_count} records",
            details={
                "record_count": record_count,
                "replaced_count": replaced_count,
                "policy": policy,
            },
            is_user_action=True,
        )

    @staticmethod
    def import_rejected(error_message: str, issue_count: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.IMPORT_REJECTED,
            severity=EventSeverity.WARNING,
            description=f"Import rejected with {issue_count} issues",
            details={"issue_count": issue_count},
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def insight_failed(record_id: str, error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.INSIGHT_FAILED,
            severity=EventSeverity.WARNING,
            record_id=record_id,
            description="Insight service unavailable; fallback text returned",
            error_message=error_message,
        )
