"""
Ledger Event Logger

Every significant ledger operation is logged as a structured event.
The logger:
- Never raises (a logging failure must not break a ledger mutation)
- Maps event severity to the structlog level
- Keeps nothing in memory or on disk beyond the log line itself
"""

import logging
from typing import Optional

import structlog

from src.models.events import LedgerEvent, LedgerEventBuilder


_configured = False


def configure_logging(level: str = "INFO") -> None:
    """
    Configure structlog on top of the stdlib logging module.

    Safe to call more than once; only the first call takes effect.
    """
    global _configured
    if _configured:
        return

    logging.basicConfig(format="%(message)s", level=level.upper())
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: Optional[str] = None):
    """Return a structlog logger bound to ``name``."""
    return structlog.get_logger(name)


class LedgerEventLogger:
    """Central logging service for ledger events."""

    def __init__(self, logger=None):
        self._logger = logger or get_logger("flatmoney.ledger")

    def log(self, event: LedgerEvent) -> None:
        """Log an event at the level matching its severity."""
        log_dict = event.to_log_dict()
        severity = event.severity.value

        try:
            if severity == "critical":
                self._logger.critical("ledger_event", **log_dict)
            elif severity == "error":
                self._logger.error("ledger_event", **log_dict)
            elif severity == "warning":
                self._logger.warning("ledger_event", **log_dict)
            elif severity == "debug":
                self._logger.debug("ledger_event", **log_dict)
            else:
                self._logger.info("ledger_event", **log_dict)
        except Exception as e:
            # Last resort: the stdlib logger, which has no processors to fail
            logging.getLogger("flatmoney.ledger").warning(
                "ledger event could not be logged: %s", e
            )

    def log_record_created(self, record_id: str, label: str) -> None:
        self.log(LedgerEventBuilder.record_created(record_id, label))

    def log_record_updated(self, record_id: str, label: str) -> None:
        self.log(LedgerEventBuilder.record_updated(record_id, label))

    def log_record_deleted(self, record_id: str, label: str) -> None:
        self.log(LedgerEventBuilder.record_deleted(record_id, label))

    def log_record_rejected(
        self,
        issues: list[dict],
        record_id: Optional[str] = None,
    ) -> None:
        self.log(LedgerEventBuilder.record_rejected(issues, record_id))

    def log_ledger_loaded(self, record_count: int, key: str) -> None:
        self.log(LedgerEventBuilder.ledger_loaded(record_count, key))

    def log_ledger_saved(self, record_count: int, key: str) -> None:
        self.log(LedgerEventBuilder.ledger_saved(record_count, key))

    def log_save_failed(self, error_message: str, record_count: int) -> None:
        self.log(LedgerEventBuilder.save_failed(error_message, record_count))

    def log_storage_corrupted(self, error_message: str, key: str) -> None:
        self.log(LedgerEventBuilder.storage_corrupted(error_message, key))

    def log_storage_reset(self, key: str) -> None:
        self.log(LedgerEventBuilder.storage_reset(key))

    def log_ledger_imported(
        self,
        record_count: int,
        replaced_count: int,
        policy: str,
    ) -> None:
        self.log(LedgerEventBuilder.ledger_imported(record_count, replaced_count, policy))

    def log_import_rejected(self, error_message: str, issue_count: int) -> None:
        self.log(LedgerEventBuilder.import_rejected(error_message, issue_count))

    def log_insight_failed(self, record_id: str, error_message: str) -> None:
        self.log(LedgerEventBuilder.insight_failed(record_id, error_message))
