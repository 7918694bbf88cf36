"""Import / sync package."""

from src.sync.resolver import (
    ImportIssue,
    ImportPolicy,
    ImportResolver,
    ImportResult,
    ImportValidationError,
    resolve,
    validate_incoming,
)
from src.sync.backup import decode_import_payload, export_ledger

__all__ = [
    "ImportIssue",
    "ImportPolicy",
    "ImportResolver",
    "ImportResult",
    "ImportValidationError",
    "decode_import_payload",
    "export_ledger",
    "resolve",
    "validate_incoming",
]
