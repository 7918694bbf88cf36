"""
Backup files

A backup is the ledger as the same JSON array used by storage, so a
file exported here can be imported on another device, and raw storage
contents can be imported as a backup.
"""

import json
from typing import Any, Union

from src.models.ledger import Ledger
from src.services.storage.ledger_store import serialize_ledger
from src.sync.resolver import ImportIssue, ImportValidationError


def export_ledger(ledger: Ledger) -> str:
    """Backup text for ``ledger``."""
    return serialize_ledger(ledger)


def decode_import_payload(text: Union[str, bytes]) -> Any:
    """
    Decode backup text into the structure handed to the resolver.

    Shape checks are left to the resolver; this only decodes JSON.

    Raises:
        ImportValidationError: The text is not valid JSON
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ImportValidationError(
                f"Backup file is not UTF-8 text: {e}",
                [ImportIssue(index=-1, message="Not UTF-8")],
            )
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportValidationError(
            f"Backup file is not valid JSON: {e.msg} (line {e.lineno}, column {e.colno})",
            [ImportIssue(index=-1, message="Invalid JSON")],
        )
