"""
Import Resolver

Reconciles an externally supplied ledger (backup file, another device)
with the current one.

DESIGN DECISION: The default policy is REPLACE. A successful import
replaces the whole ledger with the incoming one; there is no per-record
conflict detection. If two devices edited the same month independently,
the last import wins wholesale.

MERGE_BY_ID is available as an explicit opt-in: current records are kept
in place, records whose id also appears in the incoming ledger are
replaced by the incoming version, and new incoming records are appended.

In both policies the incoming ledger is fully validated BEFORE anything
is produced. A rejected import leaves the current ledger untouched.
"""

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from src.models.ledger import STORED_CONTEXT, Ledger, MonthRecord, duplicate_ids


class ImportPolicy(str, Enum):
    """How an incoming ledger is combined with the current one."""
    REPLACE = "replace"
    MERGE_BY_ID = "merge_by_id"


class ImportIssue(BaseModel):
    """Problem found in one entry of an import payload."""

    index: int = Field(
        ...,
        description="Position of the entry in the payload (-1 for the payload itself)"
    )
    message: str


class ImportValidationError(Exception):
    """The import payload is not a valid ledger; nothing was imported."""

    def __init__(self, message: str, issues: list[ImportIssue] = None):
        self.issues = issues or []
        super().__init__(message)


class ImportResult(BaseModel):
    """Outcome of a successful resolve."""

    ledger: list[MonthRecord]
    policy: ImportPolicy
    incoming_count: int
    replaced_count: int = Field(
        default=0,
        description="Current records overwritten by an incoming record with the same id"
    )


def validate_incoming(incoming: Any) -> Ledger:
    """
    Check that ``incoming`` is a sequence of month-record-shaped entries
    with unique ids.

    Entries may be MonthRecord objects or decoded JSON dicts (camelCase
    or snake_case keys). Dicts must carry every field, id and createdAt
    included.

    Raises:
        ImportValidationError: With one ImportIssue per bad entry.
    """
    if isinstance(incoming, (str, bytes, bytearray, Mapping)) or not isinstance(incoming, Sequence):
        raise ImportValidationError(
            f"Import must be a list of month records, got {type(incoming).__name__}",
            [ImportIssue(index=-1, message="Payload is not a list")],
        )

    records: Ledger = []
    issues: list[ImportIssue] = []
    for index, entry in enumerate(incoming):
        if isinstance(entry, MonthRecord):
            records.append(entry)
            continue
        try:
            records.append(MonthRecord.model_validate(entry, context=STORED_CONTEXT))
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc']) or 'entry'}: {err['msg']}"
                for err in e.errors()
            )
            issues.append(ImportIssue(index=index, message=problems))

    if issues:
        raise ImportValidationError(
            f"Import rejected: {len(issues)} of {len(incoming)} entries are not valid month records",
            issues,
        )

    duplicates = duplicate_ids(records)
    if duplicates:
        raise ImportValidationError(
            f"Import rejected: duplicate record ids {', '.join(duplicates)}",
            [ImportIssue(index=-1, message=f"Duplicate id {d}") for d in duplicates],
        )

    return records


class ImportResolver:
    """Produces the ledger that results from importing external data."""

    def __init__(self, policy: ImportPolicy = ImportPolicy.REPLACE):
        self._policy = policy

    @property
    def policy(self) -> ImportPolicy:
        return self._policy

    def resolve(self, current: Ledger, incoming: Any) -> ImportResult:
        """
        Combine ``current`` with ``incoming`` according to the policy.

        ``current`` is never modified; the result is a new list.

        Raises:
            ImportValidationError: ``incoming`` is not a valid ledger
        """
        records = validate_incoming(incoming)

        if self._policy == ImportPolicy.REPLACE:
            return ImportResult(
                ledger=list(records),
                policy=self._policy,
                incoming_count=len(records),
                replaced_count=len(current),
            )

        by_id = {record.id: record for record in records}
        merged: Ledger = []
        replaced = 0
        for record in current:
            if record.id in by_id:
                merged.append(by_id.pop(record.id))
                replaced += 1
            else:
                merged.append(record)
        # Remaining incoming records, in their incoming order
        merged.extend(record for record in records if record.id in by_id)

        return ImportResult(
            ledger=merged,
            policy=self._policy,
            incoming_count=len(records),
            replaced_count=replaced,
        )


def resolve(
    current: Ledger,
    incoming: Any,
    policy: ImportPolicy = ImportPolicy.REPLACE,
) -> Ledger:
    """Shortcut for ImportResolver(policy).resolve(current, incoming).ledger."""
    return ImportResolver(policy).resolve(current, incoming).ledger
