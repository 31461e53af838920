from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from ..db.store import RecordStore, StoreError
from ..models.import_result import ImportResult, RegistrationResult
from ..models.parsed_record import ParsedRecord
from ..models.record_types import RecordType
from ..models.validation_error import UNKNOWN_IDENTIFIER, ErrorKind, ValidationError

"""Bulk registration of parsed records.

Takes the records accepted by the CSV parser and commits them through a
RecordStore in a single batch:

1. Skip records without an identifier
2. Skip identifiers repeated inside the batch
3. Skip identifiers already persisted
4. Fill the storage defaults (placeholder photo, registration date, ...)
5. insert_batch once; a failed commit means nothing was registered
"""

__all__ = [
    "PLACEHOLDER_PHOTO_URLS",
    "bulk_register",
    "build_document",
    "merge_errors",
]

logger = logging.getLogger(__name__)

PLACEHOLDER_PHOTO_URLS = {
    RecordType.STUDENT: "https://placehold.co/100x120.png",
    RecordType.EMPLOYEE: "https://placehold.co/80x100.png",
}


def _display_name(record: ParsedRecord) -> str:
    name = record.get("fullName")
    return name if isinstance(name, str) and name else "Unknown Name"


def build_document(record_type: RecordType, record: ParsedRecord, registered_at: datetime) -> dict[str, Any]:
    """Storage document for one record with the registration defaults applied."""
    doc: dict[str, Any] = dict(record.values)
    doc["photographUrl"] = doc.get("photographUrl") or PLACEHOLDER_PHOTO_URLS[record_type]
    doc["registrationDate"] = registered_at
    doc["printHistory"] = []
    if record_type is RecordType.EMPLOYEE:
        doc["sevarthNo"] = doc.get("sevarthNo") or ""
        doc["isOrganDonor"] = bool(doc.get("isOrganDonor") or False)
    return doc


def _rejected(record: ParsedRecord | None, identifier: str, field: str | None, message: str) -> ValidationError:
    return ValidationError(
        row=record.row_number if record is not None else 0,
        identifier=identifier or UNKNOWN_IDENTIFIER,
        kind=ErrorKind.REGISTRATION,
        message=message,
        field=field,
    )


def bulk_register(
    record_type: RecordType,
    records: Iterable[ParsedRecord],
    store: RecordStore,
    now: datetime | None = None,
) -> RegistrationResult:
    """Register records in one batch.

    Args:
        record_type: student or employee
        records: records from ImportResult.records
        store: persistence port
        now: registration timestamp (defaults to UTC now)

    Returns:
        RegistrationResult; every rejected record yields a REGISTRATION
        error carrying its row number. On a failed commit success_count is 0
        and one row=0 error is appended.
    """
    registered_at = now or datetime.now(UTC)
    field = record_type.identifier_field
    errors: list[ValidationError] = []
    documents: list[dict[str, Any]] = []
    seen: set[str] = set()

    for record in records:
        ident = record.identifier(field)
        name = _display_name(record)
        if not ident:
            errors.append(_rejected(record, ident, field, f"Skipping {record_type.label} with missing ID: {name}"))
            continue
        if ident in seen:
            errors.append(
                _rejected(record, ident, field, f"Duplicate {field} {ident} within this batch for {name}. Skipped.")
            )
            continue
        try:
            already = store.exists(record_type, ident)
        except StoreError as e:
            errors.append(_rejected(record, ident, field, f"Lookup failed for {field} {ident}: {e}"))
            continue
        if already:
            message = f"{record_type.label.capitalize()} with {field} {ident} ({name}) already exists. Skipped."
            errors.append(_rejected(record, ident, field, message))
            continue
        seen.add(ident)
        documents.append(build_document(record_type, record, registered_at))

    if not documents:
        return RegistrationResult(success_count=0, errors=errors)

    try:
        inserted = store.insert_batch(record_type, documents)
    except StoreError as e:
        logger.error(f"batch commit failed type={record_type.label} size={len(documents)}: {e}")
        errors.append(_rejected(None, "", None, f"Batch commit failed: {e}"))
        return RegistrationResult(success_count=0, errors=errors)

    logger.info(f"registered type={record_type.label} count={inserted} skipped={len(errors)}")
    return RegistrationResult(success_count=inserted, errors=errors)


def merge_errors(import_result: ImportResult, registration: RegistrationResult | None) -> list[ValidationError]:
    """Parse-time errors followed by registration rejections (one list per file)."""
    merged = list(import_result.errors)
    if registration is not None:
        merged.extend(registration.errors)
    return merged
