from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence

from ..models.import_result import ImportResult
from ..models.parsed_record import FieldValue, ParsedRecord
from ..models.record_types import FieldKind, FieldRule, RecordType
from ..models.validation_error import UNKNOWN_IDENTIFIER, ErrorKind, ValidationError
from .rules import is_allowed_enum, is_valid_phone, parse_date
from .tokenizer import TokenizerMode, split_header, split_row

"""CSV bulk upload parsing & validation pipeline.

Steps:
1. Trim the text, split on newlines; need a header line and one data line
2. Tokenize the header; its order defines the column -> index mapping
3. Verify the required headers are present (abort with one error otherwise)
4. For every non-blank data line apply the column rules:
   - date / enum failures drop the row
   - phone failures clear the field, the row is kept
   - a missing required field drops the row
5. Return records (input order) and every error collected on the way

Nothing here raises for bad rows or cells; errors are returned as data.
"""

__all__ = [
    "TOO_SHORT_MESSAGE",
    "parse",
    "parse_records",
    "parse_async",
]

logger = logging.getLogger(__name__)

TOO_SHORT_MESSAGE = "CSV file must contain headers and at least one data row."


class _RowState:
    """Mutable per-row scratch space (never leaves a single parse call)."""

    def __init__(self, row_number: int, identifier: str) -> None:
        self.row_number = row_number
        self.identifier = identifier
        self.values: dict[str, FieldValue] = {}
        self.errors: list[ValidationError] = []
        self.invalid = False

    def error(self, kind: ErrorKind, field: str, message: str) -> None:
        self.errors.append(
            ValidationError(
                row=self.row_number,
                identifier=self.identifier,
                kind=kind,
                message=f"Row {self.row_number} (ID: {self.identifier}): {message}",
                field=field,
            )
        )
        if kind is ErrorKind.ROW:
            self.invalid = True


def _apply_rule(state: _RowState, rule: FieldRule | None, header: str, raw: str) -> None:
    if rule is None or rule.kind is FieldKind.STRING:
        state.values[header] = raw
        return

    if rule.kind is FieldKind.DATE:
        if not raw and not rule.required:
            state.values[header] = None
            return
        parsed = parse_date(raw)
        if parsed is None:
            state.error(ErrorKind.ROW, header, f"Invalid Date Format '{raw}' for {header}. Skipping record.")
            state.values[header] = None
        else:
            state.values[header] = parsed
        return

    if rule.kind is FieldKind.ENUM:
        if not raw and not rule.required:
            state.values[header] = ""
            return
        if not is_allowed_enum(rule, raw):
            allowed = " or ".join(f"'{v}'" for v in rule.enum_values)
            state.error(ErrorKind.ROW, header, f"Invalid {header} '{raw}'. Must be {allowed}. Skipping record.")
        state.values[header] = raw
        return

    if rule.kind is FieldKind.PHONE:
        if raw and not is_valid_phone(raw):
            state.error(
                ErrorKind.FIELD_SOFT, header, f"Invalid {header} '{raw}'. Must be 10 digits. Field will be cleared."
            )
            raw = ""
        state.values[header] = raw
        return

    raise ValueError(f"unsupported field kind: {rule.kind}")  # pragma: no cover


def parse(
    csv_text: str,
    schema: Mapping[str, FieldRule],
    required_headers: Sequence[str],
    required_fields: Sequence[str] | None = None,
    identifier_field: str | None = None,
    tokenizer: TokenizerMode = "naive",
) -> ImportResult:
    """Parse CSV text into validated records plus an error list.

    Args:
        csv_text: full file contents
        schema: column name -> FieldRule; columns without a rule are copied as strings
        required_headers: names that must all appear in the header line
        required_fields: names that must be non-empty on each row (defaults to required_headers)
        identifier_field: column reported as the row identifier in error messages
        tokenizer: "naive" comma split (default) or "quoted"

    Returns:
        ImportResult; a structural problem yields zero records and exactly one error.
    """
    lines = csv_text.strip().split("\n")
    if len(lines) < 2:
        return ImportResult(records=(), errors=(ValidationError.structural(TOO_SHORT_MESSAGE),))

    headers = split_header(lines[0], tokenizer)
    present = set(headers)
    missing_headers = [h for h in required_headers if h not in present]
    if missing_headers:
        message = f"Missing required header(s): {', '.join(missing_headers)}. Please use the template."
        return ImportResult(records=(), errors=(ValidationError.structural(message),))

    row_required = tuple(required_fields) if required_fields is not None else tuple(required_headers)
    id_index = headers.index(identifier_field) if identifier_field in present else None

    records: list[ParsedRecord] = []
    errors: list[ValidationError] = []
    row_number = 0
    for line in lines[1:]:
        if not line.strip():
            continue
        row_number += 1
        cells = split_row(line, tokenizer)

        identifier = UNKNOWN_IDENTIFIER
        if id_index is not None and id_index < len(cells) and cells[id_index]:
            identifier = cells[id_index]
        state = _RowState(row_number, identifier)

        for index, header in enumerate(headers):
            raw = cells[index] if index < len(cells) else ""
            _apply_rule(state, schema.get(header), header, raw)

        if not state.invalid:
            missing = [f for f in row_required if state.values.get(f) in (None, "")]
            if missing:
                state.error(
                    ErrorKind.ROW,
                    missing[0],
                    f"Missing required field(s) {', '.join(missing)}. Skipping record.",
                )

        errors.extend(state.errors)
        if not state.invalid:
            records.append(ParsedRecord(row_number=row_number, values=state.values))

    logger.debug("parsed rows=%d records=%d errors=%d", row_number, len(records), len(errors))
    return ImportResult(records=tuple(records), errors=tuple(errors))


def parse_records(csv_text: str, record_type: RecordType, tokenizer: TokenizerMode = "naive") -> ImportResult:
    """Parse with the declarations of a student / employee record type."""
    return parse(
        csv_text,
        record_type.rules,
        record_type.required_headers,
        required_fields=record_type.required_fields,
        identifier_field=record_type.identifier_field,
        tokenizer=tokenizer,
    )


async def parse_async(csv_text: str, record_type: RecordType, tokenizer: TokenizerMode = "naive") -> ImportResult:
    """Run parse_records off the event loop; resolves once the whole file is processed."""
    return await asyncio.to_thread(parse_records, csv_text, record_type, tokenizer)
