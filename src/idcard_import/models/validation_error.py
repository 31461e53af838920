from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from enum import Enum

"""ValidationError model for CSV bulk import reporting.

Errors produced while parsing are plain data: they are accumulated in the
ImportResult and never raised. The same record is written to the JSON Lines
error log by src/idcard_import/logging/error_log.py.

row=0 is used for file-level errors where no data row applies (structural
errors, a failed registration commit).
"""

__all__ = [
    "ErrorKind",
    "ValidationError",
    "UNKNOWN_IDENTIFIER",
]

UNKNOWN_IDENTIFIER = "N/A"


class ErrorKind(Enum):
    """Error taxonomy.

    - STRUCTURAL: fatal, the whole parse is aborted (too short / missing headers)
    - ROW: the row is dropped (bad date, bad enum value, missing required field)
    - FIELD_SOFT: the field is cleared, the row is kept (bad phone number)
    - REGISTRATION: a parsed record was rejected by bulk registration
      (missing / duplicate / existing identifier, failed commit)
    """
    STRUCTURAL = "structural"
    ROW = "row"
    FIELD_SOFT = "field_soft"
    REGISTRATION = "registration"


@dataclass(frozen=True)
class ValidationError:
    """One reported problem.

    Attributes:
        row: 1-based data row number, 0 for structural errors
        identifier: best-effort identifier of the row (PRN / employee ID)
        kind: error classification
        message: human readable description
        field: offending column, if the error is column-scoped
    """
    row: int
    identifier: str
    kind: ErrorKind
    message: str
    field: str | None = None

    @staticmethod
    def structural(message: str) -> ValidationError:
        return ValidationError(row=0, identifier=UNKNOWN_IDENTIFIER, kind=ErrorKind.STRUCTURAL, message=message)

    @property
    def is_fatal(self) -> bool:
        return self.kind is ErrorKind.STRUCTURAL

    @property
    def drops_row(self) -> bool:
        return self.kind is ErrorKind.ROW

    def to_json_line(self) -> str:
        """Serialize to a JSON line with a fixed key set."""
        data = asdict(self)
        data["kind"] = self.kind.value
        return json.dumps(data, ensure_ascii=False)

    def __str__(self) -> str:
        return self.message
