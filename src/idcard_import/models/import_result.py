from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .parsed_record import ParsedRecord
from .validation_error import ErrorKind, ValidationError

"""Result models for the CSV bulk import.

ImportResult is what the parser hands back; RegistrationResult is what the
bulk registration step hands back. The presentation layer derives the three
user-visible outcomes purely from record / error counts.
"""


class ImportOutcome(Enum):
    """User-visible outcome of a parse.

    - FAILURE: no valid record at all
    - PARTIAL: some valid records and at least one reported error
    - SUCCESS: valid records and zero errors
    """
    FAILURE = "failure"
    PARTIAL = "partial"
    SUCCESS = "success"


@dataclass(frozen=True)
class ImportResult:
    """Records that passed every rule plus the ordered error list."""
    records: tuple[ParsedRecord, ...] = ()
    errors: tuple[ValidationError, ...] = ()

    @property
    def outcome(self) -> ImportOutcome:
        if not self.records:
            return ImportOutcome.FAILURE
        if self.errors:
            return ImportOutcome.PARTIAL
        return ImportOutcome.SUCCESS

    @property
    def has_structural_error(self) -> bool:
        return any(e.kind is ErrorKind.STRUCTURAL for e in self.errors)

    @property
    def skipped_rows(self) -> int:
        """Number of distinct rows dropped by a hard rule."""
        return len({e.row for e in self.errors if e.kind is ErrorKind.ROW})

    @property
    def cleared_fields(self) -> int:
        return sum(1 for e in self.errors if e.kind is ErrorKind.FIELD_SOFT)

    def messages(self) -> list[str]:
        return [e.message for e in self.errors]


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of a bulk registration batch."""
    success_count: int
    errors: list[ValidationError] = field(default_factory=list)

    def messages(self) -> list[str]:
        return [e.message for e in self.errors]
