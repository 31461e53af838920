"""Domain models for the ID card registry bulk import.

This package contains the record type variants, the parse result types and
the error records shared by the parser, the registration service and the CLI.
"""

from .import_result import ImportOutcome, ImportResult, RegistrationResult
from .parsed_record import ParsedRecord
from .record_types import FieldKind, FieldRule, RecordType
from .validation_error import ErrorKind, ValidationError

__all__ = [
    # Record type declarations
    "FieldKind",
    "FieldRule",
    "RecordType",
    # Parse results
    "ErrorKind",
    "ImportOutcome",
    "ImportResult",
    "ParsedRecord",
    "RegistrationResult",
    "ValidationError",
]
