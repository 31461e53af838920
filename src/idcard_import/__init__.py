"""Bulk CSV import for the student / employee ID card registry."""

from .csvio.parser import parse, parse_async, parse_records
from .models import ImportOutcome, ImportResult, ParsedRecord, RecordType, ValidationError

__all__ = [
    "ImportOutcome",
    "ImportResult",
    "ParsedRecord",
    "RecordType",
    "ValidationError",
    "parse",
    "parse_async",
    "parse_records",
]

__version__ = "0.1.0"
