from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Union

"""ParsedRecord model.

A ParsedRecord is one CSV data row after the field rules were applied. Only
rows that passed every hard rule become a ParsedRecord.
"""

__all__ = [
    "ParsedRecord",
    "FieldValue",
]

FieldValue = Union[str, date, None]


@dataclass(frozen=True)
class ParsedRecord:
    """Typed representation of a single accepted row.

    row_number is the 1-based position among the non-blank data rows.
    """
    row_number: int
    values: dict[str, FieldValue]

    def get(self, field: str, default: FieldValue = None) -> FieldValue:
        return self.values.get(field, default)

    def identifier(self, field: str) -> str:
        value = self.values.get(field)
        return value if isinstance(value, str) else ""
