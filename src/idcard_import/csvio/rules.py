from __future__ import annotations

import re
from datetime import date, datetime

from ..models.record_types import FieldRule

"""Cell conversion helpers for each FieldKind.

Date parsing tries the formats in a fixed order and the first one that
produces a real calendar date wins:

1. ISO 8601 (2020-08-15, 20200815, 2020-W33-6, 2020-08-15T09:30:00, and the
   reduced precision month form 2020-08, read as the 1st)
2. MM/dd/yyyy
3. dd/MM/yyyy

So 03/04/2021 is read as March 4th, while 25/04/2021 falls through to the
day-first format.
"""

__all__ = [
    "DATE_FORMATS",
    "MOBILE_PATTERN",
    "parse_date",
    "is_valid_phone",
    "is_allowed_enum",
]

DATE_FORMATS = ("%m/%d/%Y", "%d/%m/%Y")
MOBILE_PATTERN = re.compile(r"[0-9]{10}")
_ISO_MONTH = re.compile(r"(\d{4})-(\d{2})")


def _parse_iso(value: str) -> date | None:
    month = _ISO_MONTH.fullmatch(value)
    if month is not None:
        try:
            return date(int(month.group(1)), int(month.group(2)), 1)
        except ValueError:
            return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        return None


def parse_date(value: str) -> date | None:
    """Return the parsed calendar date, or None when no format matches."""
    if not value:
        return None
    parsed = _parse_iso(value)
    if parsed is not None:
        return parsed
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def is_valid_phone(value: str) -> bool:
    return MOBILE_PATTERN.fullmatch(value) is not None


def is_allowed_enum(rule: FieldRule, value: str) -> bool:
    # 大文字小文字は区別する (完全一致のみ)
    return value in rule.enum_values
