from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Record type variants for the ID card registry bulk import.

Each record type (student / employee) carries its own column rules, the
headers a CSV file must contain, the per-row required fields and the
identifying field. The template download rows live here as well so that the
template and the parser never drift apart.
"""

__all__ = [
    "FieldKind",
    "FieldRule",
    "RecordType",
    "EMPLOYEE_TYPES",
]

EMPLOYEE_TYPES = ("FACULTY", "STAFF")


class FieldKind(Enum):
    """How a cell is interpreted and validated."""
    STRING = "string"
    DATE = "date"
    ENUM = "enum"
    PHONE = "phone"


@dataclass(frozen=True)
class FieldRule:
    """Per-column policy.

    `required` marks the column as a per-row required field
    (RecordType.required_fields is derived from it). For date/enum columns it
    also decides whether an empty cell is accepted or rejected as invalid.
    """
    name: str
    kind: FieldKind = FieldKind.STRING
    required: bool = False
    enum_values: tuple[str, ...] = ()


def _rules(*rules: FieldRule) -> dict[str, FieldRule]:
    return {r.name: r for r in rules}


_STUDENT_RULES = _rules(
    FieldRule("fullName", required=True),
    FieldRule("address"),
    FieldRule("dateOfBirth", FieldKind.DATE, required=True),
    FieldRule("mobileNumber", FieldKind.PHONE),
    FieldRule("prnNumber", required=True),
    FieldRule("rollNumber", required=True),
    FieldRule("yearOfJoining", required=True),  # "FIRST".."FINAL" or a year
    FieldRule("courseName", required=True),
    FieldRule("bloodGroup"),
    FieldRule("photographUrl"),
    FieldRule("cardHolderSignature"),
)

_EMPLOYEE_RULES = _rules(
    FieldRule("fullName", required=True),
    FieldRule("employeeId", required=True),
    FieldRule("department", required=True),
    FieldRule("designation", required=True),
    FieldRule("employeeType", FieldKind.ENUM, required=True, enum_values=EMPLOYEE_TYPES),
    FieldRule("dateOfJoining", FieldKind.DATE, required=True),
    FieldRule("mobileNumber", FieldKind.PHONE),
    FieldRule("address"),
    FieldRule("bloodGroup"),
    FieldRule("photographUrl"),
    FieldRule("cardHolderSignature"),
    FieldRule("sevarthNo"),
)

_STUDENT_REQUIRED = ("fullName", "prnNumber", "rollNumber", "yearOfJoining", "courseName", "dateOfBirth")
_EMPLOYEE_REQUIRED = ("fullName", "employeeId", "department", "designation", "employeeType", "dateOfJoining")

# テンプレート例示行 (列順は rules と一致させること)
_STUDENT_TEMPLATE_ROWS = (
    (
        "Asha Patil", "12 College Road Mumbai", "2004-06-21", "9876543210", "PRN2023001",
        "101", "FIRST", "MBBS", "B+", "https://placehold.co/100x120.png", "",
    ),
    (
        "Rahul Deshmukh", "34 Hostel Block Mumbai", "2003-11-02", "9876543211", "PRN2023002",
        "102", "SECOND", "MBBS", "O+", "https://placehold.co/100x120.png", "",
    ),
)

_EMPLOYEE_TEMPLATE_ROWS = (
    (
        "Dr. Jane Doe", "EMP001", "Computer Science", "Professor", "FACULTY", "2020-08-15",
        "9876543210", "123 Faculty Row Knowledge City", "O+", "https://placehold.co/100x120.png", "", "",
    ),
    (
        "John Smith", "EMP002", "Administration", "Office Clerk", "STAFF", "2021-02-01",
        "9876543211", "456 Staff Quarters Service Town", "A+", "https://placehold.co/100x120.png", "", "",
    ),
)


class RecordType(Enum):
    """Closed set of record kinds accepted by the bulk import."""
    STUDENT = "student"
    EMPLOYEE = "employee"

    @property
    def label(self) -> str:
        return self.value

    @property
    def rules(self) -> dict[str, FieldRule]:
        return _STUDENT_RULES if self is RecordType.STUDENT else _EMPLOYEE_RULES

    @property
    def columns(self) -> tuple[str, ...]:
        """Canonical column order (template header row)."""
        return tuple(self.rules)

    @property
    def required_headers(self) -> tuple[str, ...]:
        return _STUDENT_REQUIRED if self is RecordType.STUDENT else _EMPLOYEE_REQUIRED

    @property
    def required_fields(self) -> tuple[str, ...]:
        """Columns flagged `required` in the rules, in canonical order."""
        return tuple(name for name, rule in self.rules.items() if rule.required)

    @property
    def identifier_field(self) -> str:
        return "prnNumber" if self is RecordType.STUDENT else "employeeId"

    @property
    def template_rows(self) -> tuple[tuple[str, ...], ...]:
        return _STUDENT_TEMPLATE_ROWS if self is RecordType.STUDENT else _EMPLOYEE_TEMPLATE_ROWS

    @classmethod
    def from_name(cls, name: str) -> RecordType:
        try:
            return cls(name.strip().lower())
        except ValueError as e:
            choices = ", ".join(t.value for t in cls)
            raise ValueError(f"unknown record type '{name}' (expected one of: {choices})") from e
