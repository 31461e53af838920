from __future__ import annotations

import pytest

from idcard_import.models import FieldKind, RecordType


def test_required_headers_are_declared_columns():
    for record_type in RecordType:
        for name in record_type.required_headers:
            assert name in record_type.rules
        assert record_type.identifier_field in record_type.required_fields


def test_employee_rules():
    rules = RecordType.EMPLOYEE.rules
    assert rules["employeeType"].kind is FieldKind.ENUM
    assert rules["employeeType"].enum_values == ("FACULTY", "STAFF")
    assert rules["dateOfJoining"].kind is FieldKind.DATE
    assert rules["mobileNumber"].kind is FieldKind.PHONE
    assert RecordType.EMPLOYEE.identifier_field == "employeeId"


def test_student_rules():
    rules = RecordType.STUDENT.rules
    assert rules["dateOfBirth"].kind is FieldKind.DATE
    assert rules["yearOfJoining"].kind is FieldKind.STRING
    assert RecordType.STUDENT.identifier_field == "prnNumber"


def test_template_rows_match_columns():
    for record_type in RecordType:
        assert len(record_type.template_rows) == 2
        for row in record_type.template_rows:
            assert len(row) == len(record_type.columns)


@pytest.mark.parametrize("name,expected", [
    ("student", RecordType.STUDENT),
    (" Employee ", RecordType.EMPLOYEE),
])
def test_from_name(name: str, expected: RecordType):
    assert RecordType.from_name(name) is expected


def test_from_name_unknown():
    with pytest.raises(ValueError) as e:
        RecordType.from_name("visitor")
    assert "student" in str(e.value)


def test_required_fields_follow_rule_flags():
    for record_type in RecordType:
        flagged = {name for name, rule in record_type.rules.items() if rule.required}
        assert set(record_type.required_fields) == flagged
        assert flagged == set(record_type.required_headers)
    assert RecordType.EMPLOYEE.required_fields == (
        "fullName", "employeeId", "department", "designation", "employeeType", "dateOfJoining",
    )
