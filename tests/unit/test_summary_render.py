from __future__ import annotations

import re

from idcard_import.csvio.parser import parse_records
from idcard_import.models import ErrorKind, RecordType, RegistrationResult, ValidationError
from idcard_import.services.summary import describe_outcome, render_summary_line

HEADER = "fullName,employeeId,department,designation,employeeType,dateOfJoining,mobileNumber"
GOOD = '"A","E1","D","X","STAFF","2020-01-01","9876543210"'
BAD_DATE = '"B","E2","D","X","STAFF","someday","9876543210"'
BAD_PHONE = '"C","E3","D","X","STAFF","2020-01-01","123"'

SUMMARY_RE = re.compile(
    r"^SUMMARY files=\d+ records=\d+ skipped_rows=\d+ cleared_fields=\d+ errors=\d+ "
    r"registered=(\d+|-) outcome=(success|partial|failure)$"
)


def _parse(*rows: str):
    return parse_records("\n".join([HEADER, *rows]), RecordType.EMPLOYEE)


def test_describe_outcome_counts():
    result = _parse(GOOD, BAD_DATE, BAD_PHONE)
    assert describe_outcome(result) == "2 records ready, 1 row skipped, 1 field cleared"


def test_describe_outcome_single_record():
    assert describe_outcome(_parse(GOOD)) == "1 record ready"


def test_describe_outcome_structural():
    result = parse_records("fullName\n\"A\"", RecordType.EMPLOYEE)
    assert describe_outcome(result).startswith("Missing required header(s)")


def test_render_summary_dry_run():
    line = render_summary_line(1, [_parse(GOOD)])
    assert SUMMARY_RE.match(line)
    assert line == (
        "SUMMARY files=1 records=1 skipped_rows=0 cleared_fields=0 errors=0 registered=- outcome=success"
    )


def test_render_summary_with_registration_errors():
    line = render_summary_line(
        2,
        [_parse(GOOD, BAD_DATE), _parse(GOOD)],
        [RegistrationResult(1, []), RegistrationResult(0, [ValidationError(1, "E1", ErrorKind.REGISTRATION, "Duplicate")])],
    )
    assert SUMMARY_RE.match(line)
    assert "records=2" in line
    assert "errors=2" in line
    assert "registered=1" in line
    assert line.endswith("outcome=partial")


def test_render_summary_failure():
    line = render_summary_line(1, [_parse(BAD_DATE)], [])
    assert line.endswith("registered=0 outcome=failure")
