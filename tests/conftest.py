# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path
import pytest

from idcard_import.logging.init import reset_logging

EMPLOYEE_HEADER = "fullName,employeeId,department,designation,employeeType,dateOfJoining,mobileNumber"
STUDENT_HEADER = "fullName,address,dateOfBirth,mobileNumber,prnNumber,rollNumber,yearOfJoining,courseName"


@pytest.fixture(autouse=True)
def _fresh_logging():
    # ハンドラは生成時の sys.stdout を掴むため毎テスト作り直す
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """tokenizer: naive
log_directory: ./logs
tables:
  student: students
  employee: staff_members
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def employee_csv() -> str:
    return "\n".join([
        EMPLOYEE_HEADER,
        '"Dr. Jane Doe","EMP001","CS","Professor","FACULTY","2020-08-15","9876543210"',
        '"John Smith","EMP002","Admin","Clerk","STAFF","02/01/2021","9876543211"',
    ])


@pytest.fixture()
def student_csv() -> str:
    return "\n".join([
        STUDENT_HEADER,
        '"Asha Patil","12 College Road","2004-06-21","9876543210","PRN001","101","FIRST","MBBS"',
        '"Rahul Deshmukh","34 Hostel Block","25/12/2003","","PRN002","102","2023","MBBS"',
    ])


@pytest.fixture()
def write_csv(temp_workdir: Path):
    def _write(name: str, text: str) -> Path:
        p = temp_workdir / "data" / name
        p.write_text(text, encoding="utf-8")
        return p
    return _write
