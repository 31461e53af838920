from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from idcard_import.db import store as store_mod
from idcard_import.db.store import InMemoryRecordStore, PostgresRecordStore, StoreError
from idcard_import.models import ParsedRecord, RecordType
from idcard_import.services.registration import bulk_register


class DummyCursor:
    def __init__(self, conn: "DummyConnection") -> None:
        self.conn = conn
        self._row = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        self.conn.queries.append((sql, params))
        self._row = (1,) if params and params[0] in self.conn.existing else None

    def fetchone(self):
        return self._row


class DummyConnection:
    def __init__(self, existing: set[str] | None = None) -> None:
        self.existing = existing or set()
        self.queries: list[tuple] = []
        self.commits = 0
        self.rollbacks = 0

    def cursor(self):
        return DummyCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


@pytest.fixture()
def captured_values(monkeypatch):
    calls: list[tuple] = []

    def fake_execute_values(cursor, sql, rows, page_size=1000):
        calls.append((sql, rows, page_size))

    monkeypatch.setattr(store_mod, "execute_values", fake_execute_values)
    monkeypatch.setattr(store_mod, "Json", lambda doc, dumps=None: dumps(doc))
    return calls


def test_in_memory_store_roundtrip():
    store = InMemoryRecordStore()
    assert not store.exists(RecordType.EMPLOYEE, "E1")
    assert store.insert_batch(RecordType.EMPLOYEE, [{"employeeId": "E1"}, {"employeeId": "E2"}]) == 2
    assert store.exists(RecordType.EMPLOYEE, "E1")
    assert not store.exists(RecordType.STUDENT, "E1")
    assert store.count(RecordType.EMPLOYEE) == 2
    assert store.get(RecordType.EMPLOYEE, "E2") == {"employeeId": "E2"}


def test_in_memory_store_batch_is_all_or_nothing():
    store = InMemoryRecordStore()
    store.insert_batch(RecordType.STUDENT, [{"prnNumber": "P1"}])
    with pytest.raises(StoreError):
        store.insert_batch(RecordType.STUDENT, [{"prnNumber": "P2"}, {"prnNumber": "P1"}])
    assert not store.exists(RecordType.STUDENT, "P2")


def test_in_memory_stores_are_independent():
    a, b = InMemoryRecordStore(), InMemoryRecordStore()
    a.insert_batch(RecordType.STUDENT, [{"prnNumber": "P1"}])
    assert not b.exists(RecordType.STUDENT, "P1")


def test_postgres_exists_uses_configured_table():
    conn = DummyConnection(existing={"EMP1"})
    store = PostgresRecordStore(conn, tables={RecordType.EMPLOYEE: "staff_members"})
    assert store.exists(RecordType.EMPLOYEE, "EMP1")
    assert not store.exists(RecordType.EMPLOYEE, "EMP2")
    assert "FROM staff_members" in conn.queries[0][0]


def test_postgres_insert_batch_commits(captured_values):
    from datetime import date

    conn = DummyConnection()
    metrics = []
    store = PostgresRecordStore(conn, page_size=50, metrics_callback=metrics.append)
    docs = [{"prnNumber": "P1", "dateOfBirth": date(2004, 6, 21)}]
    assert store.insert_batch(RecordType.STUDENT, docs) == 1
    sql, rows, page_size = captured_values[0]
    assert sql == "INSERT INTO students (identifier, document) VALUES %s"
    assert rows[0][0] == "P1"
    assert '"2004-06-21"' in rows[0][1]
    assert page_size == 50
    assert conn.commits == 1
    assert metrics[0].batch_size == 1


def test_postgres_insert_batch_rolls_back(monkeypatch):
    def boom(cursor, sql, rows, page_size=1000):
        raise RuntimeError("duplicate key value")

    monkeypatch.setattr(store_mod, "execute_values", boom)
    monkeypatch.setattr(store_mod, "Json", lambda doc, dumps=None: doc)
    conn = DummyConnection()
    store = PostgresRecordStore(conn)
    with pytest.raises(StoreError) as e:
        store.insert_batch(RecordType.EMPLOYEE, [{"employeeId": "E1"}])
    assert "duplicate key" in str(e.value)
    assert conn.rollbacks == 1
    assert conn.commits == 0


def test_postgres_empty_batch(captured_values):
    conn = DummyConnection()
    assert PostgresRecordStore(conn).insert_batch(RecordType.EMPLOYEE, []) == 0
    assert captured_values == []


def test_postgres_missing_driver(monkeypatch):
    monkeypatch.setattr(store_mod, "execute_values", None)
    with pytest.raises(StoreError):
        PostgresRecordStore(DummyConnection()).insert_batch(RecordType.EMPLOYEE, [{"employeeId": "E1"}])


def test_postgres_rejects_unsafe_table_name():
    store = PostgresRecordStore(DummyConnection(), tables={RecordType.STUDENT: "students; drop"})
    with pytest.raises(StoreError):
        store.exists(RecordType.STUDENT, "P1")


def _broken_connection() -> MagicMock:
    conn = MagicMock()
    conn.cursor.return_value.__enter__.return_value.execute.side_effect = RuntimeError(
        "server closed the connection"
    )
    return conn


def test_postgres_exists_wraps_driver_errors():
    store = PostgresRecordStore(_broken_connection())
    with pytest.raises(StoreError) as e:
        store.exists(RecordType.EMPLOYEE, "E1")
    assert "server closed the connection" in str(e.value)
    assert isinstance(e.value.__cause__, RuntimeError)


def test_lookup_failure_becomes_registration_error():
    store = PostgresRecordStore(_broken_connection())
    records = [ParsedRecord(1, {"fullName": "A", "employeeId": "E1"})]
    result = bulk_register(RecordType.EMPLOYEE, records, store)
    assert result.success_count == 0
    assert len(result.errors) == 1
    assert "Lookup failed for employeeId E1" in result.errors[0].message
