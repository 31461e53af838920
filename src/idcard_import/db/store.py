from __future__ import annotations

import json
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from ..models.record_types import RecordType

"""Storage port for bulk registration.

The registration service only talks to a RecordStore. Two adapters:

- InMemoryRecordStore: per-instance dict, used by tests and the CLI mock mode
- PostgresRecordStore: one table per record type holding the identifier and
  a JSONB document, written with psycopg2.extras.execute_values

Expected table shape (per record type):

    CREATE TABLE employees (
        id          bigserial PRIMARY KEY,
        identifier  text UNIQUE NOT NULL,
        document    jsonb NOT NULL,
        created_at  timestamptz NOT NULL DEFAULT now()
    );
"""

try:  # pragma: no cover - optional until psycopg2 present at runtime
    from psycopg2.extras import Json, execute_values
except ImportError:  # pragma: no cover
    Json = None  # type: ignore
    execute_values = None  # type: ignore

__all__ = [
    "StoreError",
    "RecordStore",
    "InMemoryRecordStore",
    "PostgresRecordStore",
    "BatchMetrics",
    "DEFAULT_TABLES",
]

DEFAULT_TABLES = {
    RecordType.STUDENT: "students",
    RecordType.EMPLOYEE: "employees",
}


class StoreError(Exception):
    pass


class RecordStore(Protocol):
    def exists(self, record_type: RecordType, identifier: str) -> bool: ...

    def insert_batch(self, record_type: RecordType, documents: Sequence[dict[str, Any]]) -> int: ...


@dataclass(frozen=True)
class BatchMetrics:
    """Timing for a single batch insert."""
    batch_size: int
    elapsed_seconds: float


class InMemoryRecordStore:
    """Dict backed store. Each instance owns its own data."""

    def __init__(self) -> None:
        self._documents: dict[RecordType, dict[str, dict[str, Any]]] = {t: {} for t in RecordType}

    def exists(self, record_type: RecordType, identifier: str) -> bool:
        return identifier in self._documents[record_type]

    def insert_batch(self, record_type: RecordType, documents: Sequence[dict[str, Any]]) -> int:
        field = record_type.identifier_field
        staged: dict[str, dict[str, Any]] = {}
        for doc in documents:
            ident = doc.get(field)
            if not ident:
                raise StoreError(f"document without {field}")
            if ident in self._documents[record_type] or ident in staged:
                raise StoreError(f"duplicate {field}: {ident}")
            staged[ident] = dict(doc)
        # all-or-nothing
        self._documents[record_type].update(staged)
        return len(staged)

    def get(self, record_type: RecordType, identifier: str) -> dict[str, Any] | None:
        return self._documents[record_type].get(identifier)

    def count(self, record_type: RecordType) -> int:
        return len(self._documents[record_type])


class PostgresRecordStore:
    """psycopg2 backed store.

    The connection owns the transaction: insert_batch commits on success and
    rolls back on failure, so a batch is all-or-nothing.
    """

    def __init__(
        self,
        connection: Any,
        tables: dict[RecordType, str] | None = None,
        page_size: int = 1000,
        metrics_callback: Callable[[BatchMetrics], None] | None = None,
    ) -> None:
        self._conn = connection
        self._tables = {**DEFAULT_TABLES, **(tables or {})}
        self._page_size = page_size
        self._metrics_callback = metrics_callback

    def _table(self, record_type: RecordType) -> str:
        table = self._tables[record_type]
        if not table.replace("_", "").isalnum():
            raise StoreError(f"invalid table name: {table}")
        return table

    def exists(self, record_type: RecordType, identifier: str) -> bool:
        table = self._table(record_type)
        try:
            with self._conn.cursor() as cur:
                cur.execute(f"SELECT 1 FROM {table} WHERE identifier = %s LIMIT 1", (identifier,))
                return cur.fetchone() is not None
        except Exception as e:
            raise StoreError(str(e)) from e

    def insert_batch(self, record_type: RecordType, documents: Sequence[dict[str, Any]]) -> int:
        if execute_values is None:
            raise StoreError("psycopg2 not available")
        if not documents:
            return 0
        table = self._table(record_type)
        field = record_type.identifier_field
        rows = [(doc[field], Json(doc, dumps=_dumps)) for doc in documents]

        start = time.time()
        try:
            with self._conn.cursor() as cur:
                execute_values(
                    cur,
                    f"INSERT INTO {table} (identifier, document) VALUES %s",
                    rows,
                    page_size=self._page_size,
                )
            self._conn.commit()
        except Exception as e:
            self._conn.rollback()
            raise StoreError(str(e)) from e
        finally:
            if self._metrics_callback is not None:
                self._metrics_callback(BatchMetrics(batch_size=len(rows), elapsed_seconds=time.time() - start))
        return len(rows)


def _dumps(obj: Any) -> str:
    # date / datetime は ISO 文字列で保存
    return json.dumps(obj, ensure_ascii=False, default=lambda v: v.isoformat() if hasattr(v, "isoformat") else str(v))
