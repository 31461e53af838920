from __future__ import annotations

from pathlib import Path

import pandas as pd

from ..models.import_result import ImportResult
from ..models.record_types import RecordType

"""Preview table for parsed records (pandas).

One row per accepted record, columns in the record type's canonical order
followed by any extra columns the file carried. Dates are rendered ISO so the
table can be written back to CSV and re-imported.
"""

__all__ = [
    "records_frame",
    "write_preview",
]


def records_frame(result: ImportResult, record_type: RecordType) -> pd.DataFrame:
    columns = list(record_type.columns)
    for record in result.records:
        for key in record.values:
            if key not in columns:
                columns.append(key)

    rows = []
    for record in result.records:
        row = {"row": record.row_number}
        for col in columns:
            val = record.values.get(col)
            row[col] = val.isoformat() if hasattr(val, "isoformat") else ("" if val is None else val)
        rows.append(row)
    return pd.DataFrame(rows, columns=["row", *columns])


def write_preview(result: ImportResult, record_type: RecordType, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    records_frame(result, record_type).to_csv(path, index=False, encoding="utf-8")
    return path
