from __future__ import annotations

from ..models.record_types import RecordType

"""Downloadable CSV template for bulk upload.

Header row = the record type's canonical columns, followed by two example
rows with every cell double-quoted. Example cells must not contain commas
or quotes (the default tokenizer splits on commas); render_template raises
ValueError when one does.
"""

__all__ = [
    "render_template",
    "template_filename",
]


def template_filename(record_type: RecordType) -> str:
    return f"{record_type.label}_upload_template.csv"


def render_template(record_type: RecordType) -> str:
    columns = record_type.columns
    lines = [",".join(columns)]
    for row in record_type.template_rows:
        if len(row) != len(columns):
            raise ValueError(f"template row for {record_type.label} has {len(row)} cells, expected {len(columns)}")
        for column, cell in zip(columns, row):
            if "," in cell or '"' in cell:
                raise ValueError(f"template cell {column}={cell!r} for {record_type.label} must not contain ',' or '\"'")
        lines.append(",".join(f'"{cell}"' for cell in row))
    return "\n".join(lines)
