from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

from ..models.validation_error import ValidationError

"""Error log buffering (JSON Lines).

- One file per run: `<log_directory>/errors-YYYYMMDD-HHMMSS.log` (UTC)
- Each line: timestamp, file plus the ValidationError fields
- Records are buffered and appended on flush(); nothing is written when the
  buffer is empty
"""

__all__ = [
    "ErrorLogBuffer",
]

TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer of (source file, error) pairs. flush() writes JSON Lines."""

    def __init__(self, log_directory: Path | str = Path("./logs")) -> None:
        self._log_directory = Path(log_directory)
        self._records: list[tuple[str, ValidationError]] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._log_directory / f"errors-{stamp}.log"
        return self._file_path

    def append(self, source: str, error: ValidationError) -> None:
        self._records.append((source, error))

    def extend(self, source: str, errors: list[ValidationError] | tuple[ValidationError, ...]) -> None:
        for e in errors:
            self.append(source, e)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        if not self._records:
            return None
        fp = self.file_path
        fp.parent.mkdir(parents=True, exist_ok=True)
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        with fp.open("a", encoding="utf-8") as f:
            for source, err in self._records:
                line = {"timestamp": ts, "file": source, **json.loads(err.to_json_line())}
                f.write(json.dumps(line, ensure_ascii=False) + "\n")
        self._records.clear()
        return fp
