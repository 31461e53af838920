from __future__ import annotations

import csv
from typing import Literal

"""Line tokenizers for CSV bulk upload files.

The default "naive" tokenizer splits on every comma, so a comma inside a
quoted value splits the cell (e.g. `"12 Main St, Pune"` becomes two cells).
Uploads produced from the downloadable template never contain such values,
and existing files rely on this behaviour, so it stays the default.
"quoted" is opt-in and honors double-quote quoting within a single line.
Quoted newlines are not supported by either mode since the file is split
into lines before tokenizing.
"""

__all__ = [
    "TokenizerMode",
    "split_header",
    "split_row",
]

TokenizerMode = Literal["naive", "quoted"]


def _cells(line: str, mode: TokenizerMode) -> list[str]:
    if mode == "naive":
        return line.split(",")
    if mode == "quoted":
        # 1 行のみ渡すので reader は高々 1 レコード
        return next(csv.reader([line], skipinitialspace=True), [])
    raise ValueError(f"unknown tokenizer mode: {mode!r}")


def split_header(line: str, mode: TokenizerMode = "naive") -> list[str]:
    """Tokenize the header line: trim every token and drop all quote characters."""
    return [c.strip().replace('"', "") for c in _cells(line, mode)]


def _strip_wrapping_quotes(cell: str) -> str:
    if cell.startswith('"'):
        cell = cell[1:]
    if cell.endswith('"'):
        cell = cell[:-1]
    return cell


def split_row(line: str, mode: TokenizerMode = "naive") -> list[str]:
    """Tokenize a data line: trim every token.

    In naive mode one wrapping quote is stripped on each side; in quoted mode
    the csv reader has already unquoted the cell (an escaped `""` comes back as `"`).
    """
    cells = [c.strip() for c in _cells(line, mode)]
    if mode == "naive":
        return [_strip_wrapping_quotes(c) for c in cells]
    return cells
