"""CSV reading for bulk uploads: tokenizing, cell rules, parsing and the template."""

from .parser import parse, parse_async, parse_records
from .template import render_template

__all__ = [
    "parse",
    "parse_async",
    "parse_records",
    "render_template",
]
