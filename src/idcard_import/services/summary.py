from __future__ import annotations

from ..models.import_result import ImportResult, RegistrationResult

"""SUMMARY line rendering for a bulk upload run.

Format:
SUMMARY files={files} records={valid} skipped_rows={skipped} cleared_fields={cleared}
errors={errors} registered={registered} outcome={outcome}

registered is "-" for dry runs (nothing handed to the store).
"""

__all__ = [
    "render_summary_line",
    "describe_outcome",
]


def describe_outcome(result: ImportResult) -> str:
    """Short human readable description, e.g. '12 records ready, 3 rows skipped, 1 field cleared'."""
    if result.has_structural_error:
        return result.errors[0].message
    parts = [f"{len(result.records)} record{'s' if len(result.records) != 1 else ''} ready"]
    if result.skipped_rows:
        parts.append(f"{result.skipped_rows} row{'s' if result.skipped_rows != 1 else ''} skipped")
    if result.cleared_fields:
        parts.append(f"{result.cleared_fields} field{'s' if result.cleared_fields != 1 else ''} cleared")
    return ", ".join(parts)


def render_summary_line(
    total_files: int,
    results: list[ImportResult],
    registrations: list[RegistrationResult] | None = None,
) -> str:
    records = sum(len(r.records) for r in results)
    skipped = sum(r.skipped_rows for r in results)
    cleared = sum(r.cleared_fields for r in results)
    errors = sum(len(r.errors) for r in results)
    if registrations is None:
        registered = "-"
    else:
        registered = str(sum(r.success_count for r in registrations))
        errors += sum(len(r.errors) for r in registrations)

    if records == 0:
        outcome = "failure"
    elif errors:
        outcome = "partial"
    else:
        outcome = "success"

    return (
        f"SUMMARY files={total_files} "
        f"records={records} "
        f"skipped_rows={skipped} "
        f"cleared_fields={cleared} "
        f"errors={errors} "
        f"registered={registered} "
        f"outcome={outcome}"
    )
