#!/usr/bin/env python3
"""Synthetic bulk upload CSV generator.

Writes a student or employee CSV in the upload template layout (quoted
cells, no commas inside values) with a configurable share of broken rows:
bad dates and unknown employee types (row skipped) and short mobile numbers
(field cleared). Used for the perf test and for manual trials of the CLI.
"""
from __future__ import annotations

import argparse
import csv
import sys
from pathlib import Path

import numpy as np
import pandas as pd

FIRST_NAMES = ["Asha", "Rahul", "Priya", "Vikram", "Sneha", "Arjun", "Meera", "Kiran"]
LAST_NAMES = ["Patil", "Deshmukh", "Kulkarni", "Joshi", "Shinde", "Pawar"]
DEPARTMENTS = ["Anatomy", "Physiology", "Pharmacology", "Administration", "Library"]
DESIGNATIONS = ["Professor", "Lecturer", "Clerk", "Technician"]
COURSES = ["MBBS", "BDS", "BPTh", "BSc Nursing"]
BLOOD_GROUPS = ["A+", "A-", "B+", "B-", "O+", "O-", "AB+", "AB-"]


def _names(rng: np.random.Generator, rows: int) -> list[str]:
    first = rng.choice(FIRST_NAMES, rows)
    last = rng.choice(LAST_NAMES, rows)
    return [f"{a} {b}" for a, b in zip(first, last)]


def _dates(rng: np.random.Generator, rows: int, start: str, end: str) -> list[str]:
    days = pd.date_range(start, end, freq="D")
    picked = pd.DatetimeIndex(rng.choice(days.values, rows))
    # ISO と MM/dd/yyyy を混在させる
    return [d.strftime("%Y-%m-%d") if i % 2 == 0 else d.strftime("%m/%d/%Y") for i, d in enumerate(picked)]


def _phones(rng: np.random.Generator, rows: int) -> list[str]:
    return [str(n) for n in rng.integers(7_000_000_000, 9_999_999_999, rows)]


def generate_frame(record_type: str, rows: int, invalid_ratio: float = 0.0, seed: int = 42) -> pd.DataFrame:
    """Build a DataFrame of synthetic upload rows.

    Args:
        record_type: "student" or "employee"
        rows: number of data rows
        invalid_ratio: share of rows (0..1) that get one injected problem
        seed: random seed for reproducible data
    """
    rng = np.random.default_rng(seed)
    if record_type == "employee":
        df = pd.DataFrame({
            "fullName": _names(rng, rows),
            "employeeId": [f"EMP{i:06d}" for i in range(1, rows + 1)],
            "department": rng.choice(DEPARTMENTS, rows),
            "designation": rng.choice(DESIGNATIONS, rows),
            "employeeType": rng.choice(["FACULTY", "STAFF"], rows),
            "dateOfJoining": _dates(rng, rows, "2000-01-01", "2024-12-31"),
            "mobileNumber": _phones(rng, rows),
            "bloodGroup": rng.choice(BLOOD_GROUPS, rows),
        })
        date_col = "dateOfJoining"
    elif record_type == "student":
        df = pd.DataFrame({
            "fullName": _names(rng, rows),
            "dateOfBirth": _dates(rng, rows, "1998-01-01", "2007-12-31"),
            "mobileNumber": _phones(rng, rows),
            "prnNumber": [f"PRN{i:07d}" for i in range(1, rows + 1)],
            "rollNumber": [str(i) for i in range(1, rows + 1)],
            "yearOfJoining": rng.choice(["2021", "2022", "2023", "2024"], rows),
            "courseName": rng.choice(COURSES, rows),
            "bloodGroup": rng.choice(BLOOD_GROUPS, rows),
        })
        date_col = "dateOfBirth"
    else:
        raise ValueError(f"unknown record type: {record_type}")

    broken = np.flatnonzero(rng.random(rows) < invalid_ratio)
    for n, idx in enumerate(broken):
        problem = n % 3
        if problem == 0:
            df.at[idx, date_col] = "2023-13-45"
        elif problem == 1 and record_type == "employee":
            df.at[idx, "employeeType"] = "CONTRACTOR"
        else:
            df.at[idx, "mobileNumber"] = "12345"
    return df


def write_csv(df: pd.DataFrame, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic ID card upload CSVs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s data/staff.csv --type employee --rows 5000
  %(prog)s data/students.csv --type student --rows 20000 --invalid-ratio 0.05
        """,
    )
    parser.add_argument("output", type=Path, help="Output CSV path")
    parser.add_argument("--type", dest="record_type", choices=["student", "employee"], required=True)
    parser.add_argument("--rows", type=int, default=1_000, help="Number of data rows (default: 1,000)")
    parser.add_argument("--invalid-ratio", type=float, default=0.0, help="Share of broken rows, 0..1")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if not 0.0 <= args.invalid_ratio <= 1.0:
        print("Error: --invalid-ratio must be between 0 and 1", file=sys.stderr)
        return 1

    df = generate_frame(args.record_type, args.rows, args.invalid_ratio, args.seed)
    write_csv(df, args.output)
    print(f"Created CSV file: {args.output}")
    print(f"  Type: {args.record_type}")
    print(f"  Rows: {args.rows:,}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
