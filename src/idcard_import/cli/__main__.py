from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, ImportConfig, load_config
from ..csvio.parser import parse_records
from ..csvio.template import render_template, template_filename
from ..db.store import InMemoryRecordStore, PostgresRecordStore, RecordStore
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, setup_logging
from ..models.import_result import ImportResult, RegistrationResult
from ..models.record_types import RecordType
from ..services.preview import write_preview
from ..services.progress import ProgressTracker
from ..services.registration import bulk_register, merge_errors
from ..services.summary import describe_outcome, render_summary_line

"""CLI entrypoint: `idcard-import`.

Flow:
- Load .env (overrides existing environment) and config/import.yml (optional)
- Parse each CSV file with the selected record type, optionally write a preview table
- Register the valid records (unless --dry-run)
- Log parse errors and registration rejections per file and buffer them
  for the JSON Lines error log
- Print one SUMMARY line, flush the error log

Exit codes: 0 all good, 2 partial (some rows skipped / rejected), 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


@contextmanager
def _db_connection(cfg: ImportConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Yield a psycopg2 connection.

    Resolution order: DATABASE_URL / PGDSN, then PG* variables, then the
    config database section.
    """
    import psycopg2

    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if not dsn:
        host = os.getenv("PGHOST", db_cfg.host or "localhost")
        port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
        user = os.getenv("PGUSER", db_cfg.user or "postgres")
        password = os.getenv("PGPASSWORD", db_cfg.password or "")
        database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
        dsn = f"host={host} port={port} user={user} dbname={database}"
        if password:
            dsn += f" password={password}"

    conn = psycopg2.connect(dsn)
    conn.autocommit = False
    try:
        yield conn
    finally:
        conn.close()


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="idcard-import", description="Bulk CSV import for student / employee ID cards")
    p.add_argument("files", nargs="*", type=Path, help="CSV files to import")
    p.add_argument("--type", dest="record_type", required=True, choices=[t.value for t in RecordType])
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path")
    p.add_argument("--dry-run", action="store_true", help="Parse and validate only, do not register")
    p.add_argument("--preview-out", type=Path, help="Write parsed records to this CSV (single file only)")
    p.add_argument("--template", action="store_true", help="Write the upload template and exit")
    p.add_argument("--out", type=Path, help="Template output path (default: <type>_upload_template.csv)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _load_settings(path: Path, logger: Any) -> ImportConfig:
    if not path.exists():
        logger.debug(f"config not found, using defaults: {path}")
        return ImportConfig()
    return load_config(path)


def _write_template(record_type: RecordType, out: Path | None, logger: Any) -> int:
    target = out or Path(template_filename(record_type))
    target.write_text(render_template(record_type) + "\n", encoding="utf-8")
    logger.info(f"template written: {target}")
    return EXIT_SUCCESS_ALL


def _import_files(
    files: list[Path],
    record_type: RecordType,
    cfg: ImportConfig,
    store: RecordStore | None,
    error_log: ErrorLogBuffer,
    preview_out: Path | None,
    logger: Any,
) -> tuple[list[ImportResult], list[RegistrationResult], bool]:
    results: list[ImportResult] = []
    registrations: list[RegistrationResult] = []
    unreadable = False

    with ProgressTracker(len(files)) as progress:
        for path in files:
            progress.start_file(path)
            try:
                text = path.read_text(encoding="utf-8-sig")
            except OSError as e:
                logger.error(f"cannot read {path}: {e}")
                unreadable = True
                progress.finish_file()
                continue

            result = parse_records(text, record_type, tokenizer=cfg.tokenizer)  # type: ignore[arg-type]
            results.append(result)
            logger.info(f"{path.name}: {describe_outcome(result)}")

            if preview_out is not None:
                write_preview(result, record_type, preview_out)
                logger.info(f"preview written: {preview_out}")

            reg: RegistrationResult | None = None
            if store is not None and result.records:
                reg = bulk_register(record_type, result.records, store)
                registrations.append(reg)

            problems = merge_errors(result, reg)
            error_log.extend(path.name, problems)
            for err in problems:
                if err.is_fatal:
                    logger.error(f"{path.name}: {err.message}")
                else:
                    logger.warning(f"{path.name}: {err.message}")

            progress.finish_file(records=len(result.records), errors=len(problems))

    return results, registrations, unreadable


def _exit_code(results: list[ImportResult], registrations: list[RegistrationResult], unreadable: bool) -> int:
    if unreadable or not results:
        return EXIT_FATAL
    if any(r.has_structural_error for r in results) or sum(len(r.records) for r in results) == 0:
        return EXIT_FATAL
    if any(r.errors for r in results) or any(r.errors for r in registrations):
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    # .env を最優先で読み込む
    load_dotenv(dotenv_path=Path(".env"), override=True)

    record_type = RecordType.from_name(args.record_type)
    if args.template:
        return _write_template(record_type, args.out, logger)

    if not args.files:
        logger.error("no input files given")
        return EXIT_FATAL
    if args.preview_out is not None and len(args.files) > 1:
        logger.error("--preview-out accepts a single input file")
        return EXIT_FATAL

    try:
        cfg = _load_settings(args.config, logger)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    error_log = ErrorLogBuffer(cfg.log_directory)

    def run(store: RecordStore | None) -> tuple[list[ImportResult], list[RegistrationResult], bool]:
        return _import_files(args.files, record_type, cfg, store, error_log, args.preview_out, logger)

    mode = "dry-run"
    if args.dry_run:
        results, registrations, unreadable = run(None)
    elif os.getenv("DISABLE_DB_CONNECT") == "1":
        mode = "memory"
        logger.debug("DB connect disabled via DISABLE_DB_CONNECT=1 -> in-memory store")
        results, registrations, unreadable = run(InMemoryRecordStore())
    else:
        try:
            with _db_connection(cfg) as conn:
                mode = "live"
                results, registrations, unreadable = run(PostgresRecordStore(conn, tables=cfg.tables))
        except Exception as db_e:
            if mode == "live":
                raise
            logger.info(f"DB connection failed -> fallback to in-memory store: {db_e}")
            mode = "memory"
            results, registrations, unreadable = run(InMemoryRecordStore())

    log_path = error_log.flush()
    if log_path is not None:
        logger.info(f"error log: {log_path}")
    logger.debug(f"mode={mode}")

    summary_line = render_summary_line(len(args.files), results, None if args.dry_run else registrations)
    log_summary(summary_line[len("SUMMARY "):])
    return _exit_code(results, registrations, unreadable)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
