from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from roster_import.config.loader import DEFAULT_CONFIG_PATH, ConfigError, ImportConfig, load_config, load_env_file
from roster_import.logging.error_log import ErrorLogBuffer
from roster_import.logging.init import get_logger, log_summary, setup_logging
from roster_import.mapping.catalog import available_fields
from roster_import.mapping.field_mapper import map_fields
from roster_import.parsing.csv_reader import CsvFormatError, read_csv_file
from roster_import.services.importer import list_imported_users
from roster_import.services.orchestrator import ProcessingError, preview_file, process_all, scan_csv_files
from roster_import.services.summary import render_summary_line
from roster_import.store.base import StoreError
from roster_import.store.factory import build_store

"""CLI entrypoint.

Flow:
- Load .env (overrides the process environment) and config/import.yml
- Collect CSV files (arguments, or the configured source directory)
- Import every file into the configured store, then print the SUMMARY line
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

INSPECT_SAMPLE_ROWS = 3


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="roster-import", description="CSV -> user store bulk importer")
    p.add_argument("files", nargs="*", type=Path, help="CSV files (default: all *.csv in source_directory)")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Config file path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--dry-run", action="store_true", help="Validate only; do not touch the store")
    p.add_argument("--inspect-data", action="store_true", help="Print headers & first mapped rows then exit")
    p.add_argument("--list-fields", action="store_true", help="Print the canonical field catalog then exit")
    p.add_argument("--list-imported", action="store_true", help="Print users in the store, newest first, then exit")
    p.add_argument("--json", action="store_true", help="Print each file's import result as JSON")
    return p.parse_args(argv)


def _list_fields() -> int:
    for info in available_fields():
        flag = "required" if info.required else "optional"
        print(f"{info.field}\t{info.label}\t{flag}\t{','.join(info.aliases)}")
    return EXIT_SUCCESS_ALL


def _list_imported(cfg: ImportConfig, as_json: bool) -> int:
    logger = get_logger()
    try:
        store = build_store(cfg.store)
        try:
            users = asyncio.run(list_imported_users(store))
        finally:
            store.close()
    except StoreError as e:
        logger.error(f"store: {e}")
        return EXIT_FATAL
    if as_json:
        print(json.dumps([u.to_dict() for u in users], ensure_ascii=False, indent=2, default=str))
    else:
        for u in users:
            print(f"{u.id}\t{u.email}\t{u.first_name} {u.last_name}\t{u.status}\t{u.created_at}")
    logger.info(f"{len(users)} user(s) in store")
    return EXIT_SUCCESS_ALL


def _inspect_data(files: list[Path], cfg: ImportConfig) -> int:
    if not files:
        print("inspect: no .csv files")
        return EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f.name}")
        try:
            records = read_csv_file(f)
        except (CsvFormatError, OSError, UnicodeDecodeError) as e:
            print(f"  read_error: {e}")
            continue
        headers = list(records[0].keys()) if records else []
        print(f"  headers={headers}")
        sample = records[:INSPECT_SAMPLE_ROWS]
        for raw, user in zip(sample, map_fields(sample, cfg.field_mappings), strict=True):
            print(f"    row={raw.row_number} mapped={user.as_dict(include_extras=True)}")
    return EXIT_SUCCESS_ALL


def _dry_run(files: list[Path], cfg: ImportConfig) -> int:
    logger = get_logger()
    exit_code = EXIT_SUCCESS_ALL
    for f in files:
        try:
            outcome = preview_file(f, cfg.field_mappings)
        except (CsvFormatError, OSError, UnicodeDecodeError) as e:
            logger.error(f"file={f.name} cannot be imported: {e}")
            exit_code = EXIT_PARTIAL_FAILURE
            continue
        logger.info(f"file={f.name} valid={len(outcome.valid_users)} invalid={len(outcome.errors)}")
        for err in outcome.errors:
            logger.info(f"file={f.name} row={err.row} email={err.email} error={err.error}")
        if outcome.errors or not outcome.valid_users:
            exit_code = EXIT_PARTIAL_FAILURE
    return exit_code


def _collect_files(args: argparse.Namespace, cfg: ImportConfig) -> list[Path]:
    if args.files:
        missing = [p for p in args.files if not p.is_file()]
        if missing:
            raise ProcessingError(f"file not found: {missing[0]}")
        return list(args.files)
    return scan_csv_files(Path(cfg.source_directory))


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみ sys.argv を読む (テストで main([]) を渡せるように)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        setup_logging(debug=True)
        logger.debug("debug mode enabled")

    if args.list_fields:
        return _list_fields()

    load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.list_imported:
        return _list_imported(cfg, args.json)

    try:
        files = _collect_files(args, cfg)
    except ProcessingError as e:
        logger.error(f"{e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(files, cfg)

    logger.info(f"Processing {len(files)} file(s)")
    if args.dry_run:
        return _dry_run(files, cfg)

    try:
        store = build_store(cfg.store)
    except StoreError as e:
        logger.error(f"store: {e}")
        return EXIT_FATAL

    error_log = ErrorLogBuffer(cfg.error_log_dir)
    try:
        result, outcomes = asyncio.run(process_all(files, cfg, store, error_log=error_log))
    finally:
        store.close()

    if args.json:
        payload = [
            {"file": o.stat.file_name, "result": o.result.to_dict() if o.result else None, "error": o.stat.error}
            for o in outcomes
        ]
        print(json.dumps(payload, ensure_ascii=False, indent=2, default=str))

    summary_line = render_summary_line(result)
    # log_summary adds the "SUMMARY " label itself
    log_summary(summary_line.removeprefix("SUMMARY "))

    if result.partial_files > 0 or result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
