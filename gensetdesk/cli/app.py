from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from ..alerts.dashboard import compute_dashboard
from ..alerts.evaluator import evaluate
from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..db.client_store import fetch_clients, fetch_equipment, fetch_services
from ..importer.normalizer import normalize
from ..importer.reader import UnsupportedSourceError, read_equipment_file
from ..logging.init import get_logger, log_summary, set_debug, setup_logging
from ..models.config_models import AppConfig, DatabaseConfig
from ..services.export import default_export_name, export_clients_csv
from ..services.locations import build_location_snapshot
from ..services.import_service import ProcessingError, load_source_rows, run_import
from ..services.summary import render_alert_summary, render_import_summary

"""Command line entry point.

    python -m gensetdesk.cli import clients.xlsx
    python -m gensetdesk.cli import --paste < list.txt
    python -m gensetdesk.cli alerts --horizon 30
    python -m gensetdesk.cli dashboard
    python -m gensetdesk.cli locations --province Misiones
    python -m gensetdesk.cli export-clients --output out.csv

Exit codes: 0 success, 2 some drafts rejected by the store, 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _resolve_dsn(db_cfg: DatabaseConfig) -> str:
    """Connection string, environment first, then the config file.

    1. DATABASE_URL / PGDSN (whole DSN)
    2. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE per field
    3. database section of the config for whatever is still missing
    """
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def _db_connection(cfg: AppConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Yield a psycopg2 cursor; commits on normal exit, always closes."""
    conn = psycopg2.connect(_resolve_dsn(cfg.database))
    conn.autocommit = False
    try:
        cur = conn.cursor()
        try:
            yield cur
            if not conn.closed:
                conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cur.close()
    finally:
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so its connection settings win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date (YYYY-MM-DD): {value}") from e


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="gensetdesk", description="Generator maintenance back office tools"
    )
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config file")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Bulk import clients from a list")
    imp.add_argument("source", nargs="?", type=Path, help=".txt/.tsv/.csv/.xlsx/.docx file")
    imp.add_argument("--paste", action="store_true", help="Read pasted text from stdin")
    imp.add_argument("--batch", action="store_true", help="Insert all drafts in one statement")
    imp.add_argument("--dry-run", action="store_true", help="Normalize only, write nothing")
    imp.add_argument("--inspect", action="store_true", help="Print the first rows and drafts then exit")

    al = sub.add_parser("alerts", help="List overdue / upcoming maintenance")
    al.add_argument("--today", type=_parse_date, default=None, help="Reference date (YYYY-MM-DD)")
    al.add_argument("--horizon", type=int, default=None, help="Look-ahead window in days")
    al.add_argument("--from-file", type=Path, default=None, help="Equipment CSV/Excel instead of the DB")

    dash = sub.add_parser("dashboard", help="Print dashboard counters")
    dash.add_argument("--today", type=_parse_date, default=None, help="Reference date (YYYY-MM-DD)")

    loc = sub.add_parser("locations", help="List remembered provinces and cities")
    loc.add_argument("--province", default=None, help="Only this province's cities")

    ex = sub.add_parser("export-clients", help="Export the client list as CSV")
    ex.add_argument("--output", type=Path, default=None, help="Output CSV path")
    return p.parse_args(argv)


def _inspect_import(args: argparse.Namespace, cfg: AppConfig, text: str | None) -> int:
    rows = load_source_rows(args.source, text)
    normalized = normalize(rows, cfg.import_defaults, unquote=False)
    print(f"rows={normalized.processed_rows} accepted={normalized.accepted_rows} skipped={normalized.skipped_rows}")
    for raw in rows[:5]:
        print(f"  raw: {raw}")
    for draft in normalized.drafts[:5]:
        print(f"  draft: {draft.to_record()}")
    return EXIT_SUCCESS_ALL


def _cmd_import(args: argparse.Namespace, cfg: AppConfig) -> int:
    logger = get_logger()
    if args.source is None and not args.paste:
        logger.error("import: give a source file or --paste")
        return EXIT_FATAL
    text = sys.stdin.read() if args.paste else None

    try:
        if args.inspect:
            return _inspect_import(args, cfg, text)
        if args.dry_run:
            result = run_import(args.source, cfg, cursor=None, text=text)
        else:
            with _db_connection(cfg) as cur:
                result = run_import(args.source, cfg, cursor=cur, text=text, batch=args.batch)
    except ProcessingError as e:
        logger.error(f"import: {e}")
        return EXIT_FATAL
    except psycopg2.Error as e:
        logger.error(f"database: {e}")
        return EXIT_FATAL

    mode = "dry-run" if result.dry_run else "live"
    logger.info(f"mode={mode} inserted={result.inserted_rows} failed={result.failed_rows}")
    if result.failed_rows:
        logger.warning(f"{result.failed_rows} clients were rejected (possibly duplicates)")
    log_summary(render_import_summary(result)[len("SUMMARY "):])
    return EXIT_PARTIAL_FAILURE if result.partial_failure else EXIT_SUCCESS_ALL


def _cmd_alerts(args: argparse.Namespace, cfg: AppConfig) -> int:
    logger = get_logger()
    today = args.today or date.today()
    horizon = args.horizon if args.horizon is not None else cfg.alerts.horizon_days
    if horizon < 0:
        logger.error(f"alerts: horizon must be >= 0 (got {horizon})")
        return EXIT_FATAL
    try:
        if args.from_file is not None:
            equipment = read_equipment_file(args.from_file)
        else:
            with _db_connection(cfg) as cur:
                equipment = fetch_equipment(cur, cfg.tables.equipment, cfg.tables.clients)
    except (FileNotFoundError, UnsupportedSourceError) as e:
        logger.error(f"alerts: {e}")
        return EXIT_FATAL
    except psycopg2.Error as e:
        logger.error(f"database: {e}")
        return EXIT_FATAL

    report = evaluate(equipment, today, horizon, urgent_days=cfg.alerts.urgent_days)
    for entry in report.alerts:
        eq = entry.equipment
        logger.info(
            f"alert due={entry.next_service_date.isoformat()} urgency={entry.urgency.value} "
            f"days={entry.days_delta} id={eq.id} model={eq.model} "
            f"client={eq.client_name or '-'} city={eq.client_city or '-'}"
        )
    log_summary(render_alert_summary(report)[len("SUMMARY "):])
    return EXIT_SUCCESS_ALL


def _cmd_dashboard(args: argparse.Namespace, cfg: AppConfig) -> int:
    logger = get_logger()
    today = args.today or date.today()
    try:
        with _db_connection(cfg) as cur:
            clients = fetch_clients(cur, cfg.tables.clients)
            equipment = fetch_equipment(cur, cfg.tables.equipment, cfg.tables.clients)
            services = fetch_services(cur, cfg.tables.services)
    except psycopg2.Error as e:
        logger.error(f"database: {e}")
        return EXIT_FATAL

    stats = compute_dashboard(
        clients, equipment, services, today, cfg.alerts.horizon_days, cfg.alerts.urgent_days
    )
    log_summary(
        f"clients={stats.total_clients} services_this_month={stats.services_this_month} "
        f"in_maintenance={stats.clients_in_maintenance} equipment={stats.total_equipment} "
        f"overdue={stats.overdue_count} alerts={stats.alert_count}"
    )
    return EXIT_SUCCESS_ALL


def _cmd_locations(args: argparse.Namespace, cfg: AppConfig) -> int:
    logger = get_logger()
    defaults = cfg.import_defaults
    try:
        with _db_connection(cfg) as cur:
            clients = fetch_clients(cur, cfg.tables.clients)
    except psycopg2.Error as e:
        logger.error(f"database: {e}")
        return EXIT_FATAL

    snapshot = build_location_snapshot(
        clients,
        ignore=(defaults.unknown_placeholder, defaults.missing_placeholder),
        seed={defaults.fallback_province: ()},
    )
    if args.province and not snapshot.is_known(args.province):
        logger.warning(f"province {args.province} is not used by any client yet")
    provinces = [args.province] if args.province else list(snapshot.provinces)
    for province in provinces:
        logger.info(f"province={province} cities={', '.join(snapshot.cities(province)) or '-'}")
    city_count = sum(len(snapshot.cities(p)) for p in snapshot.provinces)
    log_summary(f"provinces={len(snapshot.provinces)} cities={city_count}")
    return EXIT_SUCCESS_ALL


def _cmd_export(args: argparse.Namespace, cfg: AppConfig) -> int:
    logger = get_logger()
    output = args.output or Path(default_export_name(date.today()))
    try:
        with _db_connection(cfg) as cur:
            clients = fetch_clients(cur, cfg.tables.clients)
    except psycopg2.Error as e:
        logger.error(f"database: {e}")
        return EXIT_FATAL
    if not clients:
        logger.error("export: no clients to export")
        return EXIT_FATAL
    written = export_clients_csv(clients, output)
    logger.info(f"exported {written} clients to {output}")
    return EXIT_SUCCESS_ALL


_COMMANDS = {
    "import": _cmd_import,
    "alerts": _cmd_alerts,
    "dashboard": _cmd_dashboard,
    "locations": _cmd_locations,
    "export-clients": _cmd_export,
}


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # only read sys.argv when called without arguments (tests pass lists)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_debug(True)
        logger.debug("debug mode enabled")

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    return _COMMANDS[args.command](args, cfg)
