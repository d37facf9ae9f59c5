from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from ..models.client import Client, ClientDraft
from ..models.equipment import Equipment, Service
from ..models.import_result import InsertTally
from .batch_insert import BatchInsertError, batch_insert

"""Store access for clients, equipment and services (psycopg2 cursor).

Inserts run one draft at a time, each inside its own SAVEPOINT, so a rejected
row (unique constraint on the client name, NOT NULL, ...) is rolled back alone
and the remaining drafts still go in. The caller owns the outer transaction.
"""

__all__ = [
    "CLIENT_COLUMNS",
    "ClientInsertError",
    "insert_draft",
    "insert_drafts",
    "insert_drafts_batch",
    "fetch_clients",
    "fetch_equipment",
    "fetch_services",
]

CLIENT_COLUMNS: tuple[str, ...] = ("name", "province", "city", "address", "phone", "status")

_SAVEPOINT = "client_draft"

logger = logging.getLogger(__name__)


class ClientInsertError(Exception):
    """Raised when the store rejects a single draft."""


def insert_draft(cursor: Any, draft: ClientDraft, table: str = "clients") -> None:
    """Insert one draft inside a savepoint; rolls back to it on failure.

    Raises:
        ClientInsertError: If the store rejects the row
    """
    record = draft.to_record()
    cols_sql = ",".join(f'"{c}"' for c in CLIENT_COLUMNS)
    placeholders = ",".join(["%s"] * len(CLIENT_COLUMNS))
    sql = f"INSERT INTO {table} ({cols_sql}) VALUES ({placeholders})"

    cursor.execute(f"SAVEPOINT {_SAVEPOINT}")
    try:
        cursor.execute(sql, tuple(record[c] for c in CLIENT_COLUMNS))
    except Exception as e:
        try:
            cursor.execute(f"ROLLBACK TO SAVEPOINT {_SAVEPOINT}")
        except Exception:
            logger.debug("rollback to savepoint failed", exc_info=True)
        raise ClientInsertError(str(e).strip()) from e
    cursor.execute(f"RELEASE SAVEPOINT {_SAVEPOINT}")


def insert_drafts(
    cursor: Any,
    drafts: Sequence[ClientDraft],
    table: str = "clients",
    on_result: Callable[[int, bool], None] | None = None,
) -> InsertTally:
    """Insert drafts one by one, tallying successes and failures.

    Args:
        cursor: psycopg2 cursor (inside an open transaction)
        drafts: Drafts in normalizer order
        table: Target table
        on_result: Called with (1-based draft index, success) after each row

    Returns:
        InsertTally; a failure never stops later drafts
    """
    tally = InsertTally()
    for index, draft in enumerate(drafts, start=1):
        try:
            insert_draft(cursor, draft, table)
        except ClientInsertError as e:
            tally.record_failure(index, draft, str(e))
            logger.warning("draft=%d name=%r rejected: %s", index, draft.name, e)
            ok = False
        else:
            tally.record_success()
            ok = True
        if on_result is not None:
            on_result(index, ok)
    return tally


def insert_drafts_batch(
    cursor: Any, drafts: Sequence[ClientDraft], table: str = "clients"
) -> InsertTally:
    """All-or-nothing variant: one execute_values call for every draft."""
    tally = InsertTally()
    rows = [[d.to_record()[c] for c in CLIENT_COLUMNS] for d in drafts]
    try:
        result = batch_insert(cursor, table, CLIENT_COLUMNS, rows)
    except BatchInsertError as e:
        for index, draft in enumerate(drafts, start=1):
            tally.record_failure(index, draft, str(e))
        logger.warning("batch insert of %d drafts rejected: %s", len(drafts), e)
        return tally
    tally.inserted = result.inserted_rows
    return tally


def _fetch_records(cursor: Any, sql: str) -> list[dict[str, Any]]:
    cursor.execute(sql)
    names = [d[0] for d in (cursor.description or [])]
    return [dict(zip(names, row, strict=False)) for row in cursor.fetchall()]


def fetch_clients(cursor: Any, table: str = "clients") -> list[Client]:
    records = _fetch_records(
        cursor,
        f"SELECT id, name, province, city, address, phone, status, created_at "
        f"FROM {table} ORDER BY created_at DESC",
    )
    return [Client.from_record(r) for r in records]


def fetch_equipment(
    cursor: Any, table: str = "equipment", clients_table: str = "clients"
) -> list[Equipment]:
    """Equipment joined to its owning client's display name / city."""
    records = _fetch_records(
        cursor,
        f"SELECT e.id, e.client_id, e.model, e.type, e.next_service_date, "
        f"c.name AS client_name, c.city AS client_city "
        f"FROM {table} e LEFT JOIN {clients_table} c ON c.id = e.client_id",
    )
    return [Equipment.from_record(r) for r in records]


def fetch_services(cursor: Any, table: str = "services") -> list[Service]:
    records = _fetch_records(
        cursor,
        f"SELECT id, client_id, equipment_id, date, description, technician FROM {table}",
    )
    return [Service.from_record(r) for r in records]
