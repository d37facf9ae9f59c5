from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..db.client_store import insert_drafts, insert_drafts_batch
from ..importer.normalizer import normalize
from ..importer.reader import UnsupportedSourceError, read_rows, split_pasted_text
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.client import ClientDraft
from ..models.config_models import AppConfig
from ..models.import_result import ImportResult, InsertTally
from .progress import ProgressTracker

"""Bulk client import service.

Coordinates one import run:
1. extract raw rows (file or pasted text)
2. normalize them into drafts (parse-time skips counted)
3. persist each draft in a single transaction, rolling back only the rows
   the store rejects (or count them as inserted in mock mode, cursor=None)
4. flush the error log and return ImportResult for the SUMMARY line
"""

__all__ = [
    "PASTE_SOURCE",
    "ProcessingError",
    "load_source_rows",
    "run_import",
]

PASTE_SOURCE = "<paste>"

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal import error (source unreadable, transaction could not start)."""


def load_source_rows(source: Path | None, text: str | None = None) -> list[list[str]]:
    """Extract raw rows from pasted text or a file.

    Raises:
        ProcessingError: If neither is given or the file cannot be read
    """
    if text is not None:
        return split_pasted_text(text)
    if source is None:
        raise ProcessingError("nothing to import: give a file or pasted text")
    try:
        return read_rows(source)
    except (FileNotFoundError, UnsupportedSourceError) as e:
        raise ProcessingError(str(e)) from e
    except Exception as e:
        raise ProcessingError(f"failed reading {source.name}: {e}") from e


def _persist(
    cursor: Any,
    drafts: Sequence[ClientDraft],
    table: str,
    batch: bool,
) -> InsertTally:
    if batch:
        return insert_drafts_batch(cursor, drafts, table)

    with ProgressTracker(len(drafts)) as progress:
        return insert_drafts(
            cursor, drafts, table, on_result=lambda _i, ok: progress.advance(success=ok)
        )


def run_import(
    source: Path | None,
    config: AppConfig,
    cursor: Any = None,
    *,
    text: str | None = None,
    batch: bool = False,
    error_log: ErrorLogBuffer | None = None,
) -> ImportResult:
    """Import clients from a file or pasted text.

    Args:
        source: File to read (ignored when text is given)
        config: Application configuration (import defaults, table names)
        cursor: psycopg2 cursor; None runs in mock mode (nothing persisted)
        text: Pasted text to import instead of a file
        batch: Insert every draft in one statement (all-or-nothing)
        error_log: Buffer for rejected drafts (a fresh one if None)

    Returns:
        ImportResult with processed / accepted / skipped / inserted / failed

    Raises:
        ProcessingError: For errors that prevent the whole run
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    source_name = PASTE_SOURCE if text is not None else (source.name if source else PASTE_SOURCE)

    rows = load_source_rows(source, text)
    # reader output is already decoded
    normalized = normalize(rows, config.import_defaults, unquote=False)
    logger.info(
        "source=%s rows=%d accepted=%d skipped=%d",
        source_name,
        normalized.processed_rows,
        normalized.accepted_rows,
        normalized.skipped_rows,
    )

    drafts = normalized.drafts
    if cursor is None:
        logger.debug("mock mode: %d drafts not persisted", len(drafts))
        tally = InsertTally(inserted=len(drafts))
    elif not drafts:
        tally = InsertTally()
    else:
        try:
            cursor.execute("BEGIN")
        except Exception as e:
            error_log.append(
                ErrorRecord.create(
                    source=source_name, row=-1, error_type="TRANSACTION_BEGIN_ERROR", message=str(e)
                )
            )
            _flush(error_log)
            raise ProcessingError(f"failed to begin transaction: {e}") from e

        tally = _persist(cursor, drafts, config.tables.clients, batch)

        try:
            cursor.execute("COMMIT")
        except Exception as e:
            try:
                cursor.execute("ROLLBACK")
            except Exception:
                logger.debug("rollback after failed commit also failed", exc_info=True)
            error_log.append(
                ErrorRecord.create(
                    source=source_name, row=-1, error_type="TRANSACTION_COMMIT_ERROR", message=str(e)
                )
            )
            # nothing was kept
            tally = InsertTally(inserted=0, failed=len(drafts))

    for index, draft, message in tally.failures:
        error_log.append(
            ErrorRecord.create(
                source=source_name,
                row=index,
                error_type="CLIENT_INSERT_ERROR",
                message=f"{draft.name}: {message}",
            )
        )
    _flush(error_log)

    end_time = datetime.now(UTC)
    return ImportResult(
        source=source_name,
        processed_rows=normalized.processed_rows,
        accepted_rows=normalized.accepted_rows,
        skipped_rows=normalized.skipped_rows,
        inserted_rows=tally.inserted,
        failed_rows=tally.failed,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        dry_run=cursor is None,
    )


def _flush(error_log: ErrorLogBuffer) -> None:
    try:
        path = error_log.flush()
    except OSError as e:
        # reported, not raised
        logger.warning("could not write error log: %s", e)
        return
    if path is not None:
        logger.info("error log written: %s", path)
