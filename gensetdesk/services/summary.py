from __future__ import annotations

from ..models.equipment import AlertReport, Urgency
from ..models.import_result import ImportResult

"""SUMMARY line rendering.

Formats:
    SUMMARY rows=<n> accepted=<a> skipped=<s> inserted=<i> failed=<f> elapsed_sec=<e>
    SUMMARY alerts=<n> overdue=<o> urgent=<u> upcoming=<p> horizon_days=<h>
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.2f}".rstrip("0").rstrip(".")


def render_import_summary(result: ImportResult) -> str:
    """Render the SUMMARY line of an import run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2026, 1, 1, tzinfo=timezone.utc)
        >>> r = ImportResult(
        ...     source="clients.csv", processed_rows=5, accepted_rows=4, skipped_rows=1,
        ...     inserted_rows=3, failed_rows=1, start_time=t, end_time=t, elapsed_seconds=2.0,
        ... )
        >>> render_import_summary(r)
        'SUMMARY rows=5 accepted=4 skipped=1 inserted=3 failed=1 elapsed_sec=2'
    """
    return (
        f"SUMMARY rows={result.processed_rows} "
        f"accepted={result.accepted_rows} "
        f"skipped={result.skipped_rows} "
        f"inserted={result.inserted_rows} "
        f"failed={result.failed_rows} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )


def render_alert_summary(report: AlertReport) -> str:
    counts = report.counts_by_urgency()
    return (
        f"SUMMARY alerts={len(report.alerts)} "
        f"overdue={report.overdue_count} "
        f"urgent={counts[Urgency.URGENT]} "
        f"upcoming={counts[Urgency.UPCOMING]} "
        f"horizon_days={report.horizon_days}"
    )
