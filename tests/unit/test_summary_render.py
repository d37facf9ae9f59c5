from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from gensetdesk.alerts.evaluator import evaluate
from gensetdesk.models.equipment import Equipment
from gensetdesk.models.import_result import ImportResult
from gensetdesk.services.summary import _format_seconds, render_alert_summary, render_import_summary


def _result(**kw) -> ImportResult:
    t = datetime(2026, 1, 1, tzinfo=UTC)
    base = dict(
        source="clients.csv",
        processed_rows=10,
        accepted_rows=8,
        skipped_rows=2,
        inserted_rows=7,
        failed_rows=1,
        start_time=t,
        end_time=t,
        elapsed_seconds=1.234,
    )
    base.update(kw)
    return ImportResult(**base)


def test_render_import_summary():
    assert render_import_summary(_result()) == (
        "SUMMARY rows=10 accepted=8 skipped=2 inserted=7 failed=1 elapsed_sec=1.23"
    )


@pytest.mark.parametrize(
    "value,expected",
    [(0, "0"), (3.0, "3"), (1.5, "1.5"), (0.001234, "0.001234"), (12.346, "12.35")],
)
def test_format_seconds(value, expected):
    assert _format_seconds(value) == expected


def test_render_alert_summary():
    today = date(2026, 3, 10)
    equipment = [
        Equipment(id=1, client_id=1, model="GE-100", next_service_date=date(2026, 3, 1)),
        Equipment(id=2, client_id=1, model="GE-100", next_service_date=date(2026, 3, 12)),
        Equipment(id=3, client_id=2, model="GE-200", next_service_date=date(2026, 3, 30)),
    ]
    report = evaluate(equipment, today, horizon_days=30)
    assert render_alert_summary(report) == (
        "SUMMARY alerts=3 overdue=1 urgent=1 upcoming=1 horizon_days=30"
    )
