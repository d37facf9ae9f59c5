from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, datetime
from typing import Any

import pandas as pd

from ..models.equipment import AlertEntry, AlertReport, Equipment, Urgency

"""Maintenance alert evaluator.

Classifies equipment by next service date relative to an injected ``today``:

    days_delta < 0                      -> Overdue (always listed, always counted)
    0 <= days_delta <= urgent_days      -> Urgent
    urgent_days < days_delta <= horizon -> Upcoming
    days_delta > horizon                -> not listed

Equipment without a usable date is left out of the list and the count.
"""

__all__ = [
    "DEFAULT_HORIZON_DAYS",
    "DEFAULT_URGENT_DAYS",
    "coerce_date",
    "classify",
    "evaluate",
]

DEFAULT_HORIZON_DAYS = 30
DEFAULT_URGENT_DAYS = 7

logger = logging.getLogger(__name__)


def coerce_date(value: Any) -> date | None:
    """Return the calendar date carried by value, or None if there is none.

    Accepts date, datetime / pandas Timestamp (time of day dropped) and
    strings pandas can parse. Empty, NaN/NaT and unparseable values give None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):  # Timestamp is a datetime subclass
        if pd.isna(value):
            return None
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        if not value.strip():
            return None
        parsed = pd.to_datetime(value.strip(), errors="coerce")
        if pd.isna(parsed):
            return None
        return parsed.date()
    # numbers, NaN from spreadsheets, anything else
    return None


def classify(days_delta: int, horizon_days: int, urgent_days: int = DEFAULT_URGENT_DAYS) -> Urgency | None:
    """Urgency for a signed day difference; None when beyond the horizon."""
    if days_delta < 0:
        return Urgency.OVERDUE
    if days_delta > horizon_days:
        return None
    if days_delta <= urgent_days:
        return Urgency.URGENT
    return Urgency.UPCOMING


def evaluate(
    equipment: Iterable[Equipment],
    today: date,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    *,
    urgent_days: int = DEFAULT_URGENT_DAYS,
) -> AlertReport:
    """Build the maintenance alert list for a dashboard.

    Args:
        equipment: Equipment rows (already joined to client display fields)
        today: Reference date; a datetime is truncated to its date
        horizon_days: Look-ahead window for non-overdue alerts
        urgent_days: Upper bound (inclusive) of the Urgent window

    Returns:
        AlertReport with alerts sorted ascending by next service date and the
        overdue count over all equipment

    Raises:
        TypeError: If equipment is None
        ValueError: If horizon_days or urgent_days is negative
    """
    if equipment is None:
        raise TypeError("evaluate() requires a sequence of equipment, got None")
    if horizon_days < 0 or urgent_days < 0:
        raise ValueError(
            f"horizon_days and urgent_days must be >= 0 (got {horizon_days}, {urgent_days})"
        )
    if isinstance(today, datetime):
        today = today.date()

    alerts: list[AlertEntry] = []
    overdue = 0
    undated = 0
    for item in equipment:
        due = coerce_date(item.next_service_date)
        if due is None:
            undated += 1
            continue
        delta = (due - today).days
        urgency = classify(delta, horizon_days, urgent_days)
        if urgency is Urgency.OVERDUE:
            overdue += 1
        if urgency is None:
            continue
        alerts.append(
            AlertEntry(equipment=item, next_service_date=due, urgency=urgency, days_delta=delta)
        )

    # stable: equal dates keep input order
    alerts.sort(key=lambda a: a.next_service_date)
    logger.debug(
        "evaluate today=%s horizon=%d alerts=%d overdue=%d undated=%d",
        today.isoformat(),
        horizon_days,
        len(alerts),
        overdue,
        undated,
    )
    return AlertReport(alerts=alerts, overdue_count=overdue, horizon_days=horizon_days)
