from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from ..models.client import Client, ClientStatus
from ..models.equipment import Equipment, Service
from .evaluator import DEFAULT_HORIZON_DAYS, DEFAULT_URGENT_DAYS, coerce_date, evaluate

"""Dashboard counters.

Aggregates the headline numbers of the landing page from rows the caller has
already fetched: client total, services this month, clients in maintenance,
installed equipment, and the maintenance alert counts.
"""


@dataclass(frozen=True)
class DashboardStats:
    total_clients: int
    services_this_month: int
    clients_in_maintenance: int
    total_equipment: int
    overdue_count: int
    alert_count: int


def _same_month(value: object, today: date) -> bool:
    d = coerce_date(value)
    return d is not None and d.year == today.year and d.month == today.month


def compute_dashboard(
    clients: Iterable[Client],
    equipment: Iterable[Equipment],
    services: Iterable[Service],
    today: date,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    urgent_days: int = DEFAULT_URGENT_DAYS,
) -> DashboardStats:
    if isinstance(today, datetime):
        today = today.date()
    clients = list(clients)
    equipment = list(equipment)

    report = evaluate(equipment, today, horizon_days, urgent_days=urgent_days)
    return DashboardStats(
        total_clients=len(clients),
        services_this_month=sum(1 for s in services if _same_month(s.date, today)),
        clients_in_maintenance=sum(
            1 for c in clients if c.status == ClientStatus.MAINTENANCE.value
        ),
        total_equipment=len(equipment),
        overdue_count=report.overdue_count,
        alert_count=len(report.alerts),
    )
