from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

"""Equipment, service history and maintenance alert models.

Equipment rows arrive already joined to their owning client (client_name /
client_city are denormalized display fields); the alert evaluator never
performs that join itself.
"""

__all__ = [
    "Equipment",
    "Service",
    "Urgency",
    "AlertEntry",
    "AlertReport",
]


@dataclass(frozen=True)
class Equipment:
    """One unit installed at a client site.

    next_service_date is kept as supplied by the caller (date, datetime,
    pandas Timestamp, ISO string or None); the evaluator coerces it.
    """
    id: Any
    client_id: Any
    model: str
    type: str = "Generator"
    next_service_date: Any = None
    client_name: str | None = None
    client_city: str | None = None

    @staticmethod
    def from_record(record: dict[str, Any]) -> Equipment:
        return Equipment(
            id=record.get("id"),
            client_id=record.get("client_id"),
            model=record.get("model") or "",
            type=record.get("type") or "Generator",
            next_service_date=record.get("next_service_date"),
            client_name=record.get("client_name"),
            client_city=record.get("client_city"),
        )


@dataclass(frozen=True)
class Service:
    """A maintenance visit recorded against a client (and optionally a unit)."""
    id: Any
    client_id: Any
    date: Any
    description: str = ""
    technician: str = ""
    equipment_id: Any = None

    @staticmethod
    def from_record(record: dict[str, Any]) -> Service:
        return Service(
            id=record.get("id"),
            client_id=record.get("client_id"),
            date=record.get("date"),
            description=record.get("description") or "",
            technician=record.get("technician") or "",
            equipment_id=record.get("equipment_id"),
        )


class Urgency(str, Enum):
    """Due-date proximity classification.

    - OVERDUE: due date already passed (days_delta < 0)
    - URGENT: due within the urgent window (default 7 days, inclusive)
    - UPCOMING: due after the urgent window but within the horizon
    """
    OVERDUE = "Overdue"
    URGENT = "Urgent"
    UPCOMING = "Upcoming"


@dataclass(frozen=True)
class AlertEntry:
    equipment: Equipment
    next_service_date: date
    urgency: Urgency
    days_delta: int  # negative = days overdue, positive = days remaining

    @property
    def id(self) -> Any:
        return self.equipment.id


@dataclass(frozen=True)
class AlertReport:
    """Evaluator output: sorted alert list plus overdue count over all equipment."""
    alerts: list[AlertEntry]
    overdue_count: int
    horizon_days: int = 30

    def counts_by_urgency(self) -> dict[Urgency, int]:
        counts = {u: 0 for u in Urgency}
        for entry in self.alerts:
            counts[entry.urgency] += 1
        return counts
