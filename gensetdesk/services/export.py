from __future__ import annotations

import csv
from collections.abc import Iterable
from datetime import date
from pathlib import Path

import pandas as pd

from ..models.client import Client

"""Client list CSV export (every field quoted, header row first)."""

EXPORT_HEADERS = ["ID", "Name", "Province", "City", "Address", "Phone", "Status"]


def default_export_name(today: date) -> str:
    return f"clients_{today.isoformat()}.csv"


def export_clients_csv(clients: Iterable[Client], path: Path) -> int:
    """Write clients to path; returns the number of data rows written."""
    df = pd.DataFrame(
        [[c.id, c.name, c.province, c.city, c.address, c.phone, c.status] for c in clients],
        columns=EXPORT_HEADERS,
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False, quoting=csv.QUOTE_ALL, encoding="utf-8")
    return len(df)
