from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

"""Client domain models.

ClientDraft is the normalizer output: a default-filled candidate row for the
``clients`` table. Client is a row already stored (fetched for export,
dashboard counts and the remembered locations snapshot).
"""

__all__ = [
    "ClientStatus",
    "ClientDraft",
    "Client",
]


class ClientStatus(str, Enum):
    """Lifecycle status of a client account.

    - ACTIVE: regular maintenance contract (every imported draft starts here)
    - MAINTENANCE: a unit is currently being serviced
    - SUSPENDED: contract on hold
    """
    ACTIVE = "Active"
    MAINTENANCE = "Maintenance"
    SUSPENDED = "Suspended"


@dataclass(frozen=True)
class ClientDraft:
    """Validated candidate client record ready for insertion.

    Every field is populated: name is longer than 2 characters, the rest
    carry either a real value or a placeholder sentinel.
    """
    name: str
    province: str
    city: str
    address: str = "-"
    phone: str = "-"
    status: ClientStatus = ClientStatus.ACTIVE

    def to_record(self) -> dict[str, str]:
        """Row for the ``clients`` table (exactly the draft fields)."""
        record = asdict(self)
        record["status"] = self.status.value
        return record


@dataclass(frozen=True)
class Client:
    id: Any
    name: str
    province: str
    city: str
    address: str = "-"
    phone: str = "-"
    status: str = ClientStatus.ACTIVE.value
    created_at: Any = None

    @staticmethod
    def from_record(record: dict[str, Any]) -> Client:
        return Client(
            id=record.get("id"),
            name=record.get("name") or "",
            province=record.get("province") or "",
            city=record.get("city") or "",
            address=record.get("address") or "-",
            phone=record.get("phone") or "-",
            status=record.get("status") or ClientStatus.ACTIVE.value,
            created_at=record.get("created_at"),
        )
