from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

"""Remembered locations for the client form.

Province / city suggestions are rebuilt from the stored clients every time
the form opens; the snapshot is read-only and nothing is cached between
calls.
"""


@dataclass(frozen=True)
class LocationSnapshot:
    provinces: tuple[str, ...]
    cities_by_province: Mapping[str, tuple[str, ...]]

    def cities(self, province: str) -> tuple[str, ...]:
        return self.cities_by_province.get(province, ())

    def is_known(self, province: str, city: str | None = None) -> bool:
        if province not in self.provinces:
            return False
        return city is None or city in self.cities(province)


def _field(row: Any, name: str) -> str:
    value = row.get(name) if isinstance(row, Mapping) else getattr(row, name, None)
    return str(value).strip() if value else ""


def build_location_snapshot(
    rows: Iterable[Any],
    ignore: Iterable[str] = (),
    seed: Mapping[str, Iterable[str]] | None = None,
) -> LocationSnapshot:
    """Collect known provinces and their cities from client rows.

    Args:
        rows: Client objects or mappings with province / city
        ignore: Placeholder values that are not real places (e.g. "Desconocida")
        seed: Initial province -> cities offered even before any client
            uses them; stored rows add to it

    Returns:
        LocationSnapshot with provinces sorted and cities in first-seen order
    """
    skip = set(ignore)
    provinces: set[str] = set()
    cities: dict[str, list[str]] = {}
    for province, seeded in (seed or {}).items():
        if province in skip:
            continue
        provinces.add(province)
        known = cities.setdefault(province, [])
        for city in seeded:
            if city not in skip and city not in known:
                known.append(city)
    for row in rows:
        province = _field(row, "province")
        city = _field(row, "city")
        if not province or province in skip:
            continue
        provinces.add(province)
        if city and city not in skip:
            known = cities.setdefault(province, [])
            if city not in known:
                known.append(city)
    return LocationSnapshot(
        provinces=tuple(sorted(provinces)),
        cities_by_province=MappingProxyType({p: tuple(c) for p, c in cities.items()}),
    )
