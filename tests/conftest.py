# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path
from typing import Any

import pytest

from gensetdesk.logging.init import reset_logging


@pytest.fixture(autouse=True)
def _fresh_logging():
    # handlers bind sys.stdout at setup time; capsys swaps it per test
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """import:
  fallback_province: Misiones
  unknown_placeholder: Desconocida
  missing_placeholder: "-"
alerts:
  horizon_days: 30
  urgent_days: 7
tables:
  clients: clients
  equipment: equipment
  services: services
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "gensetdesk.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


class FakeCursor:
    """Minimal psycopg2 cursor stand-in.

    INSERTs whose first parameter (the client name) is in ``reject`` raise like
    a unique constraint violation; SELECTs return ``select_rows`` with
    ``select_columns`` as description.
    """

    def __init__(
        self,
        reject: set[str] | None = None,
        select_columns: list[str] | None = None,
        select_rows: list[tuple[Any, ...]] | None = None,
        fail_on: set[str] | None = None,
    ) -> None:
        self.reject = reject or set()
        self.fail_on = fail_on or set()
        self.select_columns = select_columns or []
        self.select_rows = select_rows or []
        self.statements: list[str] = []
        self.inserted: list[tuple[Any, ...]] = []
        self.description: list[tuple[str, ...]] | None = None

    def execute(self, sql: str, params: tuple[Any, ...] | None = None) -> None:
        self.statements.append(sql)
        if sql in self.fail_on:
            raise RuntimeError(f"{sql} failed")
        if sql.startswith("INSERT"):
            if params and params[0] in self.reject:
                raise RuntimeError(
                    f'duplicate key value violates unique constraint "clients_name_key"'
                )
            self.inserted.append(tuple(params or ()))
        elif sql.startswith("SELECT"):
            self.description = [(c,) for c in self.select_columns]

    def fetchall(self) -> list[tuple[Any, ...]]:
        return list(self.select_rows)


@pytest.fixture()
def fake_cursor_cls():
    return FakeCursor
