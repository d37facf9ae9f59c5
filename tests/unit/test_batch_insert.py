from __future__ import annotations

import pytest

from gensetdesk.db.batch_insert import BatchInsertError, BatchMetrics, InsertResult, batch_insert


class DummyCursor:
    def __init__(self) -> None:
        self.queries: list[str] = []

# We monkeypatch execute_values inside the module so no database is needed


@pytest.fixture(autouse=True)
def patch_execute_values(monkeypatch):
    import gensetdesk.db.batch_insert as bi

    def fake_execute_values(cursor, sql, rows, page_size=1000, fetch=False):
        cursor.queries.append(sql)
        return [(i + 1,) for i in range(len(rows))] if fetch else None

    monkeypatch.setattr(bi, "execute_values", fake_execute_values)
    return fake_execute_values


def test_batch_insert_basic():
    cur = DummyCursor()
    res = batch_insert(cur, table="clients", columns=["name", "city"], rows=[["Acme", "Posadas"], ["Beta", "Goya"]])
    assert isinstance(res, InsertResult)
    assert res.inserted_rows == 2
    assert res.returned_values is None
    assert cur.queries == ['INSERT INTO clients ("name","city") VALUES %s']


def test_batch_insert_returning():
    cur = DummyCursor()
    res = batch_insert(cur, table="clients", columns=["name"], rows=[["Acme"], ["Beta"]], returning=True)
    assert cur.queries[0].endswith("RETURNING id")
    assert res.returned_values == [(1,), (2,)]


def test_batch_insert_empty_rows():
    cur = DummyCursor()
    res = batch_insert(cur, table="clients", columns=["name"], rows=[])
    assert res.inserted_rows == 0
    assert cur.queries == []


def test_batch_insert_metrics_callback():
    seen: list[BatchMetrics] = []
    batch_insert(DummyCursor(), "clients", ["name"], [["Acme"]], metrics_callback=seen.append)
    assert len(seen) == 1
    assert seen[0].batch_size == 1
    assert seen[0].elapsed_seconds >= 0


def test_batch_insert_wraps_driver_errors(monkeypatch):
    import gensetdesk.db.batch_insert as bi

    def boom(cursor, sql, rows, page_size=1000, fetch=False):
        raise RuntimeError("value too long for type character varying(80)")

    monkeypatch.setattr(bi, "execute_values", boom)
    with pytest.raises(BatchInsertError, match="value too long"):
        batch_insert(DummyCursor(), "clients", ["name"], [["x" * 100]])
