from __future__ import annotations

from concurrent.futures import Executor, Future
from typing import Any, Dict, List, Set, Tuple

import pytest

from teamhub.airtable import AirtableError


class ManualExecutor(Executor):
    """Holds submitted calls until the test runs them, so completion order is explicit."""

    def __init__(self) -> None:
        self.queue: List[Tuple[Future, Any, tuple, dict]] = []

    def submit(self, fn, *args, **kwargs) -> Future:
        future: Future = Future()
        self.queue.append((future, fn, args, kwargs))
        return future

    def run(self, index: int = 0) -> None:
        future, fn, args, kwargs = self.queue.pop(index)
        try:
            result = fn(*args, **kwargs)
        except Exception as exc:  # noqa: BLE001
            future.set_exception(exc)
        else:
            future.set_result(result)

    def run_all(self) -> None:
        while self.queue:
            self.run(0)


class FakeClient:
    def __init__(self, records: Dict[str, List[dict]] | None = None) -> None:
        self.records = records or {}
        self.calls: List[tuple] = []
        self.failing: Set[str] = set()
        self._next = 0

    def _maybe_fail(self, op: str) -> None:
        if op in self.failing:
            raise AirtableError(f"{op} rejected", status=422)

    def list_records(self, table: str, **params: Any) -> List[dict]:
        self.calls.append(("list", table, params))
        self._maybe_fail("list")
        return list(self.records.get(table, []))

    def create_record(self, table: str, fields: dict) -> dict:
        self.calls.append(("create", table, fields))
        self._maybe_fail("create")
        self._next += 1
        return {"id": f"rec{self._next}", "fields": fields, "createdTime": "2026-02-23T09:00:00.000Z"}

    def update_record(self, table: str, record_id: str, fields: dict) -> dict:
        self.calls.append(("update", table, record_id, fields))
        self._maybe_fail("update")
        return {"id": record_id, "fields": fields}

    def delete_record(self, table: str, record_id: str) -> dict:
        self.calls.append(("delete", table, record_id))
        self._maybe_fail("delete")
        return {"id": record_id, "deleted": True}


@pytest.fixture
def executor() -> ManualExecutor:
    return ManualExecutor()


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture(autouse=True)
def _no_airtable_env(monkeypatch):
    monkeypatch.delenv("AIRTABLE_TOKEN", raising=False)
    monkeypatch.delenv("AIRTABLE_BASE_ID", raising=False)
