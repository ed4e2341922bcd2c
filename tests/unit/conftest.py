"""
In-memory store and timing fakes for engine unit tests.
"""

from __future__ import annotations

from typing import Any, Sequence

import pytest

from legislative_data_store.sync import SyncEngine


class FakeStore:
    """Keyed in-memory store honoring the RecordStore protocol.

    Failure injection:
        select_error: raised by select_column
        probe_error: raised by probe
        write_errors: FIFO of exceptions, one consumed per write call
        record_errors: key -> exception, for single-row writes only
    """

    def __init__(self, existing: dict[str, list[dict]] | None = None):
        self.tables: dict[str, list[dict]] = {t: list(r) for t, r in (existing or {}).items()}
        self.calls: list[tuple[str, str, int]] = []
        self.select_error: Exception | None = None
        self.probe_error: Exception | None = None
        self.write_errors: list[Exception] = []
        self.record_errors: dict[Any, Exception] = {}
        self.entered = False

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.entered = False

    def rows(self, table: str) -> list[dict]:
        return self.tables.setdefault(table, [])

    async def select_column(self, table: str, column: str) -> list[Any]:
        self.calls.append(("select", table, 0))
        if self.select_error is not None:
            raise self.select_error
        return [r.get(column) for r in self.rows(table)]

    async def probe(self, table: str) -> None:
        self.calls.append(("probe", table, 0))
        if self.probe_error is not None:
            raise self.probe_error

    async def insert(self, table: str, rows: Sequence[dict]) -> int:
        self.calls.append(("insert", table, len(rows)))
        self._maybe_fail(rows, None)
        self.rows(table).extend(dict(r) for r in rows)
        return len(rows)

    async def upsert(
        self,
        table: str,
        rows: Sequence[dict],
        conflict_columns: Sequence[str],
        *,
        ignore_duplicates: bool = True,
    ) -> int:
        self.calls.append(("upsert", table, len(rows)))
        key = conflict_columns[0]
        self._maybe_fail(rows, key)
        existing = {r.get(key): r for r in self.rows(table)}
        for r in rows:
            current = existing.get(r.get(key))
            if current is None:
                row = dict(r)
                self.rows(table).append(row)
                existing[r.get(key)] = row
            elif not ignore_duplicates:
                current.update(r)
        return len(rows)

    def _maybe_fail(self, rows: Sequence[dict], key: str | None) -> None:
        if self.write_errors:
            raise self.write_errors.pop(0)
        if len(rows) == 1 and key is not None:
            err = self.record_errors.get(rows[0].get(key))
            if err is not None:
                raise err

    def write_calls(self) -> list[tuple[str, str, int]]:
        return [c for c in self.calls if c[0] in ("insert", "upsert")]


class RecordingSleep:
    """Async sleep stand-in that records requested delays (seconds)."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class StepClock:
    """Monotonic clock advancing a fixed step on every read."""

    def __init__(self, step: float = 0.01):
        self.t = 0.0
        self.step = step

    def __call__(self) -> float:
        self.t += self.step
        return self.t


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def sleeper():
    return RecordingSleep()


@pytest.fixture
def engine(store, sleeper):
    return SyncEngine(store, sleep=sleeper)


@pytest.fixture
def clock():
    return StepClock(0.01)
