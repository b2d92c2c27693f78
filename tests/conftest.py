import uuid
from decimal import Decimal
from datetime import datetime, timedelta, timezone

import pytest

from optical_console.grid.errors import NotFoundError, StoreError
from optical_console.grid.store import RecordStore
from optical_console.schemas.lens import LensMovementRecord, LensRecord


class InMemoryRecordStore(RecordStore):
    """RecordStore over a dict, with hooks to make single operations fail."""

    def __init__(self, schema, table):
        self.schema = schema
        self.table = table
        self.rows = {}
        self.calls = []
        self.fail_insert = None  # callable(values) -> bool
        self.fail_update = None  # callable(record_id, values) -> bool
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self):
        self._clock += timedelta(seconds=1)
        return self._clock

    def _out(self, row):
        return self.schema(**row)

    async def select(self, filters=None, order_by=None, limit=None):
        self.calls.append(("select", dict(filters or {})))
        rows = [
            r for r in self.rows.values()
            if all(r.get(k) == v for k, v in (filters or {}).items())
        ]
        for name in reversed(list(order_by or ())):
            col = name.lstrip("-")
            rows.sort(key=lambda r: (r.get(col) is None, r.get(col)), reverse=name.startswith("-"))
        if limit is not None:
            rows = rows[:limit]
        return [self._out(r) for r in rows]

    async def get(self, record_id):
        if record_id not in self.rows:
            raise NotFoundError(f"{self.table} record {record_id} not found")
        return self._out(self.rows[record_id])

    async def insert(self, values):
        self.calls.append(("insert", dict(values)))
        if self.fail_insert and self.fail_insert(values):
            raise StoreError(f"insert on {self.table} failed: simulated")
        if values.get("quantity", 0) < 0:
            raise StoreError("check constraint ck_lenses_quantity_non_negative")
        now = self._tick()
        row = {"id": uuid.uuid4(), "created_at": now, "updated_at": now, **values}
        self.rows[row["id"]] = row
        return self._out(row)

    async def update(self, record_id, values):
        self.calls.append(("update", record_id, dict(values)))
        if record_id not in self.rows:
            raise NotFoundError(f"{self.table} record {record_id} not found")
        if self.fail_update and self.fail_update(record_id, values):
            raise StoreError(f"update on {self.table} failed: simulated")
        if values.get("quantity", 0) < 0:
            raise StoreError("check constraint ck_lenses_quantity_non_negative")
        self.rows[record_id].update(values)
        return self._out(self.rows[record_id])

    async def delete(self, record_id):
        if record_id not in self.rows:
            raise NotFoundError(f"{self.table} record {record_id} not found")
        del self.rows[record_id]

    def writes(self, op):
        return [c for c in self.calls if c[0] == op]


@pytest.fixture
def lens_store():
    return InMemoryRecordStore(LensRecord, "lenses")


@pytest.fixture
def movement_store():
    return InMemoryRecordStore(LensMovementRecord, "lens_movements")


def _make_lens(sph, cyl, quantity, **attrs):
    return LensRecord(
        id=uuid.uuid4(),
        sph=Decimal(str(sph)),
        cyl=Decimal(str(cyl)),
        quantity=quantity,
        **attrs,
    )


@pytest.fixture
def make_lens():
    return _make_lens
