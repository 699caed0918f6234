# tests/conftest.py - shared fixtures: in-memory cache, fake remote row-store

import os

os.environ["LOCAL_CACHE_URL"] = "sqlite://"

import asyncio
import uuid
from collections import defaultdict
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from kiranawala.core.cache import LocalCache
from kiranawala.core.exceptions import RemoteUnavailable
from kiranawala.core.monitoring import SyncMonitoring
from kiranawala.core.remote import matches_all
from kiranawala.db.session import Base
from kiranawala.services.sync_policy import SyncPolicy


class FakeRemoteStore:
    """In-memory stand-in for RemoteStore, filtering with the same condition objects.

    fail(op, table, after=n) makes the matching call raise RemoteUnavailable
    once n matching calls have succeeded; go_down() fails every call.
    """

    def __init__(self):
        self.tables = defaultdict(list)
        self.calls = []
        self.rules = []
        self.down = False
        self.assign_ids = True

    def seed(self, table, *rows):
        for row in rows:
            self.tables[table].append(dict(row))

    def fail(self, op=None, table=None, after=0):
        self.rules.append({"op": op, "table": table, "after": after})

    def go_down(self):
        self.down = True

    def _check(self, op, table):
        self.calls.append((op, table))
        if self.down:
            raise RemoteUnavailable(f"{op} {table} failed: connection refused", table)
        for rule in self.rules:
            if rule["op"] not in (None, op) or rule["table"] not in (None, table):
                continue
            if rule["after"] > 0:
                rule["after"] -= 1
            else:
                raise RemoteUnavailable(f"{op} {table} failed: 503 - injected", table)

    async def select(self, table, filters=None, limit=None, columns="*"):
        self._check("select", table)
        rows = [dict(row) for row in self.tables[table] if matches_all(filters, row)]
        return rows[:limit] if limit is not None else rows

    async def insert(self, table, rows, returning=True):
        self._check("insert", table)
        now = datetime.now(timezone.utc).isoformat()
        stored = []
        for row in rows if isinstance(rows, list) else [rows]:
            row = {"created_at": now, "updated_at": now, **row}
            if self.assign_ids and not row.get("id"):
                row["id"] = str(uuid.uuid4())
            self.tables[table].append(row)
            stored.append(dict(row))
        return stored if returning and self.assign_ids else []

    async def update(self, table, patch, filters):
        self._check("update", table)
        updated = []
        for row in self.tables[table]:
            if matches_all(filters, row):
                row.update(patch)
                updated.append(dict(row))
        return updated

    async def delete(self, table, filters):
        self._check("delete", table)
        self.tables[table] = [row for row in self.tables[table] if not matches_all(filters, row)]

    async def aclose(self):
        pass


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def cache(db):
    return LocalCache(db)


@pytest.fixture
def remote():
    return FakeRemoteStore()


@pytest.fixture
def monitor():
    return SyncMonitoring()


@pytest.fixture
def sync(remote, cache, monitor):
    return SyncPolicy(remote, cache, monitor)


def store_row(store_id, latitude, longitude, **overrides):
    row = {
        "id": store_id,
        "name": f"Store {store_id}",
        "address": f"{store_id} Market Road",
        "description": "Neighbourhood kirana",
        "latitude": latitude,
        "longitude": longitude,
        "contact": "022-5550100",
        "rating": 4.5,
        "minimum_order_value": 100.0,
        "delivery_fee": 30.0,
        "estimated_delivery_time": 30,
        "is_open": True,
        "subscription_status": "ACTIVE",
    }
    row.update(overrides)
    return row


def product_row(product_id, store_id, price=50.0, **overrides):
    row = {
        "id": product_id,
        "store_id": store_id,
        "name": f"Product {product_id}",
        "description": "",
        "price": price,
        "stock_quantity": 10,
        "category": "Staples",
        "is_available": True,
    }
    row.update(overrides)
    return row
