"""Test doubles shared across test modules."""

import json
from decimal import Decimal

from app.models import Warehouse


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the SCAN-based delete and PING."""

    def __init__(self, keys=()):
        self.store = {k: "v" for k in keys}
        self.scan_calls = []
        self.delete_calls = []

    async def scan_iter(self, match=None, count=None, _type=None):
        self.scan_calls.append((match, count, _type))
        prefix = match.rstrip("*")
        for key in list(self.store):
            if key.startswith(prefix):
                yield key

    async def delete(self, *keys):
        self.delete_calls.append(keys)
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
        return removed

    async def ping(self):
        return True

    async def aclose(self):
        pass


class FailingBackend:
    """Cache backend that errors on every call."""

    name = "failing"

    async def get(self, key):
        raise ConnectionError("cache down")

    async def set(self, key, value, ttl):
        raise ConnectionError("cache down")

    async def delete_by_prefix(self, prefix):
        raise ConnectionError("cache down")

    async def ping(self):
        raise ConnectionError("cache down")

    async def close(self):
        pass


def make_warehouse(id: int, **overrides) -> Warehouse:
    """Visible warehouse with sensible defaults."""
    fields = {
        "id": id,
        "address": f"Plot {id}, Industrial Area",
        "city": "Pune",
        "state": "Maharashtra",
        "postal_code": "411001",
        "total_space_sqft": [10000],
        "clear_height_ft": Decimal("30"),
        "number_of_docks": 4,
        "rate_per_sqft": Decimal("25"),
        "warehouse_type": "Grade A",
        "zone": "West",
        "compliances": "FSSAI",
        "contact_person": "Asha",
        "other_specifications": None,
        "photos": json.dumps([f"https://img.example/{id}.jpg"]),
        "visibility": True,
    }
    fields.update(overrides)
    return Warehouse(**fields)
