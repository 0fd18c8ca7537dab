"""Tests for the listing flow wiring: cache, store and post-filter together."""

import pytest

from app.services.cache import CacheService, MemoryCacheBackend
from app.warehouses import WarehouseListingService
from tests.helpers import FakeClock, make_warehouse


class TestListingService:
    @pytest.mark.asyncio
    async def test_zero_ttl_always_hits_store(self, repository, seed):
        await seed(make_warehouse(1))
        svc = WarehouseListingService(
            repository, CacheService(MemoryCacheBackend(timer=FakeClock())), ttl=0,
        )
        await svc.list_warehouses({})
        await svc.list_warehouses({})
        assert repository.fetch_page.await_count == 2

    @pytest.mark.asyncio
    async def test_cache_hit_returns_stored_envelope(self, repository, cache, seed):
        await seed(make_warehouse(1), make_warehouse(2))
        svc = WarehouseListingService(repository, cache)
        first = await svc.list_warehouses({"pageSize": "1"})
        second = await svc.list_warehouses({"pageSize": "1"})
        assert second == first
        assert first["pagination"]["totalPages"] == 2
        assert repository.fetch_page.await_count == 1

    @pytest.mark.asyncio
    async def test_space_filter_counts_window(self, repository, cache, seed):
        # ids 10..1, every even id has a matching space value
        await seed(*(
            make_warehouse(i, total_space_sqft=[500] if i % 2 == 0 else [5])
            for i in range(1, 11)
        ))
        svc = WarehouseListingService(repository, cache)
        result = await svc.list_warehouses({"minSpace": "100", "page": "1", "pageSize": "2"})
        assert [w["id"] for w in result["data"]] == [10, 8]
        # Window of 6 rows (10..5) holds three matches
        assert result["pagination"]["totalItems"] == 3

    @pytest.mark.asyncio
    async def test_get_warehouse_missing(self, repository, cache):
        svc = WarehouseListingService(repository, cache)
        assert await svc.get_warehouse(99) is None

    @pytest.mark.asyncio
    async def test_clear_cache_counts_listing_keys_only(self, repository, cache, seed):
        await seed(make_warehouse(1))
        await cache.set("enquiries:page:1", {"x": 1}, ttl=60)
        svc = WarehouseListingService(repository, cache)
        await svc.list_warehouses({})
        assert await svc.clear_cache() == 1
        assert await cache.get("enquiries:page:1") == {"x": 1}
