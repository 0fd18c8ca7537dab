"""Warehouse listing flow.

Responsibilities:
  - Normalize query parameters into a FilterSet
  - Serve the page from cache when present
  - Otherwise query the store (over-fetching when the space filter is active)
  - Apply the space post-filter and re-paginate
  - Assemble the response envelope and cache it
"""

import logging
from typing import Any

from app.config import settings
from app.services.cache import CacheService
from app.warehouses.assembler import build_envelope, to_detail, to_summary
from app.warehouses.cache_keys import LISTING_CACHE_PREFIX, build_cache_key
from app.warehouses.filters import RawParams, normalize_filters, parse_page_params
from app.warehouses.paginator import paginate
from app.warehouses.repository import WarehouseRepository, listing_window

logger = logging.getLogger(__name__)


class WarehouseListingService:
    """Cached, filtered, paginated reads over visible warehouses."""

    def __init__(
        self,
        repository: WarehouseRepository,
        cache: CacheService,
        ttl: int | None = None,
    ):
        self.repository = repository
        self.cache = cache
        self.ttl = settings.cache_ttl_warehouses if ttl is None else ttl

    async def list_warehouses(self, params: RawParams) -> dict[str, Any]:
        """Return the JSON-ready ``{data, pagination}`` envelope."""
        filters = normalize_filters(params)
        page, page_size = parse_page_params(params)
        cache_key = build_cache_key(page, page_size, filters)

        cached = await self.cache.get(cache_key)
        if cached is not None:
            logger.info("Cache HIT | key=%s", cache_key[:120])
            return cached
        logger.info("Cache MISS | key=%s", cache_key[:120])

        skip, limit = listing_window(page, page_size, filters.needs_post_filter)
        rows, total = await self.repository.fetch_page(filters, skip, limit)

        page_rows, total_items = paginate(
            [to_summary(w) for w in rows],
            total,
            page,
            page_size,
            min_space=filters.min_space,
            max_space=filters.max_space,
            spaces_of=lambda s: s.totalSpaceSqft,
        )

        envelope = build_envelope(page_rows, total_items, page, page_size)
        response_data = envelope.model_dump(mode="json")

        await self.cache.set(cache_key, response_data, self.ttl)
        return response_data

    async def get_warehouse(self, warehouse_id: int) -> dict[str, Any] | None:
        warehouse = await self.repository.get_visible(warehouse_id)
        if warehouse is None:
            return None
        return to_detail(warehouse).model_dump(mode="json")

    async def clear_cache(self) -> int:
        """Drop every cached listing page. Raises CacheError on failure."""
        return await self.cache.delete_by_prefix(LISTING_CACHE_PREFIX)
