"""Deterministic cache keys for listing pages.

The key embeds the canonical JSON of the normalized filters rather than a hash:
the key space is small, and exact serialization cannot collide.
"""

import json
from decimal import Decimal

from app.warehouses.filters import FilterSet, RangeFilter, TextFilter

LISTING_CACHE_PREFIX = "warehouses:"


def _decimal_text(value: Decimal | None) -> str | None:
    if value is None:
        return None
    # 10, 10.0 and 1E1 all render as "10"
    return format(value.normalize(), "f")


def _text_payload(flt: TextFilter) -> dict:
    # Matching is case-insensitive, so the key ignores the spelling's case
    if flt.mode == "any_of":
        return {"in": sorted(v.lower() for v in flt.values)}
    return {"contains": flt.values[0].lower()}


def _range_payload(flt: RangeFilter) -> dict:
    payload = {}
    if flt.min is not None:
        payload["gte"] = _decimal_text(flt.min)
    if flt.max is not None:
        payload["lte"] = _decimal_text(flt.max)
    return payload


def filter_payload(filters: FilterSet) -> dict:
    """Store-side filters that are present, plus both space bounds."""
    payload: dict = {
        name: _text_payload(flt) for name, flt in filters.text_filters().items()
    }
    if filters.rate is not None:
        payload["rate"] = _range_payload(filters.rate)
    if filters.clear_height is not None:
        payload["clearHeight"] = _range_payload(filters.clear_height)
    if filters.fire_noc_available is not None:
        payload["fireNocAvailable"] = filters.fire_noc_available
    payload["minSpace"] = filters.min_space
    payload["maxSpace"] = filters.max_space
    return payload


def build_cache_key(page: int, page_size: int, filters: FilterSet) -> str:
    canonical = json.dumps(
        filter_payload(filters),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return f"{LISTING_CACHE_PREFIX}page:{page}:size:{page_size}:filters:{canonical}"
