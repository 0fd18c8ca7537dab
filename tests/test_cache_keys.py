"""Tests for listing cache key derivation."""

import json

from app.warehouses.cache_keys import LISTING_CACHE_PREFIX, build_cache_key, filter_payload
from app.warehouses.filters import normalize_filters


def _key(params, page=1, page_size=10):
    return build_cache_key(page, page_size, normalize_filters(params))


class TestCacheKeyGeneration:
    def test_key_deterministic(self):
        assert _key({"city": "Pune"}) == _key({"city": "Pune"})

    def test_key_prefix(self):
        key = _key({})
        assert key.startswith(LISTING_CACHE_PREFIX)
        assert key.startswith("warehouses:page:1:size:10:filters:")

    def test_equivalent_filters_same_key(self):
        assert _key({"city": "A,B"}) == _key({"city": ["B", "A"]})
        assert _key({"city": "A,B,A"}) == _key({"city": "B,A"})

    def test_candidate_case_irrelevant(self):
        assert _key({"city": "A,b"}) == _key({"city": "a,B"})
        assert _key({"city": "PUNE"}) == _key({"city": "pune"})
        assert _key({"address": "Plot 4"}) == _key({"address": "PLOT 4"})

    def test_param_order_irrelevant(self):
        a = {"city": "Pune", "minBudget": "10", "zone": "West"}
        b = {"zone": "West", "minBudget": "10", "city": "Pune"}
        assert _key(a) == _key(b)

    def test_equal_decimals_same_key(self):
        assert _key({"minBudget": "10"}) == _key({"minBudget": "10.00"})
        assert _key({"minBudget": "10"}) == _key({"minBudget": "1E1"})

    def test_dropped_bounds_same_key(self):
        assert _key({"minBudget": "oops"}) == _key({})
        assert _key({"minSpace": "oops"}) == _key({})

    def test_different_filters_different_keys(self):
        keys = {
            _key({}),
            _key({"city": "Pune"}),
            _key({"city": "Pune,Mumbai"}),
            _key({"state": "Pune"}),
            _key({"minBudget": "10"}),
            _key({"maxBudget": "10"}),
            _key({"minClearHeight": "10"}),
            _key({"fireNocAvailable": "true"}),
            _key({"fireNocAvailable": "false"}),
            _key({"minSpace": "100"}),
            _key({"maxSpace": "100"}),
        }
        assert len(keys) == 11

    def test_contains_and_any_of_distinct(self):
        # "Pune" as a substring search must not share a key with an exact match
        assert _key({"city": "Pune"}) != _key({"city": "Pune,Pune City"})

    def test_page_and_size_in_key(self):
        assert _key({}, page=1) != _key({}, page=2)
        assert _key({}, page_size=10) != _key({}, page_size=20)

    def test_filter_segment_is_canonical_json(self):
        key = _key({"city": "Pune", "minSpace": "5"})
        segment = key.split(":filters:", 1)[1]
        assert json.loads(segment) == {
            "city": {"contains": "pune"},
            "minSpace": 5,
            "maxSpace": None,
        }

    def test_payload_always_has_space_bounds(self):
        payload = filter_payload(normalize_filters({}))
        assert payload == {"minSpace": None, "maxSpace": None}
