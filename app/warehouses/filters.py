"""Query-parameter normalization for the warehouse listing.

Raw query parameters become a ``FilterSet``: a frozen, canonical value object
that the cache key builder and the repository both consume. Parsing is
lenient: a malformed bound disables that bound instead of failing the request.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Literal

from pydantic import BaseModel, ConfigDict

from app.config import settings

RawParams = Mapping[str, str | bool | list[str] | tuple[str, ...] | None]

SEPARATOR = ","

# Query parameter name → FilterSet attribute, for multi-value text filters
TEXT_FIELDS: dict[str, str] = {
    "city": "city",
    "state": "state",
    "warehouseType": "warehouse_type",
    "zone": "zone",
    "contactPerson": "contact_person",
    "compliances": "compliances",
}


class TextFilter(BaseModel):
    """Case-insensitive match over one or more candidates.

    ``contains`` (single candidate) is a substring match; ``any_of`` is an
    exact match against any candidate.
    """

    model_config = ConfigDict(frozen=True)

    values: tuple[str, ...]
    mode: Literal["contains", "any_of"]


class RangeFilter(BaseModel):
    """Inclusive numeric range; either bound may be open."""

    model_config = ConfigDict(frozen=True)

    min: Decimal | None = None
    max: Decimal | None = None


class FilterSet(BaseModel):
    """Normalized listing filters.

    Everything except ``min_space``/``max_space`` is evaluated by the store;
    the space bounds apply to a multi-valued column and are evaluated after
    retrieval.
    """

    model_config = ConfigDict(frozen=True)

    city: TextFilter | None = None
    state: TextFilter | None = None
    warehouse_type: TextFilter | None = None
    zone: TextFilter | None = None
    contact_person: TextFilter | None = None
    compliances: TextFilter | None = None
    address: TextFilter | None = None

    rate: RangeFilter | None = None
    clear_height: RangeFilter | None = None

    fire_noc_available: bool | None = None

    min_space: int | None = None
    max_space: int | None = None

    @property
    def needs_post_filter(self) -> bool:
        return self.min_space is not None or self.max_space is not None

    def text_filters(self) -> dict[str, TextFilter]:
        """Present text filters keyed by attribute name (address included)."""
        names = list(TEXT_FIELDS.values()) + ["address"]
        return {
            name: getattr(self, name)
            for name in names
            if getattr(self, name) is not None
        }


# ═══════════════ RAW VALUE HELPERS ═══════════════

def _raw_values(params: RawParams, name: str) -> list[str]:
    """All values given for ``name``, as strings, in request order."""
    value = params.get(name)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None]
    return [str(value)]


def _last_value(params: RawParams, name: str) -> str | None:
    values = _raw_values(params, name)
    return values[-1] if values else None


def split_candidates(raw: list[str]) -> list[str]:
    """Split on the separator, trim, drop empties and duplicates under ``lower()``.

    The store compares candidates with SQL ``lower()``, so two spellings are
    duplicates only when ``lower()`` maps them to the same text.
    """
    seen: set[str] = set()
    out: list[str] = []
    for chunk in raw:
        for part in chunk.split(SEPARATOR):
            part = part.strip()
            folded = part.lower()
            if part and folded not in seen:
                seen.add(folded)
                out.append(part)
    return out


def parse_decimal(raw: str | None) -> Decimal | None:
    if raw is None:
        return None
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def parse_int(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def _parse_text(params: RawParams, name: str) -> TextFilter | None:
    candidates = split_candidates(_raw_values(params, name))
    if not candidates:
        return None
    if len(candidates) == 1:
        return TextFilter(values=(candidates[0],), mode="contains")
    return TextFilter(
        values=tuple(sorted(candidates, key=str.lower)),
        mode="any_of",
    )


def _parse_range(params: RawParams, min_name: str, max_name: str) -> RangeFilter | None:
    low = parse_decimal(_last_value(params, min_name))
    high = parse_decimal(_last_value(params, max_name))
    if low is None and high is None:
        return None
    return RangeFilter(min=low, max=high)


def _parse_flag(params: RawParams, name: str) -> bool | None:
    value = params.get(name)
    if value is None:
        return None
    if value is True:
        return True
    last = _last_value(params, name)
    return last == "true"


# ═══════════════ PUBLIC API ═══════════════

def normalize_filters(params: RawParams) -> FilterSet:
    """Parse raw query parameters into a canonical ``FilterSet``."""
    fields: dict = {
        attr: _parse_text(params, name) for name, attr in TEXT_FIELDS.items()
    }

    address = (_last_value(params, "address") or "").strip()
    if address:
        fields["address"] = TextFilter(values=(address,), mode="contains")

    fields["rate"] = _parse_range(params, "minBudget", "maxBudget")
    fields["clear_height"] = _parse_range(params, "minClearHeight", "maxClearHeight")
    fields["fire_noc_available"] = _parse_flag(params, "fireNocAvailable")
    fields["min_space"] = parse_int(_last_value(params, "minSpace"))
    fields["max_space"] = parse_int(_last_value(params, "maxSpace"))

    return FilterSet(**fields)


def parse_page_params(params: RawParams) -> tuple[int, int]:
    """Return ``(page, page_size)``.

    Missing or non-positive values fall back to the defaults; values above the
    configured maximums are clamped so the store offset stays bounded.
    """
    page = parse_int(_last_value(params, "page"))
    page_size = parse_int(_last_value(params, "pageSize"))
    if page is None or page < 1:
        page = 1
    if page_size is None or page_size < 1:
        page_size = settings.default_page_size
    page = min(page, settings.max_page)
    page_size = min(page_size, settings.max_page_size)
    return page, page_size
