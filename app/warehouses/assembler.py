"""Shape ORM rows into API responses.

Decodes the serialized ``photos`` column and flattens the amenity relation.
"""

import json
import math
from collections.abc import Iterable

from app.models import Warehouse
from app.warehouses.schemas import (
    ListingResponse,
    Pagination,
    WarehouseDetail,
    WarehouseSummary,
)


def parse_photos(raw: str | None) -> list:
    """Decode the photos column into a list (normally of URLs).

    Values that look like JSON are decoded (a scalar becomes a one-item list);
    anything else, including malformed JSON, is kept verbatim as one item.
    """
    if not raw:
        return []
    if raw.startswith(("[", "{")):
        try:
            decoded = json.loads(raw)
        except ValueError:
            return [raw]
        if isinstance(decoded, list):
            return decoded
        return [decoded]
    return [raw]


def _amenity_fields(warehouse: Warehouse) -> dict:
    data = warehouse.warehouse_data
    if data is None:
        return {"fireNocAvailable": None, "fireSafetyMeasures": None}
    return {
        "fireNocAvailable": data.fire_noc_available,
        "fireSafetyMeasures": data.fire_safety_measures,
    }


def to_summary(warehouse: Warehouse) -> WarehouseSummary:
    return WarehouseSummary(
        id=warehouse.id,
        address=warehouse.address,
        city=warehouse.city,
        state=warehouse.state,
        totalSpaceSqft=list(warehouse.total_space_sqft or []),
        clearHeightFt=warehouse.clear_height_ft,
        compliances=warehouse.compliances,
        otherSpecifications=warehouse.other_specifications,
        ratePerSqft=warehouse.rate_per_sqft,
        photos=parse_photos(warehouse.photos),
        warehouseType=warehouse.warehouse_type,
        zone=warehouse.zone,
        contactPerson=warehouse.contact_person,
        **_amenity_fields(warehouse),
    )


def to_detail(warehouse: Warehouse) -> WarehouseDetail:
    return WarehouseDetail(
        id=warehouse.id,
        address=warehouse.address,
        numberOfDocks=warehouse.number_of_docks,
        totalSpaceSqft=list(warehouse.total_space_sqft or []),
        clearHeightFt=warehouse.clear_height_ft,
        city=warehouse.city,
        state=warehouse.state,
        postalCode=warehouse.postal_code,
        photos=parse_photos(warehouse.photos),
        warehouseType=warehouse.warehouse_type,
        zone=warehouse.zone,
        compliances=warehouse.compliances,
        otherSpecifications=warehouse.other_specifications,
        ratePerSqft=warehouse.rate_per_sqft,
        **_amenity_fields(warehouse),
    )


def build_envelope(
    items: Iterable[WarehouseSummary], total: int, page: int, page_size: int,
) -> ListingResponse:
    return ListingResponse(
        data=list(items),
        pagination=Pagination(
            totalItems=total,
            totalPages=math.ceil(total / page_size),
            currentPage=page,
            pageSize=page_size,
        ),
    )
