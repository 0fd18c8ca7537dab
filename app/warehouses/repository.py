"""Store-side warehouse queries.

The listing count and page fetch run in one transaction so pagination metadata
and the page itself describe the same snapshot.
"""

import logging
from collections.abc import Sequence

from fastapi import Depends
from sqlalchemy import ColumnElement, and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from app.config import settings
from app.database import get_session_factory
from app.models import Warehouse, WarehouseData
from app.warehouses.filters import FilterSet, RangeFilter, TextFilter

logger = logging.getLogger(__name__)

_TEXT_COLUMNS = {
    "city": Warehouse.city,
    "state": Warehouse.state,
    "warehouse_type": Warehouse.warehouse_type,
    "zone": Warehouse.zone,
    "contact_person": Warehouse.contact_person,
    "compliances": Warehouse.compliances,
    "address": Warehouse.address,
}

# Over-fetch factors used when the space post-filter is active
POST_FILTER_SKIP_FACTOR = 2
POST_FILTER_FETCH_FACTOR = 3


def listing_window(page: int, page_size: int, needs_post_filter: bool) -> tuple[int, int]:
    """Return ``(skip, limit)`` for the store query.

    With the space post-filter active the window starts earlier and is three
    pages wide so the in-memory filter has candidates to fill the page. This is
    a heuristic: sparse matches further down the table are not seen.
    """
    if needs_post_filter:
        skip = max(0, (page - 1) * page_size * POST_FILTER_SKIP_FACTOR)
        return skip, page_size * POST_FILTER_FETCH_FACTOR
    return (page - 1) * page_size, page_size


def _text_clause(column, flt: TextFilter) -> ColumnElement[bool]:
    if flt.mode == "any_of":
        return func.lower(column).in_([v.lower() for v in flt.values])
    return column.icontains(flt.values[0], autoescape=True)


def _range_clauses(column, flt: RangeFilter) -> list[ColumnElement[bool]]:
    clauses = []
    if flt.min is not None:
        clauses.append(column >= flt.min)
    if flt.max is not None:
        clauses.append(column <= flt.max)
    return clauses


def build_conditions(filters: FilterSet) -> list[ColumnElement[bool]]:
    """WHERE conditions for every store-side filter, plus the visibility gate."""
    conditions: list[ColumnElement[bool]] = [Warehouse.visibility.is_(True)]

    for name, flt in filters.text_filters().items():
        conditions.append(_text_clause(_TEXT_COLUMNS[name], flt))

    if filters.rate is not None:
        conditions.extend(_range_clauses(Warehouse.rate_per_sqft, filters.rate))
    if filters.clear_height is not None:
        conditions.extend(_range_clauses(Warehouse.clear_height_ft, filters.clear_height))

    if filters.fire_noc_available is not None:
        conditions.append(
            Warehouse.warehouse_data.has(
                WarehouseData.fire_noc_available.is_(filters.fire_noc_available)
            )
        )

    return conditions


class WarehouseRepository:
    """Reads visible warehouses for the listing and detail endpoints."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        isolation_level: str | None = settings.listing_isolation_level,
    ):
        self._session_factory = session_factory
        self._isolation_level = isolation_level

    async def fetch_page(
        self, filters: FilterSet, skip: int, limit: int,
    ) -> tuple[Sequence[Warehouse], int]:
        """Return one page (newest first) and the total matching count."""
        where = and_(*build_conditions(filters))
        page_stmt = (
            select(Warehouse)
            .where(where)
            .options(selectinload(Warehouse.warehouse_data))
            .order_by(Warehouse.id.desc())
            .offset(skip)
            .limit(limit)
        )
        count_stmt = select(func.count()).select_from(Warehouse).where(where)

        async with self._session_factory() as session:
            async with session.begin():
                if self._isolation_level:
                    await session.connection(
                        execution_options={"isolation_level": self._isolation_level}
                    )
                total = (await session.execute(count_stmt)).scalar_one()
                rows = (await session.execute(page_stmt)).scalars().all()

        logger.debug("Listing query | skip=%d | limit=%d | rows=%d | total=%d", skip, limit, len(rows), total)
        return rows, total

    async def get_visible(self, warehouse_id: int) -> Warehouse | None:
        stmt = (
            select(Warehouse)
            .where(Warehouse.id == warehouse_id, Warehouse.visibility.is_(True))
            .options(selectinload(Warehouse.warehouse_data))
        )
        async with self._session_factory() as session:
            return (await session.execute(stmt)).scalar_one_or_none()


def get_repository(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> WarehouseRepository:
    """FastAPI dependency: repository bound to the lifespan's session factory."""
    return WarehouseRepository(session_factory)
