"""Pydantic models for the warehouse API responses.

Field names are camelCase to match the existing frontend.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


class WarehouseSummary(BaseModel):
    """One row of ``GET /warehouses``."""
    id: int
    address: str = ""
    city: str = ""
    state: str = ""
    totalSpaceSqft: list[int] = Field(default_factory=list)
    clearHeightFt: Decimal | None = None
    compliances: str | None = None
    otherSpecifications: str | None = None
    ratePerSqft: Decimal | None = None
    photos: list[Any] = Field(default_factory=list)
    warehouseType: str | None = None
    zone: str | None = None
    contactPerson: str | None = None
    fireNocAvailable: bool | None = None
    fireSafetyMeasures: str | None = None


class WarehouseDetail(BaseModel):
    """``GET /warehouses/{id}``. Omits contact details."""
    id: int
    address: str = ""
    numberOfDocks: int | None = None
    totalSpaceSqft: list[int] = Field(default_factory=list)
    clearHeightFt: Decimal | None = None
    city: str = ""
    state: str = ""
    postalCode: str | None = None
    photos: list[Any] = Field(default_factory=list)
    warehouseType: str | None = None
    zone: str | None = None
    compliances: str | None = None
    otherSpecifications: str | None = None
    ratePerSqft: Decimal | None = None
    fireNocAvailable: bool | None = None
    fireSafetyMeasures: str | None = None


class Pagination(BaseModel):
    totalItems: int
    totalPages: int
    currentPage: int
    pageSize: int


class ListingResponse(BaseModel):
    data: list[WarehouseSummary] = Field(default_factory=list)
    pagination: Pagination
