"""Warehouse listing: filters → cache key → cache → store → post-filter → response."""

from app.warehouses.service import WarehouseListingService

__all__ = ["WarehouseListingService"]
