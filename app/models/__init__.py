"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.warehouse import Warehouse, WarehouseData

__all__ = ["Base", "Warehouse", "WarehouseData"]
