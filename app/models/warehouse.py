"""Warehouse listing models: the record and its one-to-one amenity data."""

from decimal import Decimal

from sqlalchemy import JSON, BigInteger, Boolean, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base

# SQLite only autoincrements INTEGER primary keys
_Id = BigInteger().with_variant(Integer, "sqlite")

# Multi-valued per record; stored as INTEGER[] on PostgreSQL, JSON elsewhere
_SpaceList = JSON().with_variant(ARRAY(Integer), "postgresql")


class Warehouse(Base):
    """A listed warehouse. Only rows with ``visibility`` set are ever served."""

    __tablename__ = "warehouses"

    id: Mapped[int] = mapped_column(_Id, primary_key=True, autoincrement=True)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    postal_code: Mapped[str | None] = mapped_column(String(20))

    total_space_sqft: Mapped[list[int]] = mapped_column(_SpaceList, nullable=False, default=list)
    clear_height_ft: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    number_of_docks: Mapped[int | None] = mapped_column(Integer)
    rate_per_sqft: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))

    warehouse_type: Mapped[str | None] = mapped_column(String(100))
    zone: Mapped[str | None] = mapped_column(String(100))
    compliances: Mapped[str | None] = mapped_column(Text)
    contact_person: Mapped[str | None] = mapped_column(String(255))
    other_specifications: Mapped[str | None] = mapped_column(Text)

    # Serialized: either a bare URL or a JSON array of URLs
    photos: Mapped[str | None] = mapped_column(Text)

    visibility: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, index=True,
    )

    warehouse_data: Mapped["WarehouseData | None"] = relationship(
        back_populates="warehouse", uselist=False,
    )


class WarehouseData(Base):
    """Amenity details for a warehouse (fire safety)."""

    __tablename__ = "warehouse_data"

    id: Mapped[int] = mapped_column(_Id, primary_key=True, autoincrement=True)
    warehouse_id: Mapped[int] = mapped_column(
        ForeignKey("warehouses.id", ondelete="CASCADE"), unique=True, nullable=False,
    )
    fire_noc_available: Mapped[bool | None] = mapped_column(Boolean)
    fire_safety_measures: Mapped[str | None] = mapped_column(Text)

    warehouse: Mapped[Warehouse] = relationship(back_populates="warehouse_data")
