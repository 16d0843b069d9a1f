import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sweetswirls.database import Base, utcnow
from sweetswirls.models.location import Location


class InventoryCategory(str, PyEnum):
    BASE = "BASE"
    MIX_IN = "MIX_IN"
    PACKAGING = "PACKAGING"
    BEVERAGE = "BEVERAGE"


class InventorySessionStatus(str, PyEnum):
    DRAFT = "DRAFT"
    CLOSED = "CLOSED"


class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String, nullable=False)
    category: Mapped[InventoryCategory] = mapped_column(
        Enum(InventoryCategory, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    unit: Mapped[str] = mapped_column(String, nullable=False)
    par_stock_level: Mapped[float] = mapped_column(Float, nullable=False)
    default_location_id: Mapped[str | None] = mapped_column(String, ForeignKey("locations.id"), nullable=True)
    sku: Mapped[str | None] = mapped_column(String, index=True, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())


class InventorySession(Base):
    __tablename__ = "inventory_sessions"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    location_id: Mapped[str] = mapped_column(String, ForeignKey("locations.id"), nullable=False, index=True)
    started_by: Mapped[str] = mapped_column(String, ForeignKey("users.id"), nullable=False)
    started_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    closed_by: Mapped[str | None] = mapped_column(String, ForeignKey("users.id"), nullable=True)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    status: Mapped[InventorySessionStatus] = mapped_column(
        Enum(InventorySessionStatus, values_callable=lambda x: [e.value for e in x]),
        default=InventorySessionStatus.DRAFT,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    lines: Mapped[list["InventorySessionLine"]] = relationship(
        "InventorySessionLine",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="InventorySessionLine.position",
        lazy="selectin",
    )


class InventorySessionLine(Base):
    __tablename__ = "inventory_session_lines"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    session_id: Mapped[str] = mapped_column(String, ForeignKey("inventory_sessions.id"), nullable=False)
    item_id: Mapped[str] = mapped_column(String, ForeignKey("inventory_items.id"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0)
    count: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String, nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    photo_url: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    session: Mapped["InventorySession"] = relationship("InventorySession", back_populates="lines")
    item: Mapped["InventoryItem"] = relationship("InventoryItem")


class CurrentStock(Base):
    """Latest counted quantity of one item at one location."""

    __tablename__ = "current_stock"
    __table_args__ = (UniqueConstraint("item_id", "location_id"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    item_id: Mapped[str] = mapped_column(String, ForeignKey("inventory_items.id"), nullable=False)
    location_id: Mapped[str] = mapped_column(String, ForeignKey("locations.id"), nullable=False)
    quantity: Mapped[float] = mapped_column(Float, default=0.0)
    last_updated: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    item: Mapped["InventoryItem"] = relationship("InventoryItem")
    location: Mapped["Location"] = relationship(Location)
