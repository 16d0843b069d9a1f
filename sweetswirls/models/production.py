import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum, Float, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sweetswirls.database import Base, utcnow
from sweetswirls.models.inventory import InventoryItem
from sweetswirls.models.location import Location


class ProductionPriority(str, PyEnum):
    NORMAL = "NORMAL"
    HIGH = "HIGH"


class ProductionRequestStatus(str, PyEnum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class ProductionBatchStatus(str, PyEnum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    RUN_OUT = "RUN_OUT"


class WasteReason(str, PyEnum):
    SPOILAGE = "SPOILAGE"
    TEMPERATURE_EXCURSION = "TEMPERATURE_EXCURSION"
    QA_FAILURE = "QA_FAILURE"
    ACCIDENT = "ACCIDENT"
    OTHER = "OTHER"


class ProductionRequest(Base):
    __tablename__ = "production_requests"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    product_item_id: Mapped[str] = mapped_column(String, ForeignKey("inventory_items.id"), nullable=False)
    location_id: Mapped[str] = mapped_column(String, ForeignKey("locations.id"), nullable=False)
    requested_by: Mapped[str] = mapped_column(String, ForeignKey("users.id"), nullable=False)
    needed_by: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    target_quantity: Mapped[float | None] = mapped_column(Float, nullable=True)
    unit: Mapped[str | None] = mapped_column(String, nullable=True)
    priority: Mapped[ProductionPriority] = mapped_column(
        Enum(ProductionPriority, values_callable=lambda x: [e.value for e in x]),
        default=ProductionPriority.NORMAL,
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[ProductionRequestStatus] = mapped_column(
        Enum(ProductionRequestStatus, values_callable=lambda x: [e.value for e in x]),
        default=ProductionRequestStatus.OPEN,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    product_item: Mapped["InventoryItem"] = relationship(InventoryItem)
    location: Mapped["Location"] = relationship(Location)


class ProductionBatch(Base):
    __tablename__ = "production_batches"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    product_item_id: Mapped[str] = mapped_column(String, ForeignKey("inventory_items.id"), nullable=False)
    quantity_made: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String, nullable=False)
    storage_location_id: Mapped[str] = mapped_column(String, ForeignKey("locations.id"), nullable=False)
    made_by: Mapped[str] = mapped_column(String, ForeignKey("users.id"), nullable=False)
    started_at: Mapped[datetime | None] = mapped_column(DateTime, default=utcnow)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    lot_code: Mapped[str] = mapped_column(String, unique=True, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ProductionBatchStatus] = mapped_column(
        Enum(ProductionBatchStatus, values_callable=lambda x: [e.value for e in x]),
        default=ProductionBatchStatus.IN_PROGRESS,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    product_item: Mapped["InventoryItem"] = relationship(InventoryItem)
    storage_location: Mapped["Location"] = relationship(Location)


class WasteEvent(Base):
    __tablename__ = "waste_events"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    batch_id: Mapped[str | None] = mapped_column(String, ForeignKey("production_batches.id"), nullable=True, index=True)
    item_id: Mapped[str] = mapped_column(String, ForeignKey("inventory_items.id"), nullable=False, index=True)
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String, nullable=False)
    reason: Mapped[WasteReason] = mapped_column(
        Enum(WasteReason, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    recorded_by: Mapped[str] = mapped_column(String, ForeignKey("users.id"), nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    item: Mapped["InventoryItem"] = relationship(InventoryItem)
    batch: Mapped[ProductionBatch | None] = relationship(ProductionBatch)
