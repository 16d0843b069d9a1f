from datetime import datetime

from pydantic import Field

from sweetswirls.models.production import (
    ProductionBatchStatus,
    ProductionPriority,
    ProductionRequestStatus,
    WasteReason,
)
from sweetswirls.schemas.common import CamelModel
from sweetswirls.schemas.inventory import InventoryItemOut
from sweetswirls.schemas.location import LocationOut


# Requests

class CreateProductionRequestRequest(CamelModel):
    model_config = {"str_strip_whitespace": True}

    product_item_id: str = Field(min_length=1)
    location_id: str = Field(min_length=1)
    needed_by: datetime
    target_quantity: float | None = Field(default=None, ge=0)
    unit: str | None = None
    priority: ProductionPriority = ProductionPriority.NORMAL
    reason: str = Field(min_length=1)


class UpdateRequestStatusRequest(CamelModel):
    status: ProductionRequestStatus
    notes: str | None = None


class ProductionRequestOut(CamelModel):
    id: str
    product_item_id: str
    location_id: str
    requested_by: str
    needed_by: datetime
    target_quantity: float | None = None
    unit: str | None = None
    priority: ProductionPriority
    reason: str
    status: ProductionRequestStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None
    product_item: InventoryItemOut | None = None
    location: LocationOut | None = None


# Batches

class CreateBatchRequest(CamelModel):
    model_config = {"str_strip_whitespace": True}

    product_item_id: str = Field(min_length=1)
    quantity_made: float = Field(gt=0)
    unit: str = Field(min_length=1)
    storage_location_id: str = Field(min_length=1)
    lot_code: str | None = None
    notes: str | None = None


class ProductionBatchOut(CamelModel):
    id: str
    product_item_id: str
    quantity_made: float
    unit: str
    storage_location_id: str
    made_by: str
    started_at: datetime | None = None
    finished_at: datetime | None = None
    lot_code: str
    notes: str | None = None
    status: ProductionBatchStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None
    product_item: InventoryItemOut | None = None
    storage_location: LocationOut | None = None


# Waste

class RecordWasteRequest(CamelModel):
    model_config = {"str_strip_whitespace": True}

    batch_id: str | None = None
    item_id: str | None = None
    quantity: float = Field(gt=0)
    unit: str = Field(min_length=1)
    reason: WasteReason
    notes: str | None = None


class WasteEventOut(CamelModel):
    id: str
    batch_id: str | None = None
    item_id: str
    quantity: float
    unit: str
    reason: WasteReason
    recorded_by: str
    recorded_at: datetime | None = None
    notes: str | None = None
    item: InventoryItemOut | None = None
