from datetime import datetime

from pydantic import Field

from sweetswirls.models.inventory import InventoryCategory, InventorySessionStatus
from sweetswirls.schemas.common import CamelModel
from sweetswirls.schemas.location import LocationOut


# Items

class InventoryItemRequest(CamelModel):
    model_config = {"str_strip_whitespace": True}

    name: str = Field(min_length=1)
    category: InventoryCategory
    unit: str = Field(min_length=1)
    par_stock_level: float = Field(gt=0)
    default_location_id: str | None = None
    sku: str | None = None
    notes: str | None = None


class InventoryItemUpdate(CamelModel):
    model_config = {"str_strip_whitespace": True}

    name: str | None = Field(default=None, min_length=1)
    category: InventoryCategory | None = None
    unit: str | None = Field(default=None, min_length=1)
    par_stock_level: float | None = Field(default=None, gt=0)
    default_location_id: str | None = None
    sku: str | None = None
    notes: str | None = None
    is_active: bool | None = None


class InventoryItemOut(CamelModel):
    id: str
    name: str
    category: InventoryCategory
    unit: str
    par_stock_level: float
    default_location_id: str | None = None
    sku: str | None = None
    notes: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


# Counting sessions

class CreateSessionRequest(CamelModel):
    location_id: str
    notes: str | None = None


class AddSessionLineRequest(CamelModel):
    model_config = {"str_strip_whitespace": True}

    item_id: str = Field(min_length=1)
    count: float = Field(ge=0)
    unit: str = Field(min_length=1)
    note: str | None = None
    photo_url: str | None = None


class UpdateSessionLineRequest(CamelModel):
    model_config = {"str_strip_whitespace": True}

    count: float | None = Field(default=None, ge=0)
    unit: str | None = Field(default=None, min_length=1)
    note: str | None = None
    photo_url: str | None = None


class CloseSessionRequest(CamelModel):
    notes: str | None = None


class InventorySessionLineOut(CamelModel):
    id: str
    session_id: str
    item_id: str
    count: float
    unit: str
    note: str | None = None
    photo_url: str | None = None
    created_at: datetime | None = None
    item: InventoryItemOut | None = None


class InventorySessionOut(CamelModel):
    id: str
    location_id: str
    started_by: str
    started_at: datetime | None = None
    closed_by: str | None = None
    closed_at: datetime | None = None
    status: InventorySessionStatus
    notes: str | None = None
    lines: list[InventorySessionLineOut] = []

    @property
    def is_closed(self) -> bool:
        return self.status == InventorySessionStatus.CLOSED


class CurrentStockOut(CamelModel):
    id: str
    item_id: str
    location_id: str
    quantity: float
    last_updated: datetime | None = None
    item: InventoryItemOut | None = None
    location: LocationOut | None = None

    @property
    def is_below_par(self) -> bool:
        return self.item is not None and self.quantity < self.item.par_stock_level
