from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from sweetswirls.api.deps import require
from sweetswirls.database import get_db
from sweetswirls.models.user import User
from sweetswirls.permissions import Capability
from sweetswirls.schemas.inventory import (
    CurrentStockOut,
    InventoryItemOut,
    InventoryItemRequest,
    InventoryItemUpdate,
)
from sweetswirls.services import inventory_service

router = APIRouter(prefix="/inventory", tags=["Inventory"])

viewer = require(Capability.VIEW_INVENTORY)
manager = require(Capability.MANAGE_INVENTORY)


@router.get("/items", response_model=list[InventoryItemOut])
def list_items(
    active: bool | None = True,
    location_id: str | None = None,
    user: User = Depends(viewer),
    db: Session = Depends(get_db),
):
    return inventory_service.list_items(db, active=active, location_id=location_id)


@router.post("/items", response_model=InventoryItemOut, status_code=201)
def create_item(data: InventoryItemRequest, user: User = Depends(manager), db: Session = Depends(get_db)):
    try:
        return inventory_service.create_item(db, data)
    except ValueError as e:
        raise HTTPException(400, str(e))


@router.get("/items/{item_id}", response_model=InventoryItemOut)
def get_item(item_id: str, user: User = Depends(viewer), db: Session = Depends(get_db)):
    item = inventory_service.get_item(db, item_id)
    if not item:
        raise HTTPException(404, "Inventory item not found")
    return item


@router.put("/items/{item_id}", response_model=InventoryItemOut)
def update_item(
    item_id: str, data: InventoryItemUpdate, user: User = Depends(manager), db: Session = Depends(get_db)
):
    try:
        item = inventory_service.update_item(db, item_id, data)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if not item:
        raise HTTPException(404, "Inventory item not found")
    return item


@router.delete("/items/{item_id}", status_code=204)
def delete_item(
    item_id: str, user: User = Depends(require(Capability.DELETE_INVENTORY)), db: Session = Depends(get_db)
):
    if not inventory_service.delete_item(db, item_id):
        raise HTTPException(404, "Inventory item not found")


@router.get("/items/{item_id}/stock", response_model=list[CurrentStockOut])
def get_item_stock(
    item_id: str, location_id: str | None = None, user: User = Depends(viewer), db: Session = Depends(get_db)
):
    if not inventory_service.get_item(db, item_id):
        raise HTTPException(404, "Inventory item not found")
    return inventory_service.list_current_stock(db, location_id=location_id, item_id=item_id)


@router.get("/current", response_model=list[CurrentStockOut])
def current_stock(location_id: str | None = None, user: User = Depends(viewer), db: Session = Depends(get_db)):
    return inventory_service.list_current_stock(db, location_id=location_id, active_only=True)


@router.get("/current/below-par", response_model=list[CurrentStockOut])
def below_par(location_id: str | None = None, user: User = Depends(viewer), db: Session = Depends(get_db)):
    return inventory_service.list_below_par(db, location_id=location_id)
