import logging

from sqlalchemy.orm import Session

from sweetswirls.models.inventory import CurrentStock, InventoryCategory, InventoryItem
from sweetswirls.models.location import LocationType
from sweetswirls.schemas.inventory import InventoryItemRequest, InventoryItemUpdate
from sweetswirls.services import location_service

logger = logging.getLogger(__name__)

SAMPLE_ITEMS = [
    ("Vanilla Base", InventoryCategory.BASE, "gallons", 10.0, "VAN-BASE-001", "Primary vanilla ice cream base"),
    ("Chocolate Base", InventoryCategory.BASE, "gallons", 8.0, "CHOC-BASE-001", "Rich chocolate ice cream base"),
    ("Chocolate Chips", InventoryCategory.MIX_IN, "lbs", 5.0, "CHOC-CHIP-001", None),
    ("Caramel Swirl", InventoryCategory.MIX_IN, "quarts", 12.0, "CAR-SWIRL-001", None),
    ("Pint Containers", InventoryCategory.PACKAGING, "pieces", 200.0, "PINT-CONT-001", None),
    ("Quart Containers", InventoryCategory.PACKAGING, "pieces", 100.0, "QUART-CONT-001", None),
    ("Bottled Water", InventoryCategory.BEVERAGE, "cases", 5.0, "WATER-001", None),
]


def _check_location(db: Session, location_id: str | None) -> None:
    if location_id and not location_service.get_location(db, location_id):
        raise ValueError(f"Location {location_id} not found")


# Items

def create_item(db: Session, data: InventoryItemRequest) -> InventoryItem:
    _check_location(db, data.default_location_id)
    item = InventoryItem(
        name=data.name,
        category=data.category,
        unit=data.unit,
        par_stock_level=data.par_stock_level,
        default_location_id=data.default_location_id,
        sku=data.sku or None,
        notes=data.notes,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def get_item(db: Session, item_id: str) -> InventoryItem | None:
    return db.query(InventoryItem).filter(InventoryItem.id == item_id).first()


def list_items(
    db: Session, active: bool | None = True, location_id: str | None = None
) -> list[InventoryItem]:
    q = db.query(InventoryItem)
    if active is not None:
        q = q.filter(InventoryItem.is_active == active)
    if location_id:
        q = q.filter(InventoryItem.default_location_id == location_id)
    return q.order_by(InventoryItem.name).all()


def update_item(db: Session, item_id: str, data: InventoryItemUpdate) -> InventoryItem | None:
    item = get_item(db, item_id)
    if not item:
        return None
    changes = data.model_dump(exclude_unset=True)
    for field in ("name", "category", "unit", "par_stock_level"):
        if field in changes and changes[field] is None:
            raise ValueError(f"{field} cannot be empty")
    if "default_location_id" in changes:
        _check_location(db, changes["default_location_id"])
    for key, value in changes.items():
        setattr(item, key, value)
    db.commit()
    db.refresh(item)
    return item


def delete_item(db: Session, item_id: str) -> bool:
    """Soft delete: the item disappears from active listings but keeps its history."""
    item = get_item(db, item_id)
    if not item:
        return False
    item.is_active = False
    db.commit()
    return True


def ensure_sample_items(db: Session) -> int:
    if db.query(InventoryItem).count() > 0:
        return 0
    shops = location_service.list_locations(db, type=LocationType.SHOP)
    if not shops:
        return 0
    for name, category, unit, par, sku, notes in SAMPLE_ITEMS:
        db.add(InventoryItem(
            name=name,
            category=category,
            unit=unit,
            par_stock_level=par,
            default_location_id=shops[0].id,
            sku=sku,
            notes=notes,
        ))
    db.commit()
    logger.info("Seeded %d sample inventory items", len(SAMPLE_ITEMS))
    return len(SAMPLE_ITEMS)


# Current stock

def list_current_stock(
    db: Session, location_id: str | None = None, item_id: str | None = None, active_only: bool = False
) -> list[CurrentStock]:
    q = db.query(CurrentStock)
    if active_only:
        q = q.join(InventoryItem, CurrentStock.item_id == InventoryItem.id).filter(InventoryItem.is_active == True)
    if location_id:
        q = q.filter(CurrentStock.location_id == location_id)
    if item_id:
        q = q.filter(CurrentStock.item_id == item_id)
    return q.order_by(CurrentStock.last_updated.desc()).all()


def list_below_par(db: Session, location_id: str | None = None) -> list[CurrentStock]:
    q = (
        db.query(CurrentStock)
        .join(InventoryItem, CurrentStock.item_id == InventoryItem.id)
        .filter(InventoryItem.is_active == True, CurrentStock.quantity < InventoryItem.par_stock_level)
    )
    if location_id:
        q = q.filter(CurrentStock.location_id == location_id)
    return q.order_by(InventoryItem.name).all()


def set_stock(db: Session, item_id: str, location_id: str, quantity: float) -> CurrentStock:
    """Upsert the counted quantity. Caller commits."""
    stock = db.query(CurrentStock).filter(
        CurrentStock.item_id == item_id,
        CurrentStock.location_id == location_id,
    ).first()
    if not stock:
        stock = CurrentStock(item_id=item_id, location_id=location_id, quantity=0.0)
        db.add(stock)
    stock.quantity = quantity
    db.flush()
    return stock


def adjust_stock(db: Session, item_id: str, location_id: str, delta: float) -> CurrentStock:
    """Add ``delta`` to the on-hand quantity, never going below zero. Caller commits."""
    stock = db.query(CurrentStock).filter(
        CurrentStock.item_id == item_id,
        CurrentStock.location_id == location_id,
    ).first()
    if not stock:
        stock = CurrentStock(item_id=item_id, location_id=location_id, quantity=0.0)
        db.add(stock)
    stock.quantity = max((stock.quantity or 0.0) + delta, 0.0)
    db.flush()
    return stock
