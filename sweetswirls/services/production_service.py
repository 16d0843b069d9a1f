import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from sweetswirls.database import utcnow
from sweetswirls.models.production import (
    ProductionBatch,
    ProductionBatchStatus,
    ProductionRequest,
    ProductionRequestStatus,
    WasteEvent,
)
from sweetswirls.schemas.production import (
    CreateBatchRequest,
    CreateProductionRequestRequest,
    RecordWasteRequest,
)
from sweetswirls.services import inventory_service, location_service

logger = logging.getLogger(__name__)

REQUEST_TRANSITIONS: dict[ProductionRequestStatus, set[ProductionRequestStatus]] = {
    ProductionRequestStatus.OPEN: {ProductionRequestStatus.IN_PROGRESS, ProductionRequestStatus.ARCHIVED},
    ProductionRequestStatus.IN_PROGRESS: {ProductionRequestStatus.COMPLETED, ProductionRequestStatus.ARCHIVED},
    ProductionRequestStatus.COMPLETED: {ProductionRequestStatus.ARCHIVED},
    ProductionRequestStatus.ARCHIVED: set(),
}


def _generate_lot_code() -> str:
    ts = datetime.now(timezone.utc).strftime("%Y%m%d")
    short = uuid.uuid4().hex[:6].upper()
    return f"LOT-{ts}-{short}"


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _check_item_and_location(db: Session, item_id: str, location_id: str) -> None:
    if not inventory_service.get_item(db, item_id):
        raise ValueError(f"Inventory item {item_id} not found")
    if not location_service.get_location(db, location_id):
        raise ValueError(f"Location {location_id} not found")


# Production requests

def create_request(db: Session, data: CreateProductionRequestRequest, user_id: str) -> ProductionRequest:
    _check_item_and_location(db, data.product_item_id, data.location_id)
    request = ProductionRequest(
        product_item_id=data.product_item_id,
        location_id=data.location_id,
        requested_by=user_id,
        needed_by=_as_naive_utc(data.needed_by),
        target_quantity=data.target_quantity,
        unit=data.unit or None,
        priority=data.priority,
        reason=data.reason,
        status=ProductionRequestStatus.OPEN,
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    return request


def get_request(db: Session, request_id: str) -> ProductionRequest | None:
    return db.query(ProductionRequest).filter(ProductionRequest.id == request_id).first()


def list_requests(
    db: Session,
    status: ProductionRequestStatus | None = None,
    location_id: str | None = None,
    skip: int = 0,
    limit: int = 100,
) -> list[ProductionRequest]:
    q = db.query(ProductionRequest)
    if status:
        q = q.filter(ProductionRequest.status == status)
    if location_id:
        q = q.filter(ProductionRequest.location_id == location_id)
    return q.order_by(ProductionRequest.needed_by).offset(skip).limit(limit).all()


def list_overdue_requests(db: Session) -> list[ProductionRequest]:
    return (
        db.query(ProductionRequest)
        .filter(
            ProductionRequest.needed_by < utcnow(),
            ProductionRequest.status.in_([ProductionRequestStatus.OPEN, ProductionRequestStatus.IN_PROGRESS]),
        )
        .order_by(ProductionRequest.needed_by)
        .all()
    )


def update_request_status(db: Session, request_id: str, status: ProductionRequestStatus) -> ProductionRequest | None:
    request = get_request(db, request_id)
    if not request:
        return None
    if status not in REQUEST_TRANSITIONS[request.status]:
        raise ValueError(f"Cannot move production request from '{request.status.value}' to '{status.value}'")
    previous = request.status
    request.status = status
    db.commit()
    db.refresh(request)
    logger.info("Production request %s: %s -> %s", request.id, previous.value, status.value)
    return request


def start_request(db: Session, request_id: str) -> ProductionRequest | None:
    return update_request_status(db, request_id, ProductionRequestStatus.IN_PROGRESS)


def complete_request(db: Session, request_id: str) -> ProductionRequest | None:
    return update_request_status(db, request_id, ProductionRequestStatus.COMPLETED)


def archive_request(db: Session, request_id: str) -> ProductionRequest | None:
    return update_request_status(db, request_id, ProductionRequestStatus.ARCHIVED)


def delete_request(db: Session, request_id: str) -> bool:
    request = get_request(db, request_id)
    if not request:
        return False
    if request.status != ProductionRequestStatus.OPEN:
        raise ValueError(f"Cannot delete production request in '{request.status.value}' status")
    db.delete(request)
    db.commit()
    return True


# Batches

def create_batch(db: Session, data: CreateBatchRequest, user_id: str) -> ProductionBatch:
    _check_item_and_location(db, data.product_item_id, data.storage_location_id)
    lot_code = data.lot_code or _generate_lot_code()
    if db.query(ProductionBatch).filter(ProductionBatch.lot_code == lot_code).first():
        raise ValueError(f"Lot code '{lot_code}' is already in use")
    batch = ProductionBatch(
        product_item_id=data.product_item_id,
        quantity_made=data.quantity_made,
        unit=data.unit,
        storage_location_id=data.storage_location_id,
        made_by=user_id,
        lot_code=lot_code,
        notes=data.notes,
        status=ProductionBatchStatus.IN_PROGRESS,
    )
    db.add(batch)
    inventory_service.adjust_stock(db, batch.product_item_id, batch.storage_location_id, batch.quantity_made)
    db.commit()
    db.refresh(batch)
    logger.info("Recorded batch %s (%s %s)", batch.lot_code, batch.quantity_made, batch.unit)
    return batch


def get_batch(db: Session, batch_id: str) -> ProductionBatch | None:
    return db.query(ProductionBatch).filter(ProductionBatch.id == batch_id).first()


def list_batches(
    db: Session, status: ProductionBatchStatus | None = None, skip: int = 0, limit: int = 200
) -> list[ProductionBatch]:
    q = db.query(ProductionBatch)
    if status:
        q = q.filter(ProductionBatch.status == status)
    return q.order_by(ProductionBatch.created_at.desc()).offset(skip).limit(limit).all()


def complete_batch(db: Session, batch_id: str) -> ProductionBatch | None:
    batch = get_batch(db, batch_id)
    if not batch:
        return None
    if batch.status != ProductionBatchStatus.IN_PROGRESS:
        raise ValueError(f"Cannot complete batch in '{batch.status.value}' status")
    batch.status = ProductionBatchStatus.COMPLETED
    batch.finished_at = utcnow()
    db.commit()
    db.refresh(batch)
    logger.info("Batch %s completed", batch.lot_code)
    return batch


def run_out_batch(db: Session, batch_id: str) -> ProductionBatch | None:
    batch = get_batch(db, batch_id)
    if not batch:
        return None
    if batch.status not in (ProductionBatchStatus.IN_PROGRESS, ProductionBatchStatus.COMPLETED):
        raise ValueError(f"Cannot mark batch in '{batch.status.value}' status as run out")
    batch.status = ProductionBatchStatus.RUN_OUT
    if not batch.finished_at:
        batch.finished_at = utcnow()
    inventory_service.adjust_stock(db, batch.product_item_id, batch.storage_location_id, -batch.quantity_made)
    db.commit()
    db.refresh(batch)
    logger.info("Batch %s ran out", batch.lot_code)
    return batch


# Waste

def record_waste(db: Session, data: RecordWasteRequest, user_id: str) -> WasteEvent:
    item_id = data.item_id
    batch = None
    if data.batch_id:
        batch = get_batch(db, data.batch_id)
        if not batch:
            raise ValueError(f"Batch {data.batch_id} not found")
        if batch.status == ProductionBatchStatus.RUN_OUT:
            raise ValueError("Cannot record waste for run out batch")
        if item_id and item_id != batch.product_item_id:
            raise ValueError("Item does not match the batch's product")
        item_id = batch.product_item_id
    if not item_id:
        raise ValueError("Either an item or a batch is required")
    if not inventory_service.get_item(db, item_id):
        raise ValueError(f"Inventory item {item_id} not found")

    event = WasteEvent(
        batch_id=data.batch_id,
        item_id=item_id,
        quantity=data.quantity,
        unit=data.unit,
        reason=data.reason,
        recorded_by=user_id,
        notes=data.notes,
    )
    db.add(event)
    if batch:
        inventory_service.adjust_stock(db, item_id, batch.storage_location_id, -data.quantity)
    db.commit()
    db.refresh(event)
    logger.info("Recorded waste of %s %s (%s)", event.quantity, event.unit, event.reason.value)
    return event


def list_waste(
    db: Session, batch_id: str | None = None, item_id: str | None = None, limit: int = 200
) -> list[WasteEvent]:
    q = db.query(WasteEvent)
    if batch_id:
        q = q.filter(WasteEvent.batch_id == batch_id)
    if item_id:
        q = q.filter(WasteEvent.item_id == item_id)
    return q.order_by(WasteEvent.recorded_at.desc()).limit(limit).all()
