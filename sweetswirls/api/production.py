from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from sweetswirls.api.deps import require
from sweetswirls.database import get_db
from sweetswirls.models.production import ProductionBatchStatus, ProductionRequestStatus
from sweetswirls.models.user import User
from sweetswirls.permissions import Capability
from sweetswirls.schemas.production import (
    CreateBatchRequest,
    CreateProductionRequestRequest,
    ProductionBatchOut,
    ProductionRequestOut,
    RecordWasteRequest,
    UpdateRequestStatusRequest,
    WasteEventOut,
)
from sweetswirls.services import production_service

router = APIRouter(prefix="/production", tags=["Production"])

viewer = require(Capability.VIEW_PRODUCTION)
manager = require(Capability.MANAGE_PRODUCTION)


def _request_or_404(request):
    if not request:
        raise HTTPException(404, "Production request not found")
    return request


def _batch_or_404(batch):
    if not batch:
        raise HTTPException(404, "Production batch not found")
    return batch


# Requests

@router.get("/requests", response_model=list[ProductionRequestOut])
def list_requests(
    status: ProductionRequestStatus | None = None,
    location_id: str | None = None,
    skip: int = 0,
    limit: int = 100,
    user: User = Depends(viewer),
    db: Session = Depends(get_db),
):
    return production_service.list_requests(db, status=status, location_id=location_id, skip=skip, limit=limit)


@router.post("/requests", response_model=ProductionRequestOut, status_code=201)
def create_request(
    data: CreateProductionRequestRequest,
    user: User = Depends(require(Capability.CREATE_PRODUCTION_REQUESTS)),
    db: Session = Depends(get_db),
):
    try:
        return production_service.create_request(db, data, user.id)
    except ValueError as e:
        raise HTTPException(400, str(e))


@router.get("/requests/overdue", response_model=list[ProductionRequestOut])
def overdue_requests(user: User = Depends(viewer), db: Session = Depends(get_db)):
    return production_service.list_overdue_requests(db)


@router.get("/requests/{request_id}", response_model=ProductionRequestOut)
def get_request(request_id: str, user: User = Depends(viewer), db: Session = Depends(get_db)):
    return _request_or_404(production_service.get_request(db, request_id))


@router.patch("/requests/{request_id}", response_model=ProductionRequestOut)
def update_request_status(
    request_id: str, data: UpdateRequestStatusRequest, user: User = Depends(manager), db: Session = Depends(get_db)
):
    try:
        request = production_service.update_request_status(db, request_id, data.status)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return _request_or_404(request)


@router.delete("/requests/{request_id}", status_code=204)
def delete_request(request_id: str, user: User = Depends(manager), db: Session = Depends(get_db)):
    try:
        deleted = production_service.delete_request(db, request_id)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if not deleted:
        raise HTTPException(404, "Production request not found")


@router.post("/requests/{request_id}/start", response_model=ProductionRequestOut)
def start_request(request_id: str, user: User = Depends(manager), db: Session = Depends(get_db)):
    try:
        request = production_service.start_request(db, request_id)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return _request_or_404(request)


@router.post("/requests/{request_id}/complete", response_model=ProductionRequestOut)
def complete_request(request_id: str, user: User = Depends(manager), db: Session = Depends(get_db)):
    try:
        request = production_service.complete_request(db, request_id)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return _request_or_404(request)


@router.post("/requests/{request_id}/archive", response_model=ProductionRequestOut)
def archive_request(request_id: str, user: User = Depends(manager), db: Session = Depends(get_db)):
    try:
        request = production_service.archive_request(db, request_id)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return _request_or_404(request)


# Batches

@router.get("/batches", response_model=list[ProductionBatchOut])
def list_batches(
    status: ProductionBatchStatus | None = None,
    skip: int = 0,
    limit: int = 200,
    user: User = Depends(viewer),
    db: Session = Depends(get_db),
):
    return production_service.list_batches(db, status=status, skip=skip, limit=limit)


@router.post("/batches", response_model=ProductionBatchOut, status_code=201)
def create_batch(
    data: CreateBatchRequest,
    user: User = Depends(require(Capability.RECORD_BATCHES)),
    db: Session = Depends(get_db),
):
    try:
        return production_service.create_batch(db, data, user.id)
    except ValueError as e:
        raise HTTPException(400, str(e))


@router.get("/batches/{batch_id}", response_model=ProductionBatchOut)
def get_batch(batch_id: str, user: User = Depends(viewer), db: Session = Depends(get_db)):
    return _batch_or_404(production_service.get_batch(db, batch_id))


@router.post("/batches/{batch_id}/complete", response_model=ProductionBatchOut)
def complete_batch(
    batch_id: str, user: User = Depends(require(Capability.RECORD_BATCHES)), db: Session = Depends(get_db)
):
    try:
        batch = production_service.complete_batch(db, batch_id)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return _batch_or_404(batch)


@router.post("/batches/{batch_id}/runout", response_model=ProductionBatchOut)
def run_out_batch(
    batch_id: str, user: User = Depends(require(Capability.RECORD_BATCHES)), db: Session = Depends(get_db)
):
    try:
        batch = production_service.run_out_batch(db, batch_id)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return _batch_or_404(batch)


@router.get("/batches/{batch_id}/waste", response_model=list[WasteEventOut])
def batch_waste(batch_id: str, user: User = Depends(viewer), db: Session = Depends(get_db)):
    _batch_or_404(production_service.get_batch(db, batch_id))
    return production_service.list_waste(db, batch_id=batch_id)


@router.post("/batches/{batch_id}/waste", response_model=WasteEventOut, status_code=201)
def record_batch_waste(
    batch_id: str,
    data: RecordWasteRequest,
    user: User = Depends(require(Capability.RECORD_WASTE)),
    db: Session = Depends(get_db),
):
    _batch_or_404(production_service.get_batch(db, batch_id))
    data = data.model_copy(update={"batch_id": batch_id})
    try:
        return production_service.record_waste(db, data, user.id)
    except ValueError as e:
        raise HTTPException(400, str(e))


# Waste

@router.get("/waste", response_model=list[WasteEventOut])
def list_waste(
    batch_id: str | None = None,
    item_id: str | None = None,
    limit: int = 200,
    user: User = Depends(viewer),
    db: Session = Depends(get_db),
):
    return production_service.list_waste(db, batch_id=batch_id, item_id=item_id, limit=limit)


@router.post("/waste", response_model=WasteEventOut, status_code=201)
def record_waste(
    data: RecordWasteRequest,
    user: User = Depends(require(Capability.RECORD_WASTE)),
    db: Session = Depends(get_db),
):
    try:
        return production_service.record_waste(db, data, user.id)
    except ValueError as e:
        raise HTTPException(400, str(e))
