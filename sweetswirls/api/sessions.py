from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from sweetswirls.api.deps import require
from sweetswirls.database import get_db
from sweetswirls.models.user import User
from sweetswirls.permissions import Capability
from sweetswirls.schemas.inventory import (
    AddSessionLineRequest,
    CloseSessionRequest,
    CreateSessionRequest,
    InventorySessionLineOut,
    InventorySessionOut,
    UpdateSessionLineRequest,
)
from sweetswirls.services import session_service

router = APIRouter(prefix="/inventory/sessions", tags=["Inventory Sessions"])

viewer = require(Capability.VIEW_INVENTORY)
counter = require(Capability.TAKE_INVENTORY)


@router.get("", response_model=list[InventorySessionOut])
def list_sessions(
    location_id: str | None = None,
    limit: int = 100,
    user: User = Depends(viewer),
    db: Session = Depends(get_db),
):
    return session_service.list_sessions(db, location_id=location_id, limit=limit)


@router.post("", response_model=InventorySessionOut, status_code=201)
def create_session(data: CreateSessionRequest, user: User = Depends(counter), db: Session = Depends(get_db)):
    try:
        return session_service.create_session(db, data, user.id)
    except ValueError as e:
        raise HTTPException(400, str(e))


@router.get("/{session_id}", response_model=InventorySessionOut)
def get_session(session_id: str, user: User = Depends(viewer), db: Session = Depends(get_db)):
    session = session_service.get_session(db, session_id)
    if not session:
        raise HTTPException(404, "Inventory session not found")
    return session


@router.get("/{session_id}/lines", response_model=list[InventorySessionLineOut])
def get_lines(session_id: str, user: User = Depends(viewer), db: Session = Depends(get_db)):
    if not session_service.get_session(db, session_id):
        raise HTTPException(404, "Inventory session not found")
    return session_service.get_lines(db, session_id)


@router.post("/{session_id}/lines", response_model=InventorySessionLineOut, status_code=201)
def add_line(
    session_id: str, data: AddSessionLineRequest, user: User = Depends(counter), db: Session = Depends(get_db)
):
    try:
        line = session_service.add_line(db, session_id, data)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if not line:
        raise HTTPException(404, "Inventory session not found")
    return line


@router.post("/{session_id}/lines/batch", response_model=InventorySessionOut, status_code=201)
def add_lines(
    session_id: str,
    data: list[AddSessionLineRequest],
    user: User = Depends(counter),
    db: Session = Depends(get_db),
):
    try:
        session = session_service.add_lines(db, session_id, data)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if not session:
        raise HTTPException(404, "Inventory session not found")
    return session


@router.put("/{session_id}/lines/{line_id}", response_model=InventorySessionLineOut)
def update_line(
    session_id: str,
    line_id: str,
    data: UpdateSessionLineRequest,
    user: User = Depends(counter),
    db: Session = Depends(get_db),
):
    try:
        line = session_service.update_line(db, session_id, line_id, data)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if not line:
        raise HTTPException(404, "Session line not found")
    return line


@router.post("/{session_id}/close", response_model=InventorySessionOut)
def close_session(
    session_id: str,
    data: CloseSessionRequest | None = None,
    user: User = Depends(counter),
    db: Session = Depends(get_db),
):
    try:
        session = session_service.close_session(db, session_id, user.id, data)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if not session:
        raise HTTPException(404, "Inventory session not found")
    return session
