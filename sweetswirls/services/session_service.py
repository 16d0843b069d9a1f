import logging

from sqlalchemy.orm import Session

from sweetswirls.database import utcnow
from sweetswirls.models.inventory import (
    InventorySession,
    InventorySessionLine,
    InventorySessionStatus,
)
from sweetswirls.schemas.inventory import (
    AddSessionLineRequest,
    CloseSessionRequest,
    CreateSessionRequest,
    UpdateSessionLineRequest,
)
from sweetswirls.services import inventory_service, location_service

logger = logging.getLogger(__name__)


def create_session(db: Session, data: CreateSessionRequest, user_id: str) -> InventorySession:
    if not location_service.get_location(db, data.location_id):
        raise ValueError(f"Location {data.location_id} not found")
    session = InventorySession(
        location_id=data.location_id,
        started_by=user_id,
        notes=data.notes,
        status=InventorySessionStatus.DRAFT,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def get_session(db: Session, session_id: str) -> InventorySession | None:
    return db.query(InventorySession).filter(InventorySession.id == session_id).first()


def list_sessions(db: Session, location_id: str | None = None, limit: int = 100) -> list[InventorySession]:
    q = db.query(InventorySession)
    if location_id:
        q = q.filter(InventorySession.location_id == location_id)
    return q.order_by(InventorySession.started_at.desc()).limit(limit).all()


def _require_draft(session: InventorySession) -> None:
    if session.status != InventorySessionStatus.DRAFT:
        raise ValueError("This session has been submitted and cannot be edited")


def _new_line(db: Session, session: InventorySession, data: AddSessionLineRequest, position: int) -> InventorySessionLine:
    if not inventory_service.get_item(db, data.item_id):
        raise ValueError(f"Inventory item {data.item_id} not found")
    line = InventorySessionLine(
        session_id=session.id,
        item_id=data.item_id,
        position=position,
        count=data.count,
        unit=data.unit,
        note=data.note,
        photo_url=data.photo_url,
    )
    db.add(line)
    return line


def add_line(db: Session, session_id: str, data: AddSessionLineRequest) -> InventorySessionLine | None:
    session = get_session(db, session_id)
    if not session:
        return None
    _require_draft(session)
    line = _new_line(db, session, data, position=len(session.lines))
    db.commit()
    db.refresh(line)
    return line


def add_lines(db: Session, session_id: str, lines: list[AddSessionLineRequest]) -> InventorySession | None:
    """Add several lines at once; nothing is written if any line is invalid."""
    session = get_session(db, session_id)
    if not session:
        return None
    _require_draft(session)
    start = len(session.lines)
    try:
        for offset, data in enumerate(lines):
            _new_line(db, session, data, position=start + offset)
    except ValueError:
        db.rollback()
        raise
    db.commit()
    db.refresh(session)
    return session


def get_lines(db: Session, session_id: str) -> list[InventorySessionLine]:
    return (
        db.query(InventorySessionLine)
        .filter(InventorySessionLine.session_id == session_id)
        .order_by(InventorySessionLine.position)
        .all()
    )


def update_line(
    db: Session, session_id: str, line_id: str, data: UpdateSessionLineRequest
) -> InventorySessionLine | None:
    session = get_session(db, session_id)
    if not session:
        return None
    line = db.query(InventorySessionLine).filter(
        InventorySessionLine.id == line_id,
        InventorySessionLine.session_id == session_id,
    ).first()
    if not line:
        return None
    _require_draft(session)
    changes = data.model_dump(exclude_unset=True)
    if "count" in changes and changes["count"] is None:
        raise ValueError("Count is required")
    if "unit" in changes and not changes["unit"]:
        raise ValueError("Unit is required")
    for key, value in changes.items():
        setattr(line, key, value)
    db.commit()
    db.refresh(line)
    return line


def close_session(db: Session, session_id: str, user_id: str, data: CloseSessionRequest | None = None) -> InventorySession | None:
    """Submit a counting session and write its counts into current stock."""
    session = get_session(db, session_id)
    if not session:
        return None
    if session.status != InventorySessionStatus.DRAFT:
        raise ValueError("Session is already closed")
    if not session.lines:
        raise ValueError("Cannot close session without any line items")

    session.status = InventorySessionStatus.CLOSED
    session.closed_by = user_id
    session.closed_at = utcnow()
    if data and data.notes:
        session.notes = data.notes

    for line in session.lines:
        inventory_service.set_stock(db, line.item_id, session.location_id, line.count)

    db.commit()
    db.refresh(session)
    logger.info("Closed inventory session %s with %d lines", session.id, len(session.lines))
    return session
