from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from sweetswirls.api.deps import get_current_user, require
from sweetswirls.database import get_db
from sweetswirls.models.location import LocationType
from sweetswirls.models.user import User
from sweetswirls.permissions import Capability
from sweetswirls.schemas.location import CreateLocationRequest, LocationOut
from sweetswirls.services import location_service

router = APIRouter(prefix="/locations", tags=["Locations"])


@router.get("", response_model=list[LocationOut])
def list_locations(
    type: LocationType | None = None, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    return location_service.list_locations(db, type=type)


@router.post("", response_model=LocationOut, status_code=201)
def create_location(
    data: CreateLocationRequest,
    user: User = Depends(require(Capability.MANAGE_USERS)),
    db: Session = Depends(get_db),
):
    try:
        return location_service.create_location(db, data)
    except ValueError as e:
        raise HTTPException(400, str(e))


@router.get("/{location_id}", response_model=LocationOut)
def get_location(location_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    location = location_service.get_location(db, location_id)
    if not location:
        raise HTTPException(404, "Location not found")
    return location
