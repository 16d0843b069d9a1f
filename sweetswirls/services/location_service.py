import logging

from sqlalchemy.orm import Session

from sweetswirls.models.location import Location, LocationType
from sweetswirls.schemas.location import CreateLocationRequest

logger = logging.getLogger(__name__)

DEFAULT_LOCATIONS = [
    ("Main Shop", LocationType.SHOP),
    ("Truck 1", LocationType.TRUCK),
    ("Truck 2", LocationType.TRUCK),
    ("Freezer A", LocationType.FREEZER),
    ("Freezer B", LocationType.FREEZER),
    ("Main Storage", LocationType.STORAGE),
]


def create_location(db: Session, data: CreateLocationRequest) -> Location:
    if data.parent_id and not get_location(db, data.parent_id):
        raise ValueError(f"Parent location {data.parent_id} not found")
    location = Location(name=data.name, type=data.type, parent_id=data.parent_id)
    db.add(location)
    db.commit()
    db.refresh(location)
    return location


def get_location(db: Session, location_id: str) -> Location | None:
    return db.query(Location).filter(Location.id == location_id).first()


def list_locations(db: Session, type: LocationType | None = None, active_only: bool = True) -> list[Location]:
    q = db.query(Location)
    if type:
        q = q.filter(Location.type == type)
    if active_only:
        q = q.filter(Location.is_active == True)
    return q.order_by(Location.name).all()


def ensure_default_locations(db: Session) -> int:
    if db.query(Location).count() > 0:
        return 0
    for name, type in DEFAULT_LOCATIONS:
        db.add(Location(name=name, type=type))
    db.commit()
    logger.info("Seeded %d default locations", len(DEFAULT_LOCATIONS))
    return len(DEFAULT_LOCATIONS)
