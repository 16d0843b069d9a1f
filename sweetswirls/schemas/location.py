from pydantic import Field

from sweetswirls.models.location import LocationType
from sweetswirls.schemas.common import CamelModel


class CreateLocationRequest(CamelModel):
    name: str = Field(min_length=1)
    type: LocationType
    parent_id: str | None = None


class LocationOut(CamelModel):
    id: str
    name: str
    type: LocationType
    parent_id: str | None = None
    is_active: bool = True
