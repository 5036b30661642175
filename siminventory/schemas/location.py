from datetime import datetime
from pydantic import BaseModel, Field
from siminventory.models.location import LocationType


class LocationBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None


class LocationCreate(LocationBase):
    type: LocationType
    parent_id: int | None = None


class LocationUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    # Accepted only when unchanged
    type: LocationType | None = None
    parent_id: int | None = None


class LocationResponse(LocationBase):
    id: int
    type: LocationType
    parent_id: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


class ShelfNode(LocationResponse):
    pass


class RackNode(LocationResponse):
    shelves: list[ShelfNode] = []


class RoomNode(LocationResponse):
    racks: list[RackNode] = []
