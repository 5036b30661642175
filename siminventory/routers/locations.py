import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from siminventory.database import get_db
from siminventory.models.location import LocationType
from siminventory.models.user import User
from siminventory.schemas.location import LocationCreate, LocationUpdate, LocationResponse, RoomNode
from siminventory.schemas.item import ItemResponse
from siminventory.routers.auth import require_user, require_manager, require_admin
import siminventory.services.location_service as svc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/locations", tags=["locations"])


@router.get("", response_model=list[LocationResponse])
def list_locations(
    type: LocationType | None = Query(None),
    db: Session = Depends(get_db),
    _=Depends(require_user),
):
    return svc.get_locations(db, loc_type=type)


@router.get("/hierarchy", response_model=list[RoomNode])
def location_hierarchy(db: Session = Depends(get_db), _=Depends(require_user)):
    return svc.get_hierarchy(db)


@router.post("", response_model=LocationResponse, status_code=201)
def create_location(data: LocationCreate, db: Session = Depends(get_db), _=Depends(require_manager)):
    return svc.create_location(db, data)


@router.get("/{loc_id}", response_model=LocationResponse)
def get_location(loc_id: int, db: Session = Depends(get_db), _=Depends(require_user)):
    return svc.get_location(db, loc_id)


@router.put("/{loc_id}", response_model=LocationResponse)
def update_location(loc_id: int, data: LocationUpdate, db: Session = Depends(get_db), _=Depends(require_manager)):
    return svc.update_location(db, loc_id, data)


@router.delete("/{loc_id}")
def delete_location(loc_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    svc.delete_location(db, loc_id)
    logger.info("AUDIT: '%s' deleted location %s", admin.email, loc_id)
    return {"message": "Location removed"}


@router.get("/{loc_id}/items", response_model=list[ItemResponse])
def items_at_location(loc_id: int, db: Session = Depends(get_db), _=Depends(require_user)):
    return svc.get_items_at_location(db, loc_id)
