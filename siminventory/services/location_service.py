from sqlalchemy.orm import Session
from sqlalchemy import select, or_
from fastapi import HTTPException
from siminventory.models.location import Location, LocationType, PARENT_TYPE
from siminventory.models.item import Item
from siminventory.schemas.location import LocationCreate, LocationUpdate


def get_locations(db: Session, loc_type: LocationType | None = None) -> list[Location]:
    query = select(Location)
    if loc_type is not None:
        query = query.where(Location.type == loc_type)
    return db.scalars(query.order_by(Location.type, Location.name)).all()


def get_location(db: Session, loc_id: int) -> Location:
    loc = db.get(Location, loc_id)
    if not loc:
        raise HTTPException(status_code=404, detail="Location not found")
    return loc


def create_location(db: Session, data: LocationCreate) -> Location:
    # Hierarchy is checked here only; update refuses to change type or parent
    if data.parent_id is not None:
        parent = db.get(Location, data.parent_id)
        if not parent:
            raise HTTPException(status_code=400, detail="Parent location not found")
        expected = PARENT_TYPE[data.type]
        if expected is None:
            raise HTTPException(status_code=400, detail="A Room cannot have a parent location")
        if parent.type != expected:
            raise HTTPException(
                status_code=400,
                detail=f"A {data.type.value} must have a {expected.value} as parent",
            )
    elif data.type != LocationType.room:
        raise HTTPException(status_code=400, detail=f"A {data.type.value} must have a parent location")

    loc = Location(**data.model_dump())
    db.add(loc)
    db.commit()
    db.refresh(loc)
    return loc


def update_location(db: Session, loc_id: int, data: LocationUpdate) -> Location:
    loc = get_location(db, loc_id)
    update_data = data.model_dump(exclude_unset=True)

    if update_data.get("type") is not None and update_data["type"] != loc.type:
        raise HTTPException(status_code=400, detail="Cannot change location type after creation")
    if "parent_id" in update_data and update_data["parent_id"] != loc.parent_id:
        raise HTTPException(status_code=400, detail="Cannot change parent location after creation")

    for field in ("name", "description"):
        if update_data.get(field) is not None:
            setattr(loc, field, update_data[field])
    db.commit()
    db.refresh(loc)
    return loc


def _items_using(loc_id: int):
    return select(Item).where(
        or_(Item.room_id == loc_id, Item.rack_id == loc_id, Item.shelf_id == loc_id)
    )


def delete_location(db: Session, loc_id: int) -> None:
    loc = get_location(db, loc_id)
    if db.scalar(select(Location.id).where(Location.parent_id == loc_id).limit(1)) is not None:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete location with child locations. Remove child locations first.",
        )
    if db.scalar(_items_using(loc_id).limit(1)) is not None:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete location that is being used by items. Move items first.",
        )
    db.delete(loc)
    db.commit()


def get_items_at_location(db: Session, loc_id: int) -> list[Item]:
    get_location(db, loc_id)
    return db.scalars(_items_using(loc_id).order_by(Item.name)).all()


def get_hierarchy(db: Session) -> list[dict]:
    """Rooms with their racks, racks with their shelves."""
    locations = db.scalars(select(Location).order_by(Location.name)).all()
    children: dict[int, list[Location]] = {}
    for loc in locations:
        if loc.parent_id is not None:
            children.setdefault(loc.parent_id, []).append(loc)

    def node(loc: Location) -> dict:
        return {
            "id": loc.id,
            "name": loc.name,
            "type": loc.type,
            "parent_id": loc.parent_id,
            "description": loc.description,
            "created_at": loc.created_at,
        }

    hierarchy = []
    for room in (l for l in locations if l.type == LocationType.room):
        racks = []
        for rack in children.get(room.id, []):
            if rack.type != LocationType.rack:
                continue
            shelves = [node(s) for s in children.get(rack.id, []) if s.type == LocationType.shelf]
            racks.append({**node(rack), "shelves": shelves})
        hierarchy.append({**node(room), "racks": racks})
    return hierarchy


def resolve_placement(db: Session, loc_id: int) -> dict:
    """Room/rack/shelf ids for an item placed at ``loc_id`` (any level)."""
    loc = get_location(db, loc_id)
    placement = {"room_id": None, "rack_id": None, "shelf_id": None}
    node = loc
    while node is not None:
        placement[f"{LocationType(node.type).value.lower()}_id"] = node.id
        node = node.parent
    return placement
