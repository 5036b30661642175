import logging
import random
import time
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException
from siminventory.models.item import Item, BarcodeType
from siminventory.models.location import Location, LocationType
from siminventory.models.supplier import Supplier
from siminventory.schemas.item import ItemCreate, ItemUpdate, ItemLocation
from siminventory.schemas.pagination import Page
from siminventory.services.stock_state import Counters, derive_status

logger = logging.getLogger(__name__)

BARCODE_PREFIX = "1000"


def generate_barcode() -> str:
    """Purely numeric, scanner-friendly: prefix + 6 clock digits + 3 random digits."""
    timestamp = str(int(time.time() * 1000))[-6:]
    suffix = f"{random.randint(0, 999):03d}"
    return f"{BARCODE_PREFIX}{timestamp}{suffix}"


def get_items(
    db: Session,
    page: int = 1,
    size: int = 10,
    search: str = "",
    category: str = "",
    status: str = "",
    location: int | None = None,
) -> Page:
    query = select(Item)
    if search:
        query = query.where(
            Item.name.ilike(f"%{search}%")
            | Item.barcode.ilike(f"%{search}%")
            | Item.serial_number.ilike(f"%{search}%")
        )
    if category:
        query = query.where(Item.category == category)
    if status:
        query = query.where(Item.status == status)
    if location is not None:
        query = query.where(Item.room_id == location)
    total = db.scalar(select(func.count()).select_from(query.subquery()))
    items = db.scalars(
        query.order_by(Item.created_at.desc(), Item.id.desc()).offset((page - 1) * size).limit(size)
    ).all()
    return Page.of(items, total, page, size)


def get_item(db: Session, item_id: int) -> Item:
    item = db.get(Item, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


def get_item_by_barcode(db: Session, barcode: str) -> Item | None:
    return db.scalar(select(Item).where(Item.barcode == barcode))


def get_low_stock_items(db: Session) -> list[Item]:
    return db.scalars(
        select(Item).where(Item.quantity <= Item.reorder_level).order_by(Item.quantity, Item.name)
    ).all()


def _load_location(db: Session, loc_id: int, expected: LocationType) -> Location:
    loc = db.get(Location, loc_id)
    if not loc:
        raise HTTPException(status_code=404, detail=f"{expected.value} location not found")
    if loc.type != expected:
        raise HTTPException(status_code=400, detail=f"Location {loc.name!r} is not a {expected.value}")
    return loc


def resolve_location(db: Session, data: ItemLocation) -> dict:
    """Check that room/rack/shelf exist, have the right type and nest properly."""
    room = _load_location(db, data.room, LocationType.room)
    rack = shelf = None
    if data.rack is not None:
        rack = _load_location(db, data.rack, LocationType.rack)
        if rack.parent_id != room.id:
            raise HTTPException(status_code=400, detail=f"Rack {rack.name!r} is not in room {room.name!r}")
    if data.shelf is not None:
        if rack is None:
            raise HTTPException(status_code=400, detail="A shelf can only be given together with its rack")
        shelf = _load_location(db, data.shelf, LocationType.shelf)
        if shelf.parent_id != rack.id:
            raise HTTPException(status_code=400, detail=f"Shelf {shelf.name!r} is not on rack {rack.name!r}")
    return {
        "room_id": room.id,
        "rack_id": rack.id if rack else None,
        "shelf_id": shelf.id if shelf else None,
    }


def _check_supplier(db: Session, supplier_id: int | None) -> None:
    if supplier_id is not None and not db.get(Supplier, supplier_id):
        raise HTTPException(status_code=404, detail="Supplier not found")


def _check_barcode_free(db: Session, barcode: str, item_id: int | None = None) -> None:
    existing = get_item_by_barcode(db, barcode)
    if existing and existing.id != item_id:
        raise HTTPException(status_code=400, detail="This barcode is already assigned to another item")


def _commit_unique(db: Session) -> None:
    # Generated barcodes are not retried; a collision surfaces from the unique index
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        message = str(e.orig).lower()
        field = "barcode" if "barcode" in message else "serial number" if "serial" in message else "value"
        logger.warning("Duplicate key on item save: %s", message)
        raise HTTPException(status_code=400, detail=f"An item with this {field} already exists")


def create_item(db: Session, data: ItemCreate, user_id: int | None = None) -> Item:
    if data.barcode_type == BarcodeType.existing and data.barcode and data.barcode.strip():
        barcode = data.barcode.strip()
        _check_barcode_free(db, barcode)
        barcode_type = BarcodeType.existing
    else:
        barcode = generate_barcode()
        barcode_type = BarcodeType.generate

    _check_supplier(db, data.supplier_id)
    placement = resolve_location(db, data.location)

    fields = data.model_dump(exclude={"barcode", "barcode_type", "location", "quantity"})
    counters = Counters(quantity=data.quantity, available=data.quantity)
    item = Item(
        **fields,
        **placement,
        barcode=barcode,
        barcode_type=barcode_type,
        created_by=user_id,
    )
    counters.store(item)
    item.status = derive_status(counters, item.is_consumable)
    db.add(item)
    _commit_unique(db)
    db.refresh(item)
    logger.info("Item %s created with barcode %s", item.id, item.barcode)
    return item


def update_item(db: Session, item_id: int, data: ItemUpdate) -> Item:
    item = get_item(db, item_id)
    update_data = data.model_dump(exclude_unset=True)

    new_type = update_data.pop("barcode_type", None)
    new_barcode = update_data.pop("barcode", None)
    if new_type is None and new_barcode is not None:
        new_type = BarcodeType.existing
    if new_type == BarcodeType.existing:
        if not new_barcode or not new_barcode.strip():
            raise HTTPException(status_code=400, detail="A barcode is required when using an existing barcode")
        new_barcode = new_barcode.strip()
        if new_barcode != item.barcode:
            _check_barcode_free(db, new_barcode, item.id)
        item.barcode = new_barcode
        item.barcode_type = BarcodeType.existing
    elif new_type == BarcodeType.generate and (
        not item.barcode or item.barcode_type == BarcodeType.existing or new_barcode == ""
    ):
        item.barcode = generate_barcode()
        item.barcode_type = BarcodeType.generate
        logger.info("Generated new barcode %s for item %s", item.barcode, item.id)

    if "location" in update_data:
        location = update_data.pop("location")
        if location is not None:
            for field, value in resolve_location(db, ItemLocation(**location)).items():
                setattr(item, field, value)
    if "supplier_id" in update_data:
        _check_supplier(db, update_data["supplier_id"])

    for field, value in update_data.items():
        if value is None and field in ("name", "category", "category_type", "unit", "reorder_level"):
            continue
        setattr(item, field, value)

    item.status = derive_status(Counters.of(item), item.is_consumable)
    _commit_unique(db)
    db.refresh(item)
    return item


def delete_item(db: Session, item_id: int) -> None:
    """Hard delete; the item's ledger and allocation records go with it."""
    item = get_item(db, item_id)
    db.delete(item)
    db.commit()


def get_item_records(db: Session, item_id: int) -> dict:
    item = get_item(db, item_id)
    return {
        "sessions": item.session_records,
        "rentals": item.rental_records,
        "maintenance": item.maintenance_records,
    }
