"""Seed script: fills the DB with development data."""
import os
import sys

# Ensure we're in the project root
sys.path.insert(0, os.path.dirname(__file__))

from datetime import date
from decimal import Decimal

from sqlalchemy import select

from siminventory.database import Base, engine, SessionLocal
import siminventory.models  # noqa: F401  register all models
from siminventory.models.user import User, Role
from siminventory.models.location import Location, LocationType
from siminventory.models.supplier import Supplier
from siminventory.models.item import Item, CategoryType
from siminventory.services.item_service import generate_barcode
from siminventory.services.stock_state import Counters, derive_status
from siminventory.services.user_service import hash_password


def _location(db, name, loc_type, parent=None, description=None):
    loc = db.scalar(select(Location).where(Location.name == name, Location.type == loc_type))
    if loc is None:
        loc = Location(name=name, type=loc_type, parent=parent, description=description)
        db.add(loc)
        db.flush()
    return loc


def seed():
    os.makedirs("data", exist_ok=True)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    users = [
        ("Administrator", "admin@example.com", Role.admin),
        ("Lab Manager", "manager@example.com", Role.inventory_manager),
        ("Lab Staff", "staff@example.com", Role.staff),
    ]
    for name, email, role in users:
        if not db.scalar(select(User).where(User.email == email)):
            db.add(User(name=name, email=email, hashed_password=hash_password("admin123"), role=role.value))
    db.commit()
    admin = db.scalar(select(User).where(User.email == "admin@example.com"))

    # Locations: Room > Rack > Shelf
    skills = _location(db, "Skills Lab", LocationType.room, description="Main simulation room")
    storage = _location(db, "Storage Room", LocationType.room)
    rack_a = _location(db, "Rack A", LocationType.rack, skills)
    rack_b = _location(db, "Rack B", LocationType.rack, storage)
    shelf_a1 = _location(db, "Shelf A1", LocationType.shelf, rack_a)
    shelf_b1 = _location(db, "Shelf B1", LocationType.shelf, rack_b)
    db.commit()

    supplier = db.scalar(select(Supplier).where(Supplier.name == "MedSim Supplies"))
    if supplier is None:
        supplier = Supplier(
            name="MedSim Supplies",
            contact_person="Sales Desk",
            email="sales@medsim-supplies.com",
            phone="+1 555 0100",
        )
        db.add(supplier)
        db.commit()

    items_data = [
        ("Adult CPR Manikin", "Manikin", CategoryType.manikin, 4, "1200.00", (skills, rack_a, shelf_a1)),
        ("IV Arm Task Trainer", "Task Trainer", CategoryType.task_trainer, 6, "450.00", (skills, rack_a, None)),
        ("Patient Monitor", "Electronic", CategoryType.electronic, 2, "3100.00", (skills, None, None)),
        ("Infusion Pump", "Device", CategoryType.device, 3, "890.00", (storage, rack_b, None)),
        ("Nitrile Gloves (box)", "Consumable", CategoryType.consumable, 40, "7.50", (storage, rack_b, shelf_b1)),
        ("Gauze Pads (pack)", "Consumable", CategoryType.consumable, 4, "3.20", (storage, rack_b, shelf_b1)),
    ]
    existing = set(db.scalars(select(Item.name)).all())
    for name, category, category_type, qty, cost, (room, rack, shelf) in items_data:
        if name in existing:
            continue
        item = Item(
            name=name,
            category=category,
            category_type=category_type,
            barcode=generate_barcode(),
            room_id=room.id,
            rack_id=rack.id if rack else None,
            shelf_id=shelf.id if shelf else None,
            unit_cost=Decimal(cost),
            supplier_id=supplier.id,
            purchase_date=date(2025, 9, 1),
            created_by=admin.id if admin else None,
        )
        counters = Counters(quantity=qty, available=qty)
        counters.store(item)
        item.status = derive_status(counters, item.is_consumable)
        db.add(item)
    db.commit()
    db.close()
    print("Seed complete.")


if __name__ == "__main__":
    seed()
