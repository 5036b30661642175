"""Read-only rollups, computed at request time straight from the tables."""
import math
from datetime import datetime, date, time, timedelta, timezone
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from siminventory.models.item import Item
from siminventory.models.location import Location, LocationType
from siminventory.models.supplier import Supplier
from siminventory.models.transaction import Transaction, TransactionType

_ITEM_VALUE = Item.quantity * func.coalesce(Item.unit_cost, 0)


def _as_number(value) -> float:
    if value is None:
        return 0
    if isinstance(value, Decimal):
        return float(value)
    return value


def _count(db: Session, model, *where) -> int:
    return db.scalar(select(func.count()).select_from(model).where(*where)) or 0


def _grouped_counts(db: Session, column) -> list[dict]:
    rows = db.execute(select(column, func.count()).group_by(column).order_by(column)).all()
    return [{"key": getattr(key, "value", key), "count": count} for key, count in rows]


def get_dashboard(db: Session) -> dict:
    recent = db.scalars(
        select(Transaction).order_by(Transaction.timestamp.desc(), Transaction.id.desc()).limit(10)
    ).all()
    return {
        "total_items": _count(db, Item),
        "items_by_category": _grouped_counts(db, Item.category),
        "items_by_status": _grouped_counts(db, Item.status),
        "low_stock_items": _count(db, Item, Item.quantity <= Item.reorder_level),
        "items_under_maintenance": _count(db, Item, Item.in_maintenance > 0),
        "inventory_value": _as_number(db.scalar(select(func.sum(_ITEM_VALUE)))),
        "recent_transactions": [_transaction_row(tx) for tx in recent],
        "locations_count": {
            "rooms": _count(db, Location, Location.type == LocationType.room),
            "racks": _count(db, Location, Location.type == LocationType.rack),
            "shelves": _count(db, Location, Location.type == LocationType.shelf),
        },
        "suppliers_count": _count(db, Supplier),
    }


def _transaction_row(tx: Transaction) -> dict:
    return {
        "id": tx.id,
        "item_id": tx.item_id,
        "item_name": tx.item.name if tx.item else None,
        "type": tx.type,
        "quantity": tx.quantity,
        "performed_by": tx.performed_by,
        "performed_by_name": tx.performed_by_user.name if tx.performed_by_user else None,
        "notes": tx.notes,
        "timestamp": tx.timestamp,
    }


def _item_row(item: Item) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "category": item.category,
        "barcode": item.barcode,
        "status": item.status,
        "room": item.room.name if item.room else None,
        "quantity": item.quantity,
        "available_quantity": item.available_quantity,
        "unit_cost": _as_number(item.unit_cost),
        "value": item.quantity * _as_number(item.unit_cost),
        "last_maintenance_date": item.last_maintenance_date,
        "next_maintenance_date": item.next_maintenance_date,
    }


def get_inventory_report(
    db: Session,
    category: str = "",
    status: str = "",
    location: int | None = None,
    sort: str = "name",
) -> dict:
    query = select(Item)
    if category:
        query = query.where(Item.category == category)
    if status:
        query = query.where(Item.status == status)
    if location is not None:
        query = query.where(Item.room_id == location)
    if sort == "value":
        query = query.order_by(Item.unit_cost.desc(), Item.name)
    elif sort == "quantity":
        query = query.order_by(Item.quantity.desc(), Item.name)
    else:
        query = query.order_by(Item.name)
    items = db.scalars(query).all()

    by_category: dict[str, dict] = {}
    for item in items:
        bucket = by_category.setdefault(item.category, {"count": 0, "value": 0, "quantity": 0})
        bucket["count"] += 1
        bucket["value"] += item.quantity * _as_number(item.unit_cost)
        bucket["quantity"] += item.quantity

    return {
        "items": [_item_row(i) for i in items],
        "summary": {
            "total_items": len(items),
            "total_value": sum(item.quantity * _as_number(item.unit_cost) for item in items),
            "total_quantity": sum(item.quantity for item in items),
            "items_by_category": by_category,
        },
    }


def get_transactions_report(
    db: Session,
    page: int = 1,
    size: int = 20,
    tx_type: TransactionType | None = None,
    item_id: int | None = None,
    user_id: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> dict:
    filters = []
    if tx_type is not None:
        filters.append(Transaction.type == tx_type)
    if item_id is not None:
        filters.append(Transaction.item_id == item_id)
    if user_id is not None:
        filters.append(Transaction.performed_by == user_id)
    if start_date is not None:
        filters.append(Transaction.timestamp >= datetime.combine(start_date, time.min, tzinfo=timezone.utc))
    if end_date is not None:
        filters.append(Transaction.timestamp <= datetime.combine(end_date, time.max, tzinfo=timezone.utc))

    total = _count(db, Transaction, *filters)
    rows = db.scalars(
        select(Transaction)
        .where(*filters)
        .order_by(Transaction.timestamp.desc(), Transaction.id.desc())
        .offset((page - 1) * size)
        .limit(size)
    ).all()

    by_type = db.execute(
        select(Transaction.type, func.count(), func.sum(Transaction.quantity))
        .where(*filters)
        .group_by(Transaction.type)
        .order_by(Transaction.type)
    ).all()
    day = func.date(Transaction.timestamp)
    by_day = db.execute(
        select(day, func.count()).where(*filters).group_by(day).order_by(day)
    ).all()

    return {
        "transactions": [_transaction_row(tx) for tx in rows],
        "page": page,
        "pages": math.ceil(total / size) if total else 1,
        "total": total,
        "summary": {
            "transactions_by_type": [
                {"type": getattr(t, "value", t), "count": c, "total_quantity": q or 0} for t, c, q in by_type
            ],
            "transactions_by_day": [{"day": str(d), "count": c} for d, c in by_day],
        },
    }


def get_maintenance_report(db: Session, days_ahead: int = 30, today: date | None = None) -> dict:
    today = today or datetime.now(timezone.utc).date()
    horizon = today + timedelta(days=days_ahead)

    under_maintenance = db.scalars(
        select(Item).where(Item.in_maintenance > 0).order_by(Item.last_maintenance_date, Item.name)
    ).all()
    due = db.scalars(
        select(Item)
        .where(Item.next_maintenance_date >= today, Item.next_maintenance_date <= horizon)
        .order_by(Item.next_maintenance_date)
    ).all()
    history = db.scalars(
        select(Transaction)
        .where(Transaction.type.in_([
            TransactionType.send_to_maintenance,
            TransactionType.return_from_maintenance,
            TransactionType.maintenance,
        ]))
        .order_by(Transaction.timestamp.desc(), Transaction.id.desc())
        .limit(50)
    ).all()

    return {
        "items_under_maintenance": [
            {**_item_row(i), "in_maintenance": i.in_maintenance} for i in under_maintenance
        ],
        "items_due_for_maintenance": [_item_row(i) for i in due],
        "maintenance_history": [_transaction_row(tx) for tx in history],
    }


def get_location_report(db: Session) -> list[dict]:
    rooms = db.scalars(
        select(Location).where(Location.type == LocationType.room).order_by(Location.name)
    ).all()

    stats = {
        room_id: (count, value, quantity)
        for room_id, count, value, quantity in db.execute(
            select(Item.room_id, func.count(), func.sum(_ITEM_VALUE), func.sum(Item.quantity))
            .group_by(Item.room_id)
        ).all()
    }
    categories: dict[int, list[dict]] = {}
    for room_id, category, count in db.execute(
        select(Item.room_id, Item.category, func.count())
        .group_by(Item.room_id, Item.category)
        .order_by(Item.category)
    ).all():
        categories.setdefault(room_id, []).append({"category": category, "count": count})

    report = []
    for room in rooms:
        count, value, quantity = stats.get(room.id, (0, 0, 0))
        report.append({
            "id": room.id,
            "name": room.name,
            "description": room.description,
            "items_count": count,
            "value_stats": {
                "total_value": _as_number(value),
                "total_items": count,
                "total_quantity": quantity or 0,
            },
            "items_by_category": categories.get(room.id, []),
        })
    return report
