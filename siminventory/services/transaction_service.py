"""
Stock-state reconciler: validates a transaction request against an item,
applies the counter deltas from ``stock_state.apply``, opens or closes the
matching allocation record and appends the ledger entry. Item, record and
ledger writes share one database transaction.
"""
import logging
from datetime import datetime, timezone

from fastapi import BackgroundTasks, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from siminventory.models.location import Location
from siminventory.models.records import SessionRecord, RentalRecord, MaintenanceRecord
from siminventory.models.transaction import Transaction, TransactionType, TRANSACTION_GROUPS
from siminventory.schemas.transaction import TransactionRequest
from siminventory.services import notification_service
from siminventory.services.item_service import get_item
from siminventory.services.location_service import resolve_placement
from siminventory.services.stock_state import Counters, StockRejected, apply, canonical, derive_status

logger = logging.getLogger(__name__)

T = TransactionType


def _check_location(db: Session, loc_id: int | None, label: str) -> None:
    if loc_id is not None and not db.get(Location, loc_id):
        raise HTTPException(status_code=404, detail=f"{label} location not found")


def _validate_payload(data: TransactionRequest, kind: TransactionType) -> None:
    if kind is T.rent_out:
        rented_to = data.rental.rented_to if data.rental else None
        if not rented_to or not rented_to.strip():
            raise HTTPException(status_code=400, detail="Please specify who the item is rented to")
    if kind is T.relocate and data.to_location is None:
        raise HTTPException(status_code=400, detail="A destination location is required to relocate an item")


def _append_note(record, notes: str | None) -> None:
    if notes:
        record.notes = f"{record.notes}\n{notes}" if record.notes else notes


def _find_open_record(records: list, record_id: int | None, key: str | None, key_attr: str | None, label: str):
    """
    The record a return applies to. An explicit ``record_id`` must name an
    open record of this item. Otherwise the most recent open record whose
    correlation key matches (case-insensitive) is used; with no key the most
    recent open record wins.
    """
    open_records = [r for r in records if r.is_open]
    if record_id is not None:
        for record in open_records:
            if record.id == record_id:
                return record
        raise HTTPException(status_code=400, detail=f"No open {label} record {record_id} for this item")

    if key and key_attr:
        wanted = key.strip().lower()
        open_records = [r for r in open_records if (getattr(r, key_attr) or "").strip().lower() == wanted]
    if not open_records:
        return None
    return max(open_records, key=lambda r: r.id)


def _close_or_reduce(record, quantity: int, closed_attr: str, now: datetime, notes: str | None) -> None:
    """Full return closes the record; a partial one shrinks it and keeps it open."""
    _append_note(record, notes)
    if quantity >= record.quantity:
        setattr(record, closed_attr, now)
    else:
        record.quantity -= quantity


def record_transaction(
    db: Session,
    item_id: int,
    data: TransactionRequest,
    user_id: int,
    background_tasks: BackgroundTasks | None = None,
) -> Transaction:
    item = get_item(db, item_id)
    kind = canonical(data.type)

    _validate_payload(data, kind)
    _check_location(db, data.from_location, "Source")
    _check_location(db, data.to_location, "Destination")

    try:
        counters = apply(Counters.of(item), data.type, data.quantity)
    except StockRejected as e:
        raise HTTPException(status_code=400, detail=e.reason)

    now = datetime.now(timezone.utc)
    entry = Transaction(
        item_id=item.id,
        type=data.type,
        quantity=data.quantity,
        from_location_id=data.from_location,
        to_location_id=data.to_location,
        performed_by=user_id,
        notes=data.notes,
        timestamp=now,
    )
    if data.session:
        entry.session_name = data.session.name
        entry.session_location = data.session.location
    if data.rental:
        entry.rented_to = data.rental.rented_to
        entry.expected_return_date = data.rental.expected_return_date
    if data.maintenance:
        entry.maintenance_provider = data.maintenance.provider
        entry.expected_end_date = data.maintenance.expected_end_date

    record = None
    if kind is T.relocate:
        placement = resolve_placement(db, data.to_location)
        if entry.from_location_id is None:
            entry.from_location_id = item.room_id
        for field, value in placement.items():
            setattr(item, field, value)

    elif kind is T.check_out_for_session:
        record = SessionRecord(
            session_name=data.session.name if data.session else None,
            location=data.session.location if data.session else None,
            quantity=data.quantity,
            notes=data.notes,
            start_date=now,
        )
        item.session_records.append(record)

    elif kind is T.return_from_session:
        record = _find_open_record(
            item.session_records, data.record_id,
            data.session.name if data.session else None, "session_name", "session",
        )
        if record is not None:
            _close_or_reduce(record, data.quantity, "end_date", now, data.notes)

    elif kind is T.rent_out:
        record = RentalRecord(
            rented_to=data.rental.rented_to.strip(),
            expected_return_date=data.rental.expected_return_date,
            quantity=data.quantity,
            notes=data.notes,
            start_date=now,
        )
        item.rental_records.append(record)

    elif kind is T.return_from_rental:
        record = _find_open_record(
            item.rental_records, data.record_id,
            data.rental.rented_to if data.rental else None, "rented_to", "rental",
        )
        if record is not None:
            _close_or_reduce(record, data.quantity, "returned_date", now, data.notes)

    elif kind is T.send_to_maintenance:
        item.last_maintenance_date = now
        record = MaintenanceRecord(
            provider=data.maintenance.provider if data.maintenance else None,
            expected_end_date=data.maintenance.expected_end_date if data.maintenance else None,
            quantity=data.quantity,
            notes=data.notes,
            start_date=now,
        )
        item.maintenance_records.append(record)

    elif kind is T.return_from_maintenance:
        record = _find_open_record(item.maintenance_records, data.record_id, None, None, "maintenance")
        if record is not None:
            _close_or_reduce(record, data.quantity, "completed_date", now, data.notes)

    if record is None and kind in (T.return_from_session, T.return_from_rental, T.return_from_maintenance):
        logger.warning("Item %s: no open record matched '%s', counters updated only", item.id, data.type.value)

    counters.store(item)
    item.status = derive_status(counters, item.is_consumable)
    item.updated_at = now

    try:
        # Flush first so a newly opened record has an id the ledger can point at
        db.flush()
        entry.record_id = record.id if record is not None else None
        db.add(entry)
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning("Item %s changed concurrently, '%s' rejected", item_id, data.type.value)
        raise HTTPException(
            status_code=409,
            detail="This item was modified by another request. Reload it and try again.",
        )
    db.refresh(entry)
    db.refresh(item)

    logger.info(
        "Transaction %s: %s x%d on item %s by user %s",
        entry.id, data.type.value, data.quantity, item.id, user_id,
    )

    if kind is T.stock_removal and item.quantity <= item.reorder_level:
        snapshot = notification_service.low_stock_snapshot(item)
        if background_tasks is not None:
            background_tasks.add_task(notification_service.send_low_stock_alert, snapshot)
        else:
            notification_service.send_low_stock_alert(snapshot)

    return entry


def get_item_transactions(db: Session, item_id: int) -> list[Transaction]:
    get_item(db, item_id)
    return db.scalars(
        select(Transaction)
        .where(Transaction.item_id == item_id)
        .order_by(Transaction.timestamp.desc(), Transaction.id.desc())
    ).all()


def get_grouped_transactions(db: Session, item_id: int) -> dict:
    item = get_item(db, item_id)
    group_of = {t: name for name, types in TRANSACTION_GROUPS.items() for t in types}
    grouped: dict = {name: [] for name in TRANSACTION_GROUPS}
    for tx in get_item_transactions(db, item_id):
        grouped[group_of[TransactionType(tx.type)]].append(tx)

    counters = Counters.of(item)
    grouped["state"] = {
        "total": counters.quantity,
        "available": counters.available,
        "in_maintenance": counters.in_maintenance,
        "in_session": counters.in_session,
        "rented": counters.rented,
        "status": derive_status(counters, item.is_consumable),
    }
    return grouped
