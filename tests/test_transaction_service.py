"""Service-level tests for the reconciler: records, ledger, alerts, concurrency."""
import pytest
from fastapi import HTTPException
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from siminventory.database import Base
from siminventory.models.item import Item, ItemStatus
from siminventory.models.location import Location, LocationType
from siminventory.models.records import RentalRecord, SessionRecord
from siminventory.models.transaction import Transaction, TransactionType as T
from siminventory.models.user import User
from siminventory.schemas.transaction import TransactionRequest
from siminventory.services import notification_service
import siminventory.services.transaction_service as svc


def request(kind, quantity, **extra):
    return TransactionRequest(type=kind, quantity=quantity, **extra)


def test_rent_out_opens_record_and_links_ledger(db, make_item, user):
    item = make_item(quantity=10)
    tx = svc.record_transaction(db, item.id, request(T.rent_out, 3, rental={"rented_to": "Nursing"}), user.id)

    db.refresh(item)
    assert (item.available_quantity, item.rented) == (7, 3)
    assert item.status == ItemStatus.partially_available
    [record] = item.rental_records
    assert record.rented_to == "Nursing"
    assert record.quantity == 3
    assert record.is_open
    assert tx.record_id == record.id
    assert tx.rented_to == "Nursing"


def test_return_closes_explicit_record(db, make_item, user):
    item = make_item(quantity=10)
    svc.record_transaction(db, item.id, request(T.rent_out, 2, rental={"rented_to": "A"}), user.id)
    svc.record_transaction(db, item.id, request(T.rent_out, 2, rental={"rented_to": "A"}), user.id)
    first, second = item.rental_records

    tx = svc.record_transaction(db, item.id, request(T.return_from_rental, 2, record_id=first.id), user.id)

    assert tx.record_id == first.id
    assert first.returned_date is not None
    assert second.is_open


def test_return_without_reference_picks_latest_matching(db, make_item, user):
    item = make_item(quantity=10)
    svc.record_transaction(db, item.id, request(T.rent_out, 1, rental={"rented_to": "Dept A"}), user.id)
    svc.record_transaction(db, item.id, request(T.rent_out, 1, rental={"rented_to": "Dept B"}), user.id)
    svc.record_transaction(db, item.id, request(T.rent_out, 1, rental={"rented_to": "dept a"}), user.id)
    a_old, b, a_new = item.rental_records

    svc.record_transaction(db, item.id, request(T.return_from_rental, 1, rental={"rented_to": "DEPT A"}), user.id)

    assert not a_new.is_open
    assert a_old.is_open and b.is_open


def test_partial_return_shrinks_record(db, make_item, user):
    item = make_item(quantity=10)
    svc.record_transaction(db, item.id, request(T.check_out_for_session, 5, session={"name": "OSCE"}), user.id)
    svc.record_transaction(db, item.id, request(T.return_from_session, 2, session={"name": "OSCE"}), user.id)

    [record] = item.session_records
    assert record.is_open
    assert record.quantity == 3
    assert item.in_session == 3


def test_return_without_open_record_updates_counters_only(db, make_item, user):
    item = make_item(quantity=4)
    item.available_quantity, item.in_maintenance = 2, 2
    db.commit()

    tx = svc.record_transaction(db, item.id, request(T.return_from_maintenance, 2), user.id)

    assert tx.record_id is None
    assert (item.available_quantity, item.in_maintenance) == (4, 0)


def test_unknown_record_id_is_rejected(db, make_item, user):
    item = make_item(quantity=4)
    svc.record_transaction(db, item.id, request(T.send_to_maintenance, 1), user.id)

    with pytest.raises(HTTPException) as exc:
        svc.record_transaction(db, item.id, request(T.return_from_maintenance, 1, record_id=999), user.id)
    assert exc.value.status_code == 400


def test_rejected_transaction_changes_nothing(db, make_item, user):
    item = make_item(quantity=2)
    with pytest.raises(HTTPException) as exc:
        svc.record_transaction(db, item.id, request(T.rent_out, 3, rental={"rented_to": "X"}), user.id)

    assert exc.value.status_code == 400
    assert exc.value.detail == "Not enough available items (2 currently available)"
    db.refresh(item)
    assert (item.quantity, item.available_quantity, item.rented) == (2, 2, 0)
    assert db.query(Transaction).count() == 0
    assert db.query(RentalRecord).count() == 0


def test_rent_out_requires_renter(db, make_item, user):
    item = make_item()
    with pytest.raises(HTTPException) as exc:
        svc.record_transaction(db, item.id, request(T.rent_out, 1, rental={"rented_to": "  "}), user.id)
    assert exc.value.detail == "Please specify who the item is rented to"


def test_relocate_moves_item_to_shelf(db, make_item, user, room):
    rack = Location(name="Rack", type=LocationType.rack, parent=room)
    shelf = Location(name="Shelf", type=LocationType.shelf, parent=rack)
    db.add_all([rack, shelf])
    db.commit()
    item = make_item(quantity=3)

    tx = svc.record_transaction(db, item.id, request(T.relocate, 3, to_location=shelf.id), user.id)

    assert (item.room_id, item.rack_id, item.shelf_id) == (room.id, rack.id, shelf.id)
    assert tx.from_location_id == room.id
    assert tx.to_location_id == shelf.id
    assert item.available_quantity == 3


def test_legacy_checkout_acts_as_removal(db, make_item, user):
    item = make_item(quantity=10)
    tx = svc.record_transaction(db, item.id, request(T.check_out, 4), user.id)

    assert tx.type == T.check_out
    assert (item.quantity, item.available_quantity) == (6, 6)


def test_low_stock_alert_after_removal(db, make_item, user, monkeypatch):
    sent = []
    monkeypatch.setattr(notification_service, "send_low_stock_alert", sent.append)
    item = make_item(quantity=6, name="Gloves")

    svc.record_transaction(db, item.id, request(T.stock_removal, 1), user.id)

    assert len(sent) == 1
    assert sent[0]["name"] == "Gloves"
    assert sent[0]["quantity"] == 5


def test_no_alert_above_reorder_level(db, make_item, user, monkeypatch):
    sent = []
    monkeypatch.setattr(notification_service, "send_low_stock_alert", sent.append)
    item = make_item(quantity=20)

    svc.record_transaction(db, item.id, request(T.stock_removal, 1), user.id)
    svc.record_transaction(db, item.id, request(T.rent_out, 15, rental={"rented_to": "X"}), user.id)

    assert sent == []


def test_grouped_transactions(db, make_item, user):
    item = make_item(quantity=5)
    svc.record_transaction(db, item.id, request(T.stock_addition, 1), user.id)
    svc.record_transaction(db, item.id, request(T.restock, 1), user.id)
    svc.record_transaction(db, item.id, request(T.send_to_maintenance, 2), user.id)

    grouped = svc.get_grouped_transactions(db, item.id)

    assert len(grouped["stock"]) == 1
    assert len(grouped["legacy"]) == 1
    assert len(grouped["maintenance"]) == 1
    assert grouped["state"]["total"] == 7
    assert grouped["state"]["available"] == 5
    assert grouped["state"]["in_maintenance"] == 2


def test_concurrent_update_is_rejected(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'race.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)

    setup = Session()
    user = User(name="U", email="u@example.com", hashed_password="x")
    room = Location(name="Lab", type=LocationType.room)
    setup.add_all([user, room])
    setup.flush()
    item = Item(name="Pump", category="Device", barcode="RACE-1", room_id=room.id,
                quantity=5, available_quantity=5, in_maintenance=0, in_session=0, rented=0)
    setup.add(item)
    setup.commit()
    item_id, user_id = item.id, user.id
    setup.close()

    first, second = Session(), Session()
    stale = first.get(Item, item_id)
    assert stale.version_id == 1

    svc.record_transaction(second, item_id, request(T.stock_removal, 2), user_id)

    with pytest.raises(HTTPException) as exc:
        svc.record_transaction(first, item_id, request(T.stock_removal, 4), user_id)
    assert exc.value.status_code == 409

    first.close()
    second.close()
    check = Session()
    fresh = check.get(Item, item_id)
    assert (fresh.quantity, fresh.available_quantity) == (3, 3)
    assert check.query(Transaction).count() == 1
    check.close()
    engine.dispose()


def test_session_record_keeps_location(db, make_item, user):
    item = make_item()
    svc.record_transaction(
        db, item.id, request(T.check_out_for_session, 1, session={"name": "ACLS", "location": "Room 2"}), user.id,
    )
    record = db.query(SessionRecord).one()
    assert (record.session_name, record.location) == ("ACLS", "Room 2")
