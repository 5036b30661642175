"""API tests for item transactions: counters, records, ledger and rejections."""
import pytest


def counters(client, item_id):
    item = client.get(f"/api/items/{item_id}").json()
    state = item["current_state"]
    return item["quantity"], item["available_quantity"], state["in_maintenance"], state["in_session"], state["rented"]


def test_maintenance_round_trip_scenario(client, create_item, transact):
    item = create_item(quantity=10)

    res = transact(item["id"], type="Send to Maintenance", quantity=3)
    assert res.status_code == 201
    assert counters(client, item["id"]) == (10, 7, 3, 0, 0)

    res = transact(item["id"], type="Return from Maintenance", quantity=3)
    assert res.status_code == 201
    assert counters(client, item["id"]) == (10, 10, 0, 0, 0)

    res = transact(item["id"], type="Return from Maintenance", quantity=1)
    assert res.status_code == 400
    assert res.json()["message"].lower() == "cannot return more than are in maintenance (0 currently)"
    assert counters(client, item["id"]) == (10, 10, 0, 0, 0)


def test_rent_out_without_renter_is_rejected(client, create_item, transact):
    item = create_item(quantity=5)
    res = transact(item["id"], type="Rent Out", quantity=1, rental={})
    assert res.status_code == 400
    assert res.json() == {"message": "Please specify who the item is rented to"}

    res = transact(item["id"], type="Rent Out", quantity=1)
    assert res.status_code == 400
    assert counters(client, item["id"]) == (5, 5, 0, 0, 0)
    assert client.get(f"/api/items/{item['id']}/transactions").json() == []


@pytest.mark.parametrize("kind, extra", [
    ("Stock Removal", {}),
    ("Check Out for Session", {"session": {"name": "OSCE"}}),
    ("Rent Out", {"rental": {"rented_to": "Dept"}}),
    ("Send to Maintenance", {}),
])
def test_outflow_rejected_when_not_enough_available(client, create_item, transact, kind, extra):
    item = create_item(quantity=2)
    res = transact(item["id"], type=kind, quantity=3, **extra)
    assert res.status_code == 400
    assert res.json()["message"] == "Not enough available items (2 currently available)"
    assert counters(client, item["id"]) == (2, 2, 0, 0, 0)


@pytest.mark.parametrize("kind, label", [
    ("Return from Session", "in session"),
    ("Return from Rental", "rented out"),
    ("Return from Maintenance", "in maintenance"),
])
def test_return_rejected_beyond_allocation(create_item, transact, kind, label):
    item = create_item(quantity=5)
    res = transact(item["id"], type=kind, quantity=1)
    assert res.status_code == 400
    assert res.json()["message"] == f"Cannot return more than are {label} (0 currently)"


def test_counters_balance_over_a_sequence(client, create_item, transact):
    item = create_item(quantity=10)
    steps = [
        ("Stock Addition", 5, {}),
        ("Check Out for Session", 4, {"session": {"name": "ACLS"}}),
        ("Rent Out", 3, {"rental": {"rentedTo": "Ward 3"}}),
        ("Send to Maintenance", 2, {"maintenance": {"provider": "Acme"}}),
        ("Stock Removal", 6, {}),
        ("Return from Session", 1, {"session": {"name": "ACLS"}}),
        ("Return from Rental", 3, {"rental": {"rented_to": "Ward 3"}}),
        ("Check-in", 2, {}),
        ("Check-out", 1, {}),
        ("Maintenance", 1, {}),
        ("Return from Maintenance", 3, {}),
    ]
    for kind, qty, extra in steps:
        res = transact(item["id"], type=kind, quantity=qty, **extra)
        assert res.status_code == 201, (kind, res.text)
        total, available, maint, session, rented = counters(client, item["id"])
        assert total == available + maint + session + rented
    assert counters(client, item["id"]) == (10, 7, 0, 3, 0)


def test_camel_case_payload(client, create_item, transact, room_id):
    item = create_item(quantity=3)
    res = transact(
        item["id"], type="Rent Out", quantity=1,
        rental={"rentedTo": "Simulation Club", "expectedReturnDate": "2026-12-01"},
    )
    assert res.status_code == 201
    data = res.json()
    assert data["rental"] == {"rented_to": "Simulation Club", "expected_return_date": "2026-12-01"}
    assert data["record_id"] is not None


def test_legacy_endpoint_alias(client, create_item):
    item = create_item(quantity=3)
    res = client.post(f"/api/items/{item['id']}/transaction", json={"type": "Restock", "quantity": 2})
    assert res.status_code == 201
    assert res.json()["type"] == "Restock"
    assert counters(client, item["id"]) == (5, 5, 0, 0, 0)


def test_staff_can_record_transactions(client, create_item, staff_headers):
    item = create_item(quantity=3)
    res = client.post(
        f"/api/items/{item['id']}/enhanced-transaction",
        json={"type": "Stock Removal", "quantity": 1},
        headers=staff_headers,
    )
    assert res.status_code == 201


def test_transaction_on_missing_item(transact):
    res = transact(99999, type="Stock Addition", quantity=1)
    assert res.status_code == 404


@pytest.mark.parametrize("body", [
    {"type": "Stock Addition", "quantity": 0},
    {"type": "Stock Addition", "quantity": -2},
    {"type": "Teleport", "quantity": 1},
    {"quantity": 1},
])
def test_invalid_payload_is_400(create_item, transact, body):
    item = create_item()
    res = transact(item["id"], **body)
    assert res.status_code == 400
    assert "message" in res.json()


def test_relocate(client, create_item, transact, room_id):
    rack = client.post("/api/locations", json={"name": "Rack", "type": "Rack", "parent_id": room_id}).json()
    item = create_item(quantity=4)

    res = transact(item["id"], type="Relocate", quantity=4, to_location=rack["id"])
    assert res.status_code == 201
    assert res.json()["from_location_id"] == room_id
    assert client.get(f"/api/items/{item['id']}").json()["location"] == {
        "room": room_id, "rack": rack["id"], "shelf": None,
    }

    assert transact(item["id"], type="Relocate", quantity=1).status_code == 400
    assert transact(item["id"], type="Relocate", quantity=1, to_location=9999).status_code == 404


def test_return_closes_specific_record(client, create_item, transact):
    item = create_item(quantity=10)
    first = transact(item["id"], type="Rent Out", quantity=2, rental={"rented_to": "A"}).json()
    transact(item["id"], type="Rent Out", quantity=2, rental={"rented_to": "A"})

    res = transact(item["id"], type="Return from Rental", quantity=2, record_id=first["record_id"])
    assert res.status_code == 201

    rentals = client.get(f"/api/items/{item['id']}/records").json()["rentals"]
    closed = [r["id"] for r in rentals if r["returned_date"] is not None]
    assert closed == [first["record_id"]]


def test_ledger_and_grouped_view(client, create_item, transact):
    item = create_item(quantity=5)
    transact(item["id"], type="Stock Addition", quantity=1)
    transact(item["id"], type="Check Out for Session", quantity=2, session={"name": "OSCE"})
    transact(item["id"], type="Check-in", quantity=1)

    ledger = client.get(f"/api/items/{item['id']}/transactions").json()
    assert [t["type"] for t in ledger] == ["Check-in", "Check Out for Session", "Stock Addition"]

    grouped = client.get(f"/api/items/{item['id']}/transactions/grouped").json()
    assert len(grouped["stock"]) == 1
    assert len(grouped["session"]) == 1
    assert len(grouped["legacy"]) == 1
    assert grouped["location"] == []
    assert grouped["state"] == {
        "total": 7, "available": 5, "in_maintenance": 0, "in_session": 2, "rented": 0,
        "status": "Partially Available",
    }


def test_status_follows_counters(client, create_item, transact):
    item = create_item(quantity=2)
    transact(item["id"], type="Send to Maintenance", quantity=2)
    assert client.get(f"/api/items/{item['id']}").json()["status"] == "Under Maintenance"
