"""Unit tests for the pure stock-state reducer (no database)."""
import random

import pytest

from siminventory.models.item import ItemStatus
from siminventory.models.transaction import TransactionType as T
from siminventory.services.stock_state import Counters, StockRejected, apply, canonical, derive_status


def fresh(n=10):
    return Counters(quantity=n, available=n)


# ─── Per-type deltas ─────────────────────────────────────────────────────────

@pytest.mark.parametrize("kind, expected", [
    (T.stock_addition, Counters(13, 13, 0, 0, 0)),
    (T.stock_removal, Counters(7, 7, 0, 0, 0)),
    (T.relocate, Counters(10, 10, 0, 0, 0)),
    (T.check_out_for_session, Counters(10, 7, 0, 3, 0)),
    (T.rent_out, Counters(10, 7, 0, 0, 3)),
    (T.send_to_maintenance, Counters(10, 7, 3, 0, 0)),
    (T.check_in, Counters(13, 13, 0, 0, 0)),
    (T.restock, Counters(13, 13, 0, 0, 0)),
    (T.check_out, Counters(7, 7, 0, 0, 0)),
    (T.maintenance, Counters(10, 7, 3, 0, 0)),
])
def test_apply_deltas(kind, expected):
    assert apply(fresh(), kind, 3) == expected


def test_returns_move_units_back_to_available():
    c = Counters(quantity=10, available=4, in_maintenance=2, in_session=3, rented=1)
    assert apply(c, T.return_from_session, 3) == Counters(10, 7, 2, 0, 1)
    assert apply(c, T.return_from_rental, 1) == Counters(10, 5, 2, 3, 0)
    assert apply(c, T.return_from_maintenance, 2) == Counters(10, 6, 0, 3, 1)


def test_apply_does_not_mutate_input():
    c = fresh()
    apply(c, T.rent_out, 4)
    assert c == fresh()


def test_legacy_aliases():
    assert canonical(T.check_in) is T.stock_addition
    assert canonical(T.restock) is T.stock_addition
    assert canonical(T.check_out) is T.stock_removal
    assert canonical(T.maintenance) is T.send_to_maintenance
    assert canonical(T.relocate) is T.relocate


# ─── Rejections ──────────────────────────────────────────────────────────────

@pytest.mark.parametrize("kind", [
    T.stock_removal, T.check_out_for_session, T.rent_out, T.send_to_maintenance, T.check_out, T.maintenance,
])
def test_outflows_need_available_units(kind):
    with pytest.raises(StockRejected) as exc:
        apply(Counters(quantity=5, available=2, rented=3), kind, 3)
    assert exc.value.reason == "Not enough available items (2 currently available)"


def test_return_more_than_in_session():
    with pytest.raises(StockRejected, match=r"in session \(1 currently\)"):
        apply(Counters(quantity=5, available=4, in_session=1), T.return_from_session, 2)


def test_return_more_than_rented():
    with pytest.raises(StockRejected, match=r"rented out \(0 currently\)"):
        apply(fresh(), T.return_from_rental, 1)


def test_return_more_than_in_maintenance():
    with pytest.raises(StockRejected) as exc:
        apply(fresh(5), T.return_from_maintenance, 1)
    assert exc.value.reason == "Cannot return more than are in maintenance (0 currently)"


@pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
def test_quantity_must_be_positive_int(quantity):
    with pytest.raises(StockRejected, match="positive whole number"):
        apply(fresh(), T.stock_addition, quantity)


def test_relocate_still_validates_quantity():
    with pytest.raises(StockRejected):
        apply(fresh(), T.relocate, 0)


# ─── Invariant ───────────────────────────────────────────────────────────────

def test_random_sequences_keep_counters_balanced():
    rng = random.Random(42)
    c = fresh(20)
    for _ in range(500):
        kind = rng.choice(list(T))
        try:
            c = apply(c, kind, rng.randint(1, 6))
        except StockRejected:
            continue
        assert c.is_balanced
        assert min(c.quantity, c.available, c.in_maintenance, c.in_session, c.rented) >= 0


def test_rejection_leaves_counters_untouched():
    c = Counters(quantity=3, available=1, in_session=2)
    with pytest.raises(StockRejected):
        apply(c, T.rent_out, 2)
    assert c == Counters(quantity=3, available=1, in_session=2)


# ─── Scenario: lab cycle ─────────────────────────────────────────────────────

def test_full_lab_cycle():
    c = fresh(10)
    c = apply(c, T.check_out_for_session, 4)
    c = apply(c, T.rent_out, 3)
    c = apply(c, T.send_to_maintenance, 2)
    assert c == Counters(quantity=10, available=1, in_maintenance=2, in_session=4, rented=3)
    assert derive_status(c) == ItemStatus.partially_available

    c = apply(c, T.return_from_session, 4)
    c = apply(c, T.return_from_rental, 3)
    c = apply(c, T.return_from_maintenance, 2)
    assert c == fresh(10)
    assert derive_status(c) == ItemStatus.available


# ─── Status labels ───────────────────────────────────────────────────────────

@pytest.mark.parametrize("counters, status", [
    (Counters(5, 5, 0, 0, 0), ItemStatus.available),
    (Counters(5, 2, 3, 0, 0), ItemStatus.partially_available),
    (Counters(5, 0, 5, 0, 0), ItemStatus.under_maintenance),
    (Counters(5, 0, 0, 5, 0), ItemStatus.in_session),
    (Counters(5, 0, 0, 0, 5), ItemStatus.rented_out),
    (Counters(5, 0, 2, 3, 0), ItemStatus.unavailable),
    (Counters(0, 0, 0, 0, 0), ItemStatus.out_of_stock),
])
def test_derive_status(counters, status):
    assert derive_status(counters) == status


def test_consumable_status():
    assert derive_status(Counters(4, 0, 0, 4, 0), consumable=True) == ItemStatus.out_of_stock
    assert derive_status(Counters(4, 1, 0, 3, 0), consumable=True) == ItemStatus.available
