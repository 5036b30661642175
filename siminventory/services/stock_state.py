"""
Stock-state reducer.

An item's total ``quantity`` is split into four sub-ledgers: available,
in maintenance, in session and rented. Every transaction type moves units
between these sub-ledgers (or in/out of the total). ``apply`` is the single
place where that happens. It is pure: it takes the current counters and
returns new ones, or raises ``StockRejected`` with the reason. Persistence
lives in ``transaction_service``.
"""
from dataclasses import dataclass, replace

from siminventory.models.item import ItemStatus
from siminventory.models.transaction import TransactionType


class StockRejected(ValueError):
    """Transaction is not legal against the current counters."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


@dataclass(frozen=True)
class Counters:
    quantity: int = 0
    available: int = 0
    in_maintenance: int = 0
    in_session: int = 0
    rented: int = 0

    @classmethod
    def of(cls, item) -> "Counters":
        return cls(
            quantity=item.quantity,
            available=item.available_quantity,
            in_maintenance=item.in_maintenance,
            in_session=item.in_session,
            rented=item.rented,
        )

    @property
    def allocated(self) -> int:
        return self.in_maintenance + self.in_session + self.rented

    @property
    def is_balanced(self) -> bool:
        return self.quantity == self.available + self.allocated

    def store(self, item) -> None:
        item.quantity = self.quantity
        item.available_quantity = self.available
        item.in_maintenance = self.in_maintenance
        item.in_session = self.in_session
        item.rented = self.rented


# Legacy types behave exactly like their modern counterparts
LEGACY_ALIASES = {
    TransactionType.check_in: TransactionType.stock_addition,
    TransactionType.restock: TransactionType.stock_addition,
    TransactionType.check_out: TransactionType.stock_removal,
    TransactionType.maintenance: TransactionType.send_to_maintenance,
}


def canonical(kind: TransactionType) -> TransactionType:
    return LEGACY_ALIASES.get(kind, kind)


def _require_available(c: Counters, n: int) -> None:
    if c.available < n:
        raise StockRejected(f"Not enough available items ({c.available} currently available)")


def apply(counters: Counters, kind: TransactionType, quantity: int) -> Counters:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise StockRejected("Quantity must be a positive whole number")

    n = quantity
    c = counters
    kind = canonical(TransactionType(kind))

    if kind is TransactionType.stock_addition:
        return replace(c, quantity=c.quantity + n, available=c.available + n)

    if kind is TransactionType.stock_removal:
        _require_available(c, n)
        return replace(c, quantity=c.quantity - n, available=c.available - n)

    if kind is TransactionType.relocate:
        return c

    if kind is TransactionType.check_out_for_session:
        _require_available(c, n)
        return replace(c, available=c.available - n, in_session=c.in_session + n)

    if kind is TransactionType.return_from_session:
        if c.in_session < n:
            raise StockRejected(f"Cannot return more than are in session ({c.in_session} currently)")
        return replace(c, available=c.available + n, in_session=c.in_session - n)

    if kind is TransactionType.rent_out:
        _require_available(c, n)
        return replace(c, available=c.available - n, rented=c.rented + n)

    if kind is TransactionType.return_from_rental:
        if c.rented < n:
            raise StockRejected(f"Cannot return more than are rented out ({c.rented} currently)")
        return replace(c, available=c.available + n, rented=c.rented - n)

    if kind is TransactionType.send_to_maintenance:
        _require_available(c, n)
        return replace(c, available=c.available - n, in_maintenance=c.in_maintenance + n)

    if kind is TransactionType.return_from_maintenance:
        if c.in_maintenance < n:
            raise StockRejected(
                f"Cannot return more than are in maintenance ({c.in_maintenance} currently)"
            )
        return replace(c, available=c.available + n, in_maintenance=c.in_maintenance - n)

    raise StockRejected(f"Unsupported transaction type: {kind.value}")


def derive_status(c: Counters, consumable: bool = False) -> ItemStatus:
    """Display label for a set of counters."""
    if consumable:
        return ItemStatus.out_of_stock if c.available <= 0 else ItemStatus.available

    if c.available <= 0:
        if c.in_maintenance > 0 and c.in_maintenance == c.quantity:
            return ItemStatus.under_maintenance
        if c.rented > 0 and c.rented == c.quantity:
            return ItemStatus.rented_out
        if c.in_session > 0 and c.in_session == c.quantity:
            return ItemStatus.in_session
        if c.quantity > 0 and c.allocated >= c.quantity:
            return ItemStatus.unavailable
        return ItemStatus.out_of_stock
    if c.available < c.quantity:
        return ItemStatus.partially_available
    return ItemStatus.available
