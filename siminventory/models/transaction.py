import enum
from datetime import datetime, timezone, date
from sqlalchemy import Integer, ForeignKey, String, DateTime, Date, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from siminventory.database import Base


class TransactionType(str, enum.Enum):
    stock_addition = "Stock Addition"
    stock_removal = "Stock Removal"
    relocate = "Relocate"
    check_out_for_session = "Check Out for Session"
    return_from_session = "Return from Session"
    rent_out = "Rent Out"
    return_from_rental = "Return from Rental"
    send_to_maintenance = "Send to Maintenance"
    return_from_maintenance = "Return from Maintenance"
    # Legacy types, still accepted from old clients
    check_in = "Check-in"
    check_out = "Check-out"
    restock = "Restock"
    maintenance = "Maintenance"


TRANSACTION_GROUPS: dict[str, tuple[TransactionType, ...]] = {
    "stock": (TransactionType.stock_addition, TransactionType.stock_removal),
    "location": (TransactionType.relocate,),
    "session": (TransactionType.check_out_for_session, TransactionType.return_from_session),
    "rental": (TransactionType.rent_out, TransactionType.return_from_rental),
    "maintenance": (TransactionType.send_to_maintenance, TransactionType.return_from_maintenance),
    "legacy": (
        TransactionType.check_in,
        TransactionType.check_out,
        TransactionType.restock,
        TransactionType.maintenance,
    ),
}


class Transaction(Base):
    """Append-only ledger. Rows are never updated and go away only with their item."""

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True)
    type: Mapped[TransactionType] = mapped_column(
        SAEnum(TransactionType, values_callable=lambda e: [x.value for x in e]),
        nullable=False,
        index=True,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    # Ledger entries outlive the locations they mention
    from_location_id: Mapped[int | None] = mapped_column(
        ForeignKey("locations.id", ondelete="SET NULL"), nullable=True
    )
    to_location_id: Mapped[int | None] = mapped_column(
        ForeignKey("locations.id", ondelete="SET NULL"), nullable=True
    )

    session_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    session_location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    rented_to: Mapped[str | None] = mapped_column(String(255), nullable=True)
    expected_return_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    maintenance_provider: Mapped[str | None] = mapped_column(String(255), nullable=True)
    expected_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    # Session/rental/maintenance record opened or closed by this entry
    record_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    performed_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )

    item: Mapped["Item"] = relationship(back_populates="transactions")
    performed_by_user: Mapped["User"] = relationship(back_populates="transactions")
    from_location: Mapped["Location | None"] = relationship(foreign_keys=[from_location_id])
    to_location: Mapped["Location | None"] = relationship(foreign_keys=[to_location_id])

    @property
    def session(self) -> dict | None:
        if self.session_name is None and self.session_location is None:
            return None
        return {"name": self.session_name, "location": self.session_location}

    @property
    def rental(self) -> dict | None:
        if self.rented_to is None:
            return None
        return {"rented_to": self.rented_to, "expected_return_date": self.expected_return_date}

    @property
    def maintenance(self) -> dict | None:
        if self.maintenance_provider is None and self.expected_end_date is None:
            return None
        return {"provider": self.maintenance_provider, "expected_end_date": self.expected_end_date}
