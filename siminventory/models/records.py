"""Per-item allocation records: one row per session, rental or maintenance
batch. A record is open until its end/return/completion date is set."""
from datetime import datetime, timezone, date
from sqlalchemy import Integer, ForeignKey, String, DateTime, Date
from sqlalchemy.orm import Mapped, mapped_column, relationship
from siminventory.database import Base


def _now():
    return datetime.now(timezone.utc)


class SessionRecord(Base):
    __tablename__ = "session_records"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True)
    session_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    item: Mapped["Item"] = relationship(back_populates="session_records")

    @property
    def is_open(self) -> bool:
        return self.end_date is None


class RentalRecord(Base):
    __tablename__ = "rental_records"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True)
    rented_to: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, nullable=False)
    expected_return_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    returned_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    item: Mapped["Item"] = relationship(back_populates="rental_records")

    @property
    def is_open(self) -> bool:
        return self.returned_date is None


class MaintenanceRecord(Base):
    __tablename__ = "maintenance_records"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True)
    provider: Mapped[str | None] = mapped_column(String(255), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, nullable=False)
    expected_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    completed_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    item: Mapped["Item"] = relationship(back_populates="maintenance_records")

    @property
    def is_open(self) -> bool:
        return self.completed_date is None
