import enum
from datetime import datetime, timezone, date
from decimal import Decimal
from sqlalchemy import String, Integer, DateTime, Date, Numeric, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from siminventory.database import Base


class CategoryType(str, enum.Enum):
    task_trainer = "Task Trainer"
    manikin = "Manikin"
    consumable = "Consumable"
    electronic = "Electronic"
    device = "Device"
    custom = "Custom"


class BarcodeType(str, enum.Enum):
    existing = "existing"
    generate = "generate"


class ItemStatus(str, enum.Enum):
    available = "Available"
    partially_available = "Partially Available"
    unavailable = "Unavailable"
    under_maintenance = "Under Maintenance"
    in_session = "In Session"
    rented_out = "Rented Out"
    out_of_stock = "Out of Stock"


def _enum(cls):
    return SAEnum(cls, values_callable=lambda e: [x.value for x in e])


class Item(Base):
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    category_type: Mapped[CategoryType] = mapped_column(
        _enum(CategoryType), default=CategoryType.custom, nullable=False
    )
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    serial_number: Mapped[str | None] = mapped_column(String(128), unique=True, nullable=True)
    barcode: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    barcode_type: Mapped[BarcodeType] = mapped_column(
        _enum(BarcodeType), default=BarcodeType.generate, nullable=False
    )

    room_id: Mapped[int] = mapped_column(ForeignKey("locations.id"), nullable=False, index=True)
    rack_id: Mapped[int | None] = mapped_column(ForeignKey("locations.id"), nullable=True, index=True)
    shelf_id: Mapped[int | None] = mapped_column(ForeignKey("locations.id"), nullable=True, index=True)

    # quantity == available_quantity + in_maintenance + in_session + rented
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    available_quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    in_maintenance: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    in_session: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    rented: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    unit: Mapped[str] = mapped_column(String(32), default="piece", nullable=False)
    unit_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    reorder_level: Mapped[int] = mapped_column(Integer, default=5, nullable=False)
    supplier_id: Mapped[int | None] = mapped_column(ForeignKey("suppliers.id"), nullable=True, index=True)
    manufacturer: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[ItemStatus] = mapped_column(
        _enum(ItemStatus), default=ItemStatus.available, nullable=False, index=True
    )

    last_maintenance_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    next_maintenance_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    purchase_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}

    room: Mapped["Location"] = relationship(foreign_keys=[room_id])
    rack: Mapped["Location | None"] = relationship(foreign_keys=[rack_id])
    shelf: Mapped["Location | None"] = relationship(foreign_keys=[shelf_id])
    supplier: Mapped["Supplier | None"] = relationship(back_populates="items")

    transactions: Mapped[list["Transaction"]] = relationship(
        back_populates="item", cascade="all, delete-orphan", order_by="Transaction.timestamp"
    )
    maintenance_records: Mapped[list["MaintenanceRecord"]] = relationship(
        back_populates="item", cascade="all, delete-orphan", order_by="MaintenanceRecord.id"
    )
    rental_records: Mapped[list["RentalRecord"]] = relationship(
        back_populates="item", cascade="all, delete-orphan", order_by="RentalRecord.id"
    )
    session_records: Mapped[list["SessionRecord"]] = relationship(
        back_populates="item", cascade="all, delete-orphan", order_by="SessionRecord.id"
    )

    @property
    def location(self) -> dict:
        return {"room": self.room_id, "rack": self.rack_id, "shelf": self.shelf_id}

    @property
    def current_state(self) -> dict:
        return {
            "in_maintenance": self.in_maintenance,
            "in_session": self.in_session,
            "rented": self.rented,
        }

    @property
    def is_consumable(self) -> bool:
        return self.category == CategoryType.consumable.value or self.category_type == CategoryType.consumable

    @property
    def is_low_stock(self) -> bool:
        if self.is_consumable:
            return self.available_quantity <= self.reorder_level
        return False
