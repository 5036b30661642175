import enum
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from siminventory.database import Base


class LocationType(str, enum.Enum):
    room = "Room"
    rack = "Rack"
    shelf = "Shelf"


# Required parent type per location type; None means the location is a root
PARENT_TYPE = {
    LocationType.room: None,
    LocationType.rack: LocationType.room,
    LocationType.shelf: LocationType.rack,
}


class Location(Base):
    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[LocationType] = mapped_column(
        SAEnum(LocationType, values_callable=lambda e: [x.value for x in e]),
        nullable=False,
        index=True,
    )
    parent_id: Mapped[int | None] = mapped_column(ForeignKey("locations.id"), nullable=True, index=True)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    parent: Mapped["Location | None"] = relationship(remote_side=[id], back_populates="children")
    children: Mapped[list["Location"]] = relationship(back_populates="parent")
