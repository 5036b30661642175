from datetime import datetime, date
from decimal import Decimal
from pydantic import BaseModel, Field
from siminventory.models.item import CategoryType, BarcodeType, ItemStatus


class ItemLocation(BaseModel):
    room: int
    rack: int | None = None
    shelf: int | None = None


class CurrentState(BaseModel):
    in_maintenance: int = 0
    in_session: int = 0
    rented: int = 0


class ItemBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=128)
    category_type: CategoryType = CategoryType.custom
    description: str | None = None
    serial_number: str | None = None
    unit: str = "piece"
    unit_cost: Decimal | None = Field(None, ge=0)
    reorder_level: int = Field(5, ge=0)
    supplier_id: int | None = None
    manufacturer: str | None = None
    purchase_date: date | None = None
    next_maintenance_date: date | None = None
    notes: str | None = None


class ItemCreate(ItemBase):
    barcode: str | None = Field(None, max_length=64)
    barcode_type: BarcodeType = BarcodeType.generate
    location: ItemLocation
    quantity: int = Field(1, ge=0)


class ItemUpdate(BaseModel):
    """Counters are not editable here; they move only through transactions."""

    name: str | None = Field(None, min_length=1, max_length=255)
    category: str | None = Field(None, min_length=1, max_length=128)
    category_type: CategoryType | None = None
    description: str | None = None
    serial_number: str | None = None
    barcode: str | None = Field(None, max_length=64)
    barcode_type: BarcodeType | None = None
    location: ItemLocation | None = None
    unit: str | None = None
    unit_cost: Decimal | None = Field(None, ge=0)
    reorder_level: int | None = Field(None, ge=0)
    supplier_id: int | None = None
    manufacturer: str | None = None
    purchase_date: date | None = None
    next_maintenance_date: date | None = None
    notes: str | None = None


class ItemResponse(ItemBase):
    id: int
    barcode: str
    barcode_type: BarcodeType
    location: ItemLocation
    quantity: int
    available_quantity: int
    current_state: CurrentState
    status: ItemStatus
    is_low_stock: bool
    last_maintenance_date: datetime | None
    created_by: int | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SessionRecordResponse(BaseModel):
    id: int
    session_name: str | None
    location: str | None
    quantity: int
    notes: str | None
    start_date: datetime
    end_date: datetime | None

    model_config = {"from_attributes": True}


class RentalRecordResponse(BaseModel):
    id: int
    rented_to: str
    quantity: int
    notes: str | None
    start_date: datetime
    expected_return_date: date | None
    returned_date: datetime | None

    model_config = {"from_attributes": True}


class MaintenanceRecordResponse(BaseModel):
    id: int
    provider: str | None
    quantity: int
    notes: str | None
    start_date: datetime
    expected_end_date: date | None
    completed_date: datetime | None

    model_config = {"from_attributes": True}


class ItemRecordsResponse(BaseModel):
    sessions: list[SessionRecordResponse]
    rentals: list[RentalRecordResponse]
    maintenance: list[MaintenanceRecordResponse]
