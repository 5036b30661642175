from datetime import datetime, date
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from siminventory.models.item import ItemStatus
from siminventory.models.transaction import TransactionType


class _Payload(BaseModel):
    # Older browser clients post camelCase keys (rentedTo, toLocation, ...)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SessionDetails(_Payload):
    name: str | None = None
    location: str | None = None


class RentalDetails(_Payload):
    rented_to: str | None = None
    expected_return_date: date | None = None


class MaintenanceDetails(_Payload):
    provider: str | None = None
    expected_end_date: date | None = None


class TransactionRequest(_Payload):
    type: TransactionType
    quantity: int = Field(..., gt=0)
    from_location: int | None = None
    to_location: int | None = None
    session: SessionDetails | None = None
    rental: RentalDetails | None = None
    maintenance: MaintenanceDetails | None = None
    # Return types: the open record to close; most recent matching one if omitted
    record_id: int | None = None
    notes: str | None = Field(None, max_length=2000)


class SessionOut(BaseModel):
    name: str | None
    location: str | None


class RentalOut(BaseModel):
    rented_to: str
    expected_return_date: date | None


class MaintenanceOut(BaseModel):
    provider: str | None
    expected_end_date: date | None


class TransactionResponse(BaseModel):
    id: int
    item_id: int
    type: TransactionType
    quantity: int
    from_location_id: int | None
    to_location_id: int | None
    session: SessionOut | None
    rental: RentalOut | None
    maintenance: MaintenanceOut | None
    record_id: int | None
    performed_by: int
    notes: str | None
    timestamp: datetime

    model_config = {"from_attributes": True}


class StateSnapshot(BaseModel):
    total: int
    available: int
    in_maintenance: int
    in_session: int
    rented: int
    status: ItemStatus


class GroupedTransactionsResponse(BaseModel):
    stock: list[TransactionResponse]
    location: list[TransactionResponse]
    session: list[TransactionResponse]
    rental: list[TransactionResponse]
    maintenance: list[TransactionResponse]
    legacy: list[TransactionResponse]
    state: StateSnapshot
