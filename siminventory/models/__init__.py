from siminventory.models.user import User, Role
from siminventory.models.location import Location, LocationType
from siminventory.models.supplier import Supplier
from siminventory.models.item import Item, CategoryType, BarcodeType, ItemStatus
from siminventory.models.records import SessionRecord, RentalRecord, MaintenanceRecord
from siminventory.models.transaction import Transaction, TransactionType

__all__ = [
    "User", "Role",
    "Location", "LocationType",
    "Supplier",
    "Item", "CategoryType", "BarcodeType", "ItemStatus",
    "SessionRecord", "RentalRecord", "MaintenanceRecord",
    "Transaction", "TransactionType",
]
