from siminventory.schemas.user import UserRegister, UserCreate, UserUpdate, UserResponse, LoginRequest, TokenResponse
from siminventory.schemas.location import LocationCreate, LocationUpdate, LocationResponse, RoomNode
from siminventory.schemas.supplier import SupplierCreate, SupplierUpdate, SupplierResponse
from siminventory.schemas.item import ItemCreate, ItemUpdate, ItemResponse, ItemRecordsResponse
from siminventory.schemas.transaction import TransactionRequest, TransactionResponse, GroupedTransactionsResponse
from siminventory.schemas.pagination import Page

__all__ = [
    "UserRegister", "UserCreate", "UserUpdate", "UserResponse", "LoginRequest", "TokenResponse",
    "LocationCreate", "LocationUpdate", "LocationResponse", "RoomNode",
    "SupplierCreate", "SupplierUpdate", "SupplierResponse",
    "ItemCreate", "ItemUpdate", "ItemResponse", "ItemRecordsResponse",
    "TransactionRequest", "TransactionResponse", "GroupedTransactionsResponse",
    "Page",
]
