from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from siminventory.database import get_db
from siminventory.schemas.supplier import SupplierCreate, SupplierUpdate, SupplierResponse
from siminventory.schemas.item import ItemResponse
from siminventory.routers.auth import require_user, require_manager, require_admin
import siminventory.services.supplier_service as svc

router = APIRouter(prefix="/api/suppliers", tags=["suppliers"])


@router.get("", response_model=list[SupplierResponse])
def list_suppliers(db: Session = Depends(get_db), _=Depends(require_user)):
    return svc.get_suppliers(db)


@router.post("", response_model=SupplierResponse, status_code=201)
def create_supplier(data: SupplierCreate, db: Session = Depends(get_db), _=Depends(require_manager)):
    return svc.create_supplier(db, data)


@router.get("/{supplier_id}", response_model=SupplierResponse)
def get_supplier(supplier_id: int, db: Session = Depends(get_db), _=Depends(require_user)):
    return svc.get_supplier(db, supplier_id)


@router.put("/{supplier_id}", response_model=SupplierResponse)
def update_supplier(
    supplier_id: int, data: SupplierUpdate, db: Session = Depends(get_db), _=Depends(require_manager)
):
    return svc.update_supplier(db, supplier_id, data)


@router.delete("/{supplier_id}")
def delete_supplier(supplier_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    svc.delete_supplier(db, supplier_id)
    return {"message": "Supplier removed"}


@router.get("/{supplier_id}/items", response_model=list[ItemResponse])
def supplier_items(supplier_id: int, db: Session = Depends(get_db), _=Depends(require_user)):
    return svc.get_supplier_items(db, supplier_id)
