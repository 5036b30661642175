from sqlalchemy.orm import Session
from sqlalchemy import select
from fastapi import HTTPException
from siminventory.models.supplier import Supplier
from siminventory.models.item import Item
from siminventory.schemas.supplier import SupplierCreate, SupplierUpdate


def get_suppliers(db: Session) -> list[Supplier]:
    return db.scalars(select(Supplier).order_by(Supplier.name)).all()


def get_supplier(db: Session, supplier_id: int) -> Supplier:
    supplier = db.get(Supplier, supplier_id)
    if not supplier:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return supplier


def create_supplier(db: Session, data: SupplierCreate) -> Supplier:
    supplier = Supplier(**data.model_dump())
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    return supplier


def update_supplier(db: Session, supplier_id: int, data: SupplierUpdate) -> Supplier:
    supplier = get_supplier(db, supplier_id)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(supplier, field, value)
    db.commit()
    db.refresh(supplier)
    return supplier


def delete_supplier(db: Session, supplier_id: int) -> None:
    supplier = get_supplier(db, supplier_id)
    if db.scalar(select(Item.id).where(Item.supplier_id == supplier_id).limit(1)) is not None:
        raise HTTPException(status_code=400, detail="Cannot delete supplier that is associated with items")
    db.delete(supplier)
    db.commit()


def get_supplier_items(db: Session, supplier_id: int) -> list[Item]:
    get_supplier(db, supplier_id)
    return db.scalars(select(Item).where(Item.supplier_id == supplier_id).order_by(Item.name)).all()
