import logging
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session
from siminventory.database import get_db
from siminventory.models.item import ItemStatus
from siminventory.models.user import User
from siminventory.schemas.item import ItemCreate, ItemUpdate, ItemResponse, ItemRecordsResponse
from siminventory.schemas.pagination import Page
from siminventory.schemas.transaction import (
    TransactionRequest, TransactionResponse, GroupedTransactionsResponse,
)
from siminventory.routers.auth import require_user, require_manager, require_admin
import siminventory.services.item_service as svc
import siminventory.services.transaction_service as tx_svc
import siminventory.services.barcode_service as barcode_svc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/items", tags=["items"])


@router.get("", response_model=Page[ItemResponse])
def list_items(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=200),
    search: str = Query(""),
    category: str = Query(""),
    status: ItemStatus | None = Query(None),
    location: int | None = Query(None, description="Room id"),
    db: Session = Depends(get_db),
    _=Depends(require_user),
):
    return svc.get_items(
        db, page=page, size=size, search=search, category=category,
        status=status.value if status else "", location=location,
    )


@router.post("", response_model=ItemResponse, status_code=201)
def create_item(data: ItemCreate, db: Session = Depends(get_db), user: User = Depends(require_manager)):
    return svc.create_item(db, data, user_id=user.id)


@router.get("/low-stock", response_model=list[ItemResponse])
def low_stock(db: Session = Depends(get_db), _=Depends(require_manager)):
    return svc.get_low_stock_items(db)


@router.get("/barcode/{code}", response_model=ItemResponse)
def get_item_by_barcode(code: str, db: Session = Depends(get_db), _=Depends(require_user)):
    item = svc.get_item_by_barcode(db, code)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


@router.get("/labels.pdf")
def labels_pdf(
    ids: str = Query(..., description="Comma-separated item ids"),
    db: Session = Depends(get_db),
    _=Depends(require_user),
):
    id_list = [int(i.strip()) for i in ids.split(",") if i.strip().isdigit()]
    return Response(
        content=barcode_svc.generate_labels_pdf(db, id_list),
        media_type="application/pdf",
        headers={"Content-Disposition": "attachment; filename=item-labels.pdf"},
    )


@router.get("/{item_id}", response_model=ItemResponse)
def get_item(item_id: int, db: Session = Depends(get_db), _=Depends(require_user)):
    return svc.get_item(db, item_id)


@router.put("/{item_id}", response_model=ItemResponse)
def update_item(item_id: int, data: ItemUpdate, db: Session = Depends(get_db), _=Depends(require_manager)):
    return svc.update_item(db, item_id, data)


@router.delete("/{item_id}")
def delete_item(item_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    svc.delete_item(db, item_id)
    logger.info("AUDIT: '%s' deleted item %s", admin.email, item_id)
    return {"message": "Item removed"}


@router.get("/{item_id}/barcode.png")
def item_barcode_png(item_id: int, db: Session = Depends(get_db), _=Depends(require_user)):
    return Response(content=barcode_svc.generate_item_label(db, item_id), media_type="image/png")


@router.get("/{item_id}/records", response_model=ItemRecordsResponse)
def item_records(item_id: int, db: Session = Depends(get_db), _=Depends(require_user)):
    return svc.get_item_records(db, item_id)


@router.post("/{item_id}/enhanced-transaction", response_model=TransactionResponse, status_code=201)
@router.post("/{item_id}/transaction", response_model=TransactionResponse, status_code=201)
def create_transaction(
    item_id: int,
    data: TransactionRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    return tx_svc.record_transaction(db, item_id, data, user_id=user.id, background_tasks=background_tasks)


@router.get("/{item_id}/transactions", response_model=list[TransactionResponse])
def item_transactions(item_id: int, db: Session = Depends(get_db), _=Depends(require_user)):
    return tx_svc.get_item_transactions(db, item_id)


@router.get("/{item_id}/transactions/grouped", response_model=GroupedTransactionsResponse)
def item_transactions_grouped(item_id: int, db: Session = Depends(get_db), _=Depends(require_user)):
    return tx_svc.get_grouped_transactions(db, item_id)
