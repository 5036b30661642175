from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from siminventory.database import get_db
from siminventory.models.item import ItemStatus
from siminventory.models.transaction import TransactionType
from siminventory.routers.auth import require_user
import siminventory.services.report_service as svc

router = APIRouter(prefix="/api/reports", tags=["reports"], dependencies=[Depends(require_user)])


@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db)):
    return svc.get_dashboard(db)


@router.get("/inventory")
def inventory_report(
    category: str = Query(""),
    status: ItemStatus | None = Query(None),
    location: int | None = Query(None, description="Room id"),
    sort: str = Query("name", pattern="^(name|value|quantity)$"),
    db: Session = Depends(get_db),
):
    return svc.get_inventory_report(
        db, category=category, status=status.value if status else "", location=location, sort=sort,
    )


@router.get("/transactions")
def transactions_report(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=200),
    type: TransactionType | None = Query(None),
    item_id: int | None = Query(None),
    user_id: int | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    db: Session = Depends(get_db),
):
    return svc.get_transactions_report(
        db, page=page, size=size, tx_type=type, item_id=item_id,
        user_id=user_id, start_date=start_date, end_date=end_date,
    )


@router.get("/maintenance")
def maintenance_report(days_ahead: int = Query(30, ge=1, le=365), db: Session = Depends(get_db)):
    return svc.get_maintenance_report(db, days_ahead=days_ahead)


@router.get("/locations")
def location_report(db: Session = Depends(get_db)):
    return svc.get_location_report(db)
