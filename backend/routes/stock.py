# backend/routes/stock.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from database import get_db
from models.stock import StockMovement
from services import inventory
from utils.audit import client_ip
import schemas.stock as stock_schemas

router = APIRouter(tags=["Stock"])


def _movement_to_dict(m: StockMovement) -> dict:
    product = m.product
    if product:
        product_data = {"id": product.id, "code": product.code, "description": product.description}
    else:
        product_data = {"id": None, "code": None, "description": stock_schemas.REMOVED_PRODUCT_LABEL}

    return {
        "id": m.id,
        "type": m.type,
        "quantity": m.quantity,
        "warehouse_keeper": m.warehouse_keeper,
        "responsible_sector": m.responsible_sector,
        "recipient": m.recipient,
        "occurred_at": m.occurred_at,
        "created_at": m.created_at,
        "product_ref": m.product_id,
        "product": product_data,
    }


def movement_filters(
    q: Optional[str] = Query(None, description="Product description fragment or code"),
    type: Optional[str] = Query(None, description="entry / exit"),
    date_from: Optional[str] = Query(None, alias="dateFrom", description="YYYY-MM-DD"),
    date_to: Optional[str] = Query(None, alias="dateTo", description="YYYY-MM-DD"),
) -> dict:
    return {"q": q, "type": type, "date_from": date_from, "date_to": date_to}


@router.get("/movements", response_model=List[stock_schemas.MovementResponse])
def list_movements(
    filters: dict = Depends(movement_filters),
    db: Session = Depends(get_db),
):
    movements = inventory.list_movements(db, **filters)
    return [stock_schemas.MovementResponse.model_validate(_movement_to_dict(m)) for m in movements]


@router.get("/movements/summary", response_model=stock_schemas.MovementSummary)
def movements_summary(
    filters: dict = Depends(movement_filters),
    db: Session = Depends(get_db),
):
    return inventory.movement_summary(db, **filters)


@router.post("/entry", response_model=stock_schemas.OperationResult)
def register_entry(
    payload: stock_schemas.EntryCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    inventory.record_entry(db, **payload.model_dump(), ip=client_ip(request))
    return {"success": True, "message": "Entry recorded successfully."}


@router.post("/exit", response_model=stock_schemas.OperationResult)
def register_exit(
    payload: stock_schemas.ExitCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    inventory.record_exit(db, **payload.model_dump(), ip=client_ip(request))
    return {"success": True, "message": "Exit recorded successfully."}
