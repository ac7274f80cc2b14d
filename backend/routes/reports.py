# routes/reports.py
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from database import get_db
from routes.stock import movement_filters
from services import inventory
from utils.pdf import generate_movements_pdf, generate_stock_pdf

router = APIRouter(prefix="/reports", tags=["Reports"])


def _pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# -----------------------------
# 1) Aktualny stan magazynu
# -----------------------------
@router.get("/stock.pdf")
def report_stock_pdf(db: Session = Depends(get_db)):
    products = inventory.list_products(db)
    content = generate_stock_pdf(products, generated_at=datetime.now())
    return _pdf_response(content, "current_stock.pdf")


# -----------------------------
# 2) Historia ruchów (z filtrami i podsumowaniem)
# -----------------------------
@router.get("/movements.pdf")
def report_movements_pdf(
    filters: dict = Depends(movement_filters),
    db: Session = Depends(get_db),
):
    movements = inventory.list_movements(db, **filters)
    summary = inventory.movement_summary(db, **filters)
    content = generate_movements_pdf(movements, summary, filters)
    return _pdf_response(content, "movement_history.pdf")
