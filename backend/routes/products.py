# backend/routes/products.py
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from services import inventory
from utils.audit import client_ip
import schemas.product as product_schemas

router = APIRouter(tags=["Products"])


# =========================
# LISTA PRODUKTÓW
# =========================
@router.get("/products", response_model=List[product_schemas.ProductOut])
def list_products(db: Session = Depends(get_db)):
    """All products ordered by description."""
    products = inventory.list_products(db)
    return [product_schemas.ProductOut.model_validate(p) for p in products]


# =========================
# DODAWANIE PRODUKTU
# =========================
@router.post("/products", response_model=product_schemas.ProductSaved)
def add_product(
    payload: product_schemas.ProductWrite,
    request: Request,
    db: Session = Depends(get_db),
):
    product = inventory.create_product(db, payload.model_dump(), ip=client_ip(request))
    out = product_schemas.ProductOut.model_validate(product)
    return {"success": True, "product": out}


# =========================
# AKTUALIZACJA PRODUKTU (PUT - Pełna)
# =========================
@router.put("/products/{product_id}", response_model=product_schemas.ProductSaved)
def update_product(
    product_id: int,
    payload: product_schemas.ProductWrite,
    request: Request,
    db: Session = Depends(get_db),
):
    product = inventory.update_product(db, product_id, payload.model_dump(), ip=client_ip(request))
    out = product_schemas.ProductOut.model_validate(product)
    return {"success": True, "product": out}


# =========================
# USUWANIE (z historią ruchów)
# =========================
@router.delete("/products/{product_id}", response_model=product_schemas.ProductDeleted)
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
):
    description, removed = inventory.delete_product(db, product_id, ip=client_ip(request))
    return {
        "success": True,
        "message": f"Product '{description}' deleted successfully.",
        "movements_removed": removed,
    }
