# backend/services/inventory.py
"""Stock-control rules: products, sequential codes, entries, exits and history.

Every public function runs as one database transaction. A product's quantity
change, the movement that explains it and the audit row are committed together,
and deleting a product removes its movements in the same commit.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import func, or_, update
from sqlalchemy.orm import Query, Session, contains_eager

from models.product import Product
from models.sequence import SequenceCounter
from models.stock import MovementType, StockMovement
from utils.audit import write_log
from utils.dates import day_range, resolve_occurred_at
from utils.errors import (
    InsufficientStockError,
    NotFoundError,
    ValidationError,
    storage_guard,
)

logger = logging.getLogger(__name__)

PRODUCT_CODE_SEQUENCE = "product_code"

# Free-text attributes copied as-is on create and overwritten on update.
TEXT_FIELDS = (
    "unit",
    "supplementary_description",
    "expiry",
    "supplier",
    "process_number",
    "notes",
)


# ---- HELPERS ----
def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _require_quantity(quantity: Any, *, positive: bool) -> int:
    if quantity is None or isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("Quantity is required and must be an integer.")
    if positive and quantity <= 0:
        raise ValidationError("Quantity must be greater than zero.")
    if quantity < 0:
        raise ValidationError("Quantity cannot be negative.")
    return quantity


def _validate_product_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    description = _clean(data.get("description"))
    if not description or data.get("quantity") is None:
        raise ValidationError("Missing required fields: description and quantity.")

    values = {
        "description": description,
        "quantity": _require_quantity(data.get("quantity"), positive=False),
    }
    for field in TEXT_FIELDS:
        values[field] = data.get(field) or ""
    return values


def next_product_code(db: Session) -> int:
    """Allocate the next product code from the counter row.

    The increment is a single UPDATE evaluated by the database, so two
    concurrent transactions never receive the same value. The counter starts
    from the highest existing code, and codes of deleted products are never
    handed out again. Must be called inside the caller's transaction.
    """
    bumped = db.execute(
        update(SequenceCounter)
        .where(SequenceCounter.name == PRODUCT_CODE_SEQUENCE)
        .values(value=SequenceCounter.value + 1)
        .execution_options(synchronize_session=False)
    )
    if bumped.rowcount == 0:
        start = db.query(func.max(Product.code)).scalar() or 0
        db.add(SequenceCounter(name=PRODUCT_CODE_SEQUENCE, value=start + 1))
        db.flush()
        return start + 1

    return db.query(SequenceCounter.value).filter(
        SequenceCounter.name == PRODUCT_CODE_SEQUENCE
    ).scalar()


def get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found.")
    return product


def find_by_description(db: Session, description: str) -> Optional[Product]:
    """Case-insensitive exact match, the natural key used by entries."""
    return (
        db.query(Product)
        .filter(Product.description_key == description.casefold())
        .order_by(Product.code.asc())
        .first()
    )


# =========================
# PRODUCTS
# =========================
def list_products(db: Session) -> List[Product]:
    with storage_guard(db):
        return db.query(Product).order_by(Product.description.asc(), Product.id.asc()).all()


def create_product(db: Session, data: Mapping[str, Any], ip: Optional[str] = None) -> Product:
    values = _validate_product_fields(data)
    with storage_guard(db):
        product = Product(code=next_product_code(db), **values)
        db.add(product)
        db.flush()
        write_log(
            db, actor=None, action="PRODUCT_CREATE", resource="products",
            ip=ip, meta={"id": product.id, "code": product.code},
        )
        db.commit()
        db.refresh(product)
    logger.info("Created product %s (code %s)", product.id, product.code)
    return product


def update_product(
    db: Session, product_id: int, data: Mapping[str, Any], ip: Optional[str] = None
) -> Product:
    values = _validate_product_fields(data)
    with storage_guard(db):
        product = get_product(db, product_id)
        for key, value in values.items():
            setattr(product, key, value)
        write_log(db, actor=None, action="PRODUCT_UPDATE", resource="products", ip=ip, meta={"id": product.id})
        db.commit()
        db.refresh(product)
    logger.info("Updated product %s", product.id)
    return product


def delete_product(db: Session, product_id: int, ip: Optional[str] = None) -> Tuple[str, int]:
    """Delete a product together with its movement history.

    Returns the removed product's description and the number of movements deleted.
    """
    with storage_guard(db):
        product = get_product(db, product_id)
        description = product.description
        removed = (
            db.query(StockMovement)
            .filter(StockMovement.product_id == product.id)
            .delete(synchronize_session=False)
        )
        db.delete(product)
        write_log(
            db, actor=None, action="PRODUCT_DELETE", resource="products",
            ip=ip, meta={"id": product_id, "movements_removed": removed},
        )
        db.commit()
    logger.info("Deleted product %s and %s movement(s)", product_id, removed)
    return description, removed


# =========================
# MOVEMENTS
# =========================
def _movement_query(
    db: Session,
    q: Optional[str] = None,
    type: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> Query:
    # Outer join keeps movements whose product no longer exists
    query = db.query(StockMovement).outerjoin(Product, StockMovement.product_id == Product.id)

    if q and q.strip():
        term = q.strip()
        conditions = [Product.description_key.like(_like_pattern(term.casefold()), escape="\\")]
        if term.isdigit():
            conditions.append(Product.code == int(term))
        query = query.filter(or_(*conditions))

    if type:
        allowed = {t.value for t in MovementType}
        if type not in allowed:
            raise ValidationError(f"Invalid movement type: {type!r}.")
        query = query.filter(StockMovement.type == type)

    start, end = day_range(date_from, date_to)
    if start is not None:
        query = query.filter(StockMovement.occurred_at >= start)
    if end is not None:
        query = query.filter(StockMovement.occurred_at < end)
    return query


def list_movements(db: Session, **filters: Optional[str]) -> List[StockMovement]:
    """Movement history, newest day first, later records first within a day."""
    query = _movement_query(db, **filters).options(contains_eager(StockMovement.product))
    with storage_guard(db):
        return query.order_by(StockMovement.occurred_at.desc(), StockMovement.id.desc()).all()


def movement_summary(db: Session, **filters: Optional[str]) -> Dict[str, int]:
    query = _movement_query(db, **filters)
    with storage_guard(db):
        rows = (
            query.with_entities(StockMovement.type, func.coalesce(func.sum(StockMovement.quantity), 0))
            .group_by(StockMovement.type)
            .all()
        )
    totals = {t: int(total) for t, total in rows}
    entries = totals.get(MovementType.ENTRY.value, 0)
    exits = totals.get(MovementType.EXIT.value, 0)
    return {"total_entries": entries, "total_exits": exits, "balance": entries - exits}


def record_entry(
    db: Session,
    *,
    description: Optional[str],
    quantity: Any,
    warehouse_keeper: Optional[str],
    unit: Optional[str] = "",
    occurred_at_date: Optional[str] = None,
    ip: Optional[str] = None,
) -> Tuple[Product, StockMovement]:
    """Receive goods by description.

    An existing product (matched case-insensitively) is topped up; otherwise a
    new product is created with the next code.
    """
    description = _clean(description)
    warehouse_keeper = _clean(warehouse_keeper)
    if not description or not quantity or not warehouse_keeper:
        raise ValidationError("Missing required fields: description, quantity and warehouseKeeper.")
    quantity = _require_quantity(quantity, positive=True)
    occurred_at = resolve_occurred_at(occurred_at_date)

    with storage_guard(db):
        product = find_by_description(db, description)
        if product:
            db.execute(
                update(Product)
                .where(Product.id == product.id)
                .values(quantity=Product.quantity + quantity)
                .execution_options(synchronize_session=False)
            )
        else:
            product = Product(
                code=next_product_code(db),
                description=description,
                quantity=quantity,
                unit=unit or "",
            )
            db.add(product)
            db.flush()

        movement = StockMovement(
            product_id=product.id,
            type=MovementType.ENTRY.value,
            quantity=quantity,
            warehouse_keeper=warehouse_keeper,
            occurred_at=occurred_at,
        )
        db.add(movement)
        db.flush()
        write_log(
            db, actor=warehouse_keeper, action="STOCK_ENTRY", resource="stock", ip=ip,
            meta={"movement_id": movement.id, "product_id": product.id, "quantity": quantity},
        )
        db.commit()
        db.refresh(product)
        db.refresh(movement)

    logger.info("Entry of %s for product %s by %s", quantity, product.id, warehouse_keeper)
    return product, movement


def record_exit(
    db: Session,
    *,
    product_ref: Optional[int],
    quantity: Any,
    warehouse_keeper: Optional[str],
    occurred_at_date: Optional[str] = None,
    responsible_sector: Optional[str] = None,
    recipient: Optional[str] = None,
    ip: Optional[str] = None,
) -> Tuple[Product, StockMovement]:
    """Issue goods from an existing product; never lets stock go negative."""
    warehouse_keeper = _clean(warehouse_keeper)
    if not product_ref or not quantity or not warehouse_keeper:
        raise ValidationError("Missing required fields: productRef, quantity and warehouseKeeper.")
    quantity = _require_quantity(quantity, positive=True)
    occurred_at = resolve_occurred_at(occurred_at_date)

    with storage_guard(db):
        product = get_product(db, product_ref)
        if product.quantity < quantity:
            raise InsufficientStockError(
                f"Insufficient stock: {product.quantity} available, {quantity} requested."
            )

        # The guard in WHERE protects against a concurrent exit draining the stock
        taken = db.execute(
            update(Product)
            .where(Product.id == product.id, Product.quantity >= quantity)
            .values(quantity=Product.quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        if taken.rowcount == 0:
            db.rollback()
            raise InsufficientStockError("Insufficient stock for this exit.")

        movement = StockMovement(
            product_id=product.id,
            type=MovementType.EXIT.value,
            quantity=quantity,
            warehouse_keeper=warehouse_keeper,
            responsible_sector=responsible_sector or None,
            recipient=recipient or None,
            occurred_at=occurred_at,
        )
        db.add(movement)
        db.flush()
        write_log(
            db, actor=warehouse_keeper, action="STOCK_EXIT", resource="stock", ip=ip,
            meta={"movement_id": movement.id, "product_id": product.id, "quantity": quantity},
        )
        db.commit()
        db.refresh(product)
        db.refresh(movement)

    logger.info("Exit of %s from product %s by %s", quantity, product.id, warehouse_keeper)
    return product, movement
