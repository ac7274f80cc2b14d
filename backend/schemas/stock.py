# backend/schemas/stock.py
from pydantic import AliasChoices, Field
from datetime import datetime
from typing import Literal, Optional

from schemas.product import ORMBase

# Allowed movement directions
MovementTypeName = Literal["entry", "exit"]

# Label shown for movements whose product has been deleted
REMOVED_PRODUCT_LABEL = "Product removed"


# Schema for receiving goods (product matched or created by description)
class EntryCreate(ORMBase):
    description: Optional[str] = None
    quantity: Optional[int] = None
    unit: Optional[str] = ""
    warehouse_keeper: Optional[str] = None
    occurred_at_date: Optional[str] = None


# Schema for issuing goods from an existing product
class ExitCreate(ORMBase):
    product_ref: Optional[int] = None
    quantity: Optional[int] = None
    warehouse_keeper: Optional[str] = None
    occurred_at_date: Optional[str] = None
    responsible_sector: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("responsibleSector", "responsible_sector", "sector"),
    )
    recipient: Optional[str] = None


# Product fields embedded in each history row
class MovementProduct(ORMBase):
    id: Optional[int] = None
    code: Optional[int] = None
    description: str


class MovementResponse(ORMBase):
    id: int
    type: MovementTypeName
    quantity: int
    warehouse_keeper: str
    responsible_sector: Optional[str] = None
    recipient: Optional[str] = None
    occurred_at: datetime
    created_at: Optional[datetime] = None
    product_ref: int
    product: MovementProduct


class MovementSummary(ORMBase):
    total_entries: int
    total_exits: int
    balance: int


class OperationResult(ORMBase):
    success: bool = True
    message: str
