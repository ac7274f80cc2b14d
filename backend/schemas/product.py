# backend/schemas/product.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional


# Base configuration: ORM compatibility and camelCase JSON keys.
# Requests may use either camelCase or snake_case names.
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True, alias_generator=to_camel)


# Editable attributes; `code` is assigned by the server and never edited.
# Required fields stay Optional here so the service can report them as a 400.
class ProductWrite(ORMBase):
    description: Optional[str] = None
    quantity: Optional[int] = None
    unit: Optional[str] = ""
    supplementary_description: Optional[str] = ""
    expiry: Optional[str] = ""
    supplier: Optional[str] = ""
    process_number: Optional[str] = ""
    notes: Optional[str] = ""


class ProductOut(ORMBase):
    id: int
    code: int
    description: str
    quantity: int
    unit: str = ""
    supplementary_description: str = ""
    expiry: str = ""
    supplier: str = ""
    process_number: str = ""
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductSaved(ORMBase):
    success: bool = True
    product: ProductOut


class ProductDeleted(ORMBase):
    success: bool = True
    message: str
    movements_removed: int
