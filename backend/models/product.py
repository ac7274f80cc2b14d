# backend/models/product.py
from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint, func
from sqlalchemy.orm import validates
from database import Base

# Model Product
# A single storeroom item. `code` is the sequential human-facing number,
# `quantity` is the on-hand stock adjusted by entries and exits.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(Integer, unique=True, nullable=False, index=True)
    description = Column(String, nullable=False, index=True)
    # casefold() of description; SQLite lower() only folds ASCII letters
    description_key = Column(String, nullable=False, index=True)

    # Stock can never go below zero.
    quantity = Column(Integer, CheckConstraint("quantity >= 0"), nullable=False, default=0)
    unit = Column(String, nullable=False, default="")

    # Free-text catalogue data.
    supplementary_description = Column(String, nullable=False, default="")
    expiry = Column(String, nullable=False, default="")
    supplier = Column(String, nullable=False, default="")
    process_number = Column(String, nullable=False, default="")
    notes = Column(String, nullable=False, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @validates("description")
    def _set_description_key(self, key, value):
        self.description_key = (value or "").casefold()
        return value
