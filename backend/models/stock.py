# backend/models/stock.py
import enum
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Direction of a stock movement
class MovementType(str, enum.Enum):
    ENTRY = "entry"
    EXIT = "exit"

class StockMovement(Base):
    __tablename__ = "movements"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    # Movement classification, one of MovementType values
    type = Column(String(10), nullable=False, index=True)
    quantity = Column(Integer, CheckConstraint("quantity > 0"), nullable=False)

    # Storeroom employee who handled the goods
    warehouse_keeper = Column(String, nullable=False)

    # Exit details: requesting sector and the person who picked the goods up
    responsible_sector = Column(String, nullable=True)
    recipient = Column(String, nullable=True)

    # Calendar day of the movement, stored as local time
    occurred_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product")
