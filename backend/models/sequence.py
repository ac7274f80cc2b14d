# backend/models/sequence.py
from sqlalchemy import Column, Integer, String
from database import Base

# Named counter; each row stores the last value handed out
class SequenceCounter(Base):
    __tablename__ = "sequences"

    name = Column(String(50), primary_key=True)
    value = Column(Integer, nullable=False, default=0)
