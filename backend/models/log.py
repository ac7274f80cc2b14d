# backend/models/log.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, JSON
from database import Base

# Represents system audit logs tracking who changed what
class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)

    # Event timestamp and core action details
    ts = Column(DateTime, default=datetime.now, index=True) # local time, like movement dates
    actor = Column(String, nullable=True, index=True)
    action = Column(String(50), index=True)
    resource = Column(String(50), index=True)
    status = Column(String(20), index=True)
    ip = Column(String(64), nullable=True)

    # JSON container for flexible context data
    meta = Column(JSON, nullable=True)
