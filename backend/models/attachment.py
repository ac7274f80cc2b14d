# backend/models/attachment.py
from sqlalchemy import Column, Integer, String, DateTime
from database import Base

# Metadata of a scanned form stored in the blob directory
class Attachment(Base):
    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True, index=True)
    file_ref = Column(String(64), unique=True, nullable=False) # Name of the blob holding the content
    filename = Column(String, nullable=False) # "<upload-epoch-millis>-<original-name>"
    content_type = Column(String, nullable=True)
    size = Column(Integer, nullable=False, default=0)

    # Period covered by the form, as typed by the user (not validated)
    date_range_start = Column(String, nullable=True)
    date_range_end = Column(String, nullable=True)

    uploaded_at = Column(DateTime, nullable=False, index=True)
