# schemas/attachment.py
from datetime import datetime
from typing import Optional

from schemas.product import ORMBase


# Metadata of a stored form as returned by the list endpoint
class AttachmentOut(ORMBase):
    id: int
    file_ref: str
    filename: str
    content_type: Optional[str] = None
    size: int = 0
    date_range_start: Optional[str] = None
    date_range_end: Optional[str] = None
    uploaded_at: datetime


class AttachmentCreated(ORMBase):
    message: str
    id: int


class AttachmentDeleted(ORMBase):
    success: bool = True
