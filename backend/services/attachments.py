# backend/services/attachments.py
"""Scanned forms: binary content in the blob store, metadata in the database.

Storing writes the blob first and the metadata row second; if the row cannot
be committed the blob is removed again. Deleting removes the blob first and
treats an already missing blob as deleted.
"""
import logging
from datetime import datetime
from pathlib import PurePath
from typing import BinaryIO, List, Optional, Tuple

from sqlalchemy.orm import Session

from models.attachment import Attachment
from utils.audit import write_log
from utils.blob_store import BlobNotFoundError, BlobStore
from utils.dates import day_range
from utils.errors import NotFoundError, StorageError, ValidationError, storage_guard

logger = logging.getLogger(__name__)


def _safe_name(original_filename: Optional[str]) -> str:
    # Keep only the last path component a browser might send
    name = PurePath((original_filename or "").replace("\\", "/")).name
    return name or "form.pdf"


def store_attachment(
    db: Session,
    blobs: BlobStore,
    content: Optional[bytes],
    original_filename: Optional[str],
    content_type: Optional[str] = None,
    date_range_start: Optional[str] = None,
    date_range_end: Optional[str] = None,
    ip: Optional[str] = None,
) -> Attachment:
    if not content:
        raise ValidationError("No file was sent.")

    uploaded_at = datetime.now()
    filename = f"{int(uploaded_at.timestamp() * 1000)}-{_safe_name(original_filename)}"

    try:
        file_ref = blobs.put(content)
    except OSError as exc:
        raise StorageError(f"Could not store file: {exc}") from exc

    attachment = Attachment(
        file_ref=file_ref,
        filename=filename,
        content_type=content_type,
        size=len(content),
        date_range_start=date_range_start,
        date_range_end=date_range_end,
        uploaded_at=uploaded_at,
    )
    try:
        with storage_guard(db):
            db.add(attachment)
            db.flush()
            write_log(
                db, actor=None, action="ATTACHMENT_UPLOAD", resource="attachments", ip=ip,
                meta={"id": attachment.id, "filename": filename},
            )
            db.commit()
            db.refresh(attachment)
    except StorageError:
        logger.warning("Metadata write failed, removing orphaned blob %s", file_ref)
        try:
            blobs.delete(file_ref)
        except OSError:
            logger.exception("Could not remove orphaned blob %s", file_ref)
        raise

    logger.info("Stored attachment %s (%s, %s bytes)", attachment.id, filename, attachment.size)
    return attachment


def list_attachments(
    db: Session, uploaded_from: Optional[str] = None, uploaded_to: Optional[str] = None
) -> List[Attachment]:
    query = db.query(Attachment)
    start, end = day_range(uploaded_from, uploaded_to, open_ended=True)
    if start is not None:
        query = query.filter(Attachment.uploaded_at >= start)
    if end is not None:
        query = query.filter(Attachment.uploaded_at < end)
    with storage_guard(db):
        return query.order_by(Attachment.uploaded_at.desc(), Attachment.id.desc()).all()


def get_attachment(db: Session, attachment_id: int) -> Attachment:
    with storage_guard(db):
        attachment = db.get(Attachment, attachment_id)
    if not attachment:
        raise NotFoundError("Attachment not found.")
    return attachment


def open_attachment(db: Session, blobs: BlobStore, attachment_id: int) -> Tuple[Attachment, BinaryIO]:
    attachment = get_attachment(db, attachment_id)
    try:
        handle = blobs.open(attachment.file_ref)
    except OSError as exc:
        raise StorageError(f"Could not read file: {exc}") from exc
    return attachment, handle


def delete_attachment(db: Session, blobs: BlobStore, attachment_id: int, ip: Optional[str] = None) -> None:
    attachment = get_attachment(db, attachment_id)

    try:
        blobs.delete(attachment.file_ref)
    except BlobNotFoundError:
        logger.warning("Blob %s of attachment %s was already gone", attachment.file_ref, attachment.id)
    except OSError as exc:
        raise StorageError(f"Could not delete file: {exc}") from exc

    with storage_guard(db):
        db.delete(attachment)
        write_log(db, actor=None, action="ATTACHMENT_DELETE", resource="attachments", ip=ip, meta={"id": attachment_id})
        db.commit()
    logger.info("Deleted attachment %s", attachment_id)
