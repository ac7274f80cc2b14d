# backend/routes/attachments.py
from typing import List, Literal, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from database import get_db
from services import attachments as attachment_service
from utils.audit import client_ip
from utils.blob_store import BlobStore, get_blob_store, iter_blob
from schemas.attachment import AttachmentCreated, AttachmentDeleted, AttachmentOut

router = APIRouter(prefix="/attachments", tags=["Attachments"])

# Stored forms are always served as PDF
PDF_MEDIA_TYPE = "application/pdf"


def _content_disposition(disposition: str, filename: str) -> str:
    quoted = quote(filename)
    if quoted != filename:
        return f"{disposition}; filename*=utf-8''{quoted}"
    return f'{disposition}; filename="{filename}"'


def _stream(
    attachment_id: int,
    disposition: Literal["inline", "attachment"],
    db: Session,
    blobs: BlobStore,
) -> StreamingResponse:
    attachment, handle = attachment_service.open_attachment(db, blobs, attachment_id)
    return StreamingResponse(
        iter_blob(handle),
        media_type=PDF_MEDIA_TYPE,
        headers={"Content-Disposition": _content_disposition(disposition, attachment.filename)},
    )


@router.post("", response_model=AttachmentCreated)
def upload_attachment(
    request: Request,
    file: Optional[UploadFile] = File(None),
    date_range_start: Optional[str] = Form(None, alias="dateRangeStart"),
    date_range_end: Optional[str] = Form(None, alias="dateRangeEnd"),
    db: Session = Depends(get_db),
    blobs: BlobStore = Depends(get_blob_store),
):
    # The whole upload is buffered before anything is written
    content = None
    if file:
        try:
            content = file.file.read()
        finally:
            file.file.close()

    attachment = attachment_service.store_attachment(
        db, blobs, content,
        original_filename=file.filename if file else None,
        content_type=file.content_type if file else None,
        date_range_start=date_range_start,
        date_range_end=date_range_end,
        ip=client_ip(request),
    )
    return {"message": "Form attached successfully.", "id": attachment.id}


@router.get("", response_model=List[AttachmentOut])
def list_attachments(
    uploaded_from: Optional[str] = Query(None, alias="uploadedFrom", description="YYYY-MM-DD"),
    uploaded_to: Optional[str] = Query(None, alias="uploadedTo", description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
):
    items = attachment_service.list_attachments(db, uploaded_from, uploaded_to)
    return [AttachmentOut.model_validate(a) for a in items]


@router.get("/{attachment_id}/view")
def view_attachment(
    attachment_id: int,
    db: Session = Depends(get_db),
    blobs: BlobStore = Depends(get_blob_store),
):
    return _stream(attachment_id, "inline", db, blobs)


@router.get("/{attachment_id}/download")
def download_attachment(
    attachment_id: int,
    db: Session = Depends(get_db),
    blobs: BlobStore = Depends(get_blob_store),
):
    return _stream(attachment_id, "attachment", db, blobs)


@router.delete("/{attachment_id}", response_model=AttachmentDeleted)
def delete_attachment(
    attachment_id: int,
    request: Request,
    db: Session = Depends(get_db),
    blobs: BlobStore = Depends(get_blob_store),
):
    attachment_service.delete_attachment(db, blobs, attachment_id, ip=client_ip(request))
    return {"success": True}
