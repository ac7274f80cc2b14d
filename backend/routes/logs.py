# backend/routes/logs.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional, Any
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from database import get_db
from models.log import Log
from utils.dates import day_range

router = APIRouter(prefix="/logs", tags=["Logs"])

# --- SCHEMATY ---
class LogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    actor: Optional[str] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    ts: Optional[datetime] = None
    meta: Optional[Any] = None

class LogPage(BaseModel):
    items: List[LogResponse]
    total: int
    page: int
    page_size: int

# --- ENDPOINT ---
@router.get("", response_model=LogPage)
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Filter by action"),
    actor: Optional[str] = Query(None, description="Filter by acting person"),
    resource: Optional[str] = Query(None, description="Filter by resource"),
    status: Optional[str] = Query(None, description="Filter by status (SUCCESS/FAIL)"),
    date_from: Optional[str] = Query(None, description="Date from (YYYY-MM-DD)"),
    date_to: Optional[str] = Query(None, description="Date to (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
):
    query = db.query(Log)

    # 1. Filtr Akcji
    if action:
        query = query.filter(Log.action.ilike(f"%{action}%"))

    # 2. Filtr osoby
    if actor:
        query = query.filter(Log.actor.ilike(f"%{actor}%"))

    # 3. Filtr Zasobu
    if resource:
        query = query.filter(Log.resource.ilike(f"%{resource}%"))

    # 4. Filtr Statusu
    if status:
        query = query.filter(Log.status == status)

    # 5. Filtry Daty (whole days, end day included)
    start, end = day_range(date_from, date_to, open_ended=True)
    if start is not None:
        query = query.filter(Log.ts >= start)
    if end is not None:
        query = query.filter(Log.ts < end)

    # Sortowanie po dacie (malejąco)
    query = query.order_by(Log.ts.desc(), Log.id.desc())

    total = query.count()
    logs = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "items": logs,
        "total": total,
        "page": page,
        "page_size": page_size,
    }
