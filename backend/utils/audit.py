from typing import Optional

from sqlalchemy.orm import Session
from models.log import Log

def write_log(db: Session, *, actor: Optional[str], action, resource, status="SUCCESS", ip=None, meta=None):
    # Added to the caller's transaction; the operation's own commit persists it
    entry = Log(actor=actor, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    db.add(entry)
    return entry

def client_ip(request) -> Optional[str]:
    return request.client.host if request.client else None
