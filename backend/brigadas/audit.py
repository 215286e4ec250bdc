from datetime import datetime, timezone
from uuid import UUID
from sqlalchemy.orm import Session
from . import models


def as_uuid(value: str | UUID | None) -> UUID | None:
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


def log_action(
    db: Session,
    user_id: str | UUID | None,
    action: str,
    target_type: str | None = None,
    target_id: str | UUID | None = None,
    details: dict | None = None,
):
    details = dict(details or {})
    actor = as_uuid(user_id)
    if actor is None and user_id is not None:
        # identities issued outside the platform may carry non-uuid subjects
        details.setdefault("actor", str(user_id))
    log = models.AuditLog(
        user_id=actor,
        action=action,
        target_type=target_type,
        target_id=as_uuid(target_id),
        details=details,
        created_at=datetime.now(timezone.utc),
    )
    db.add(log)
    db.commit()
    db.refresh(log)
    return log

