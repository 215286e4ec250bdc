from uuid import UUID
from sqlalchemy.orm import Session
from fastapi import APIRouter, Depends
from ..database import get_db
from ..auth import Identity, get_current_user
from ..rbac import require_admin
from .. import models, schemas, audit

router = APIRouter(prefix="/api/audit", tags=["audit"])


@router.get("/", response_model=list[schemas.AuditLogOut])
def list_logs(
    target_id: UUID | None = None,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_user),
):
    query = db.query(models.AuditLog)
    if target_id:
        # another actor's trail on a target is admin-only
        require_admin(db, identity)
        query = query.filter(models.AuditLog.target_id == target_id)
    else:
        query = query.filter(models.AuditLog.user_id == audit.as_uuid(identity.id))
    return query.order_by(models.AuditLog.created_at.desc()).all()
