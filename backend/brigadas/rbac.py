from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from . import models
from .auth import Identity, get_current_user
from .database import get_db
from .errors import AuthError

# purpose: restrict brigade mutations to platform administrators
# status: active

ADMIN_ROLE = "admin"


def require_admin(db: Session, identity: Identity) -> models.User:
    """Return the caller's user row if it holds the admin role, otherwise raise 403."""

    user = db.query(models.User).filter(models.User.email == identity.email).first()
    if not user or user.rol != ADMIN_ROLE:
        raise AuthError("Solo administradores pueden realizar esta acción", status_code=403)
    return user


def get_admin_user(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_user),
) -> models.User:
    return require_admin(db, identity)
