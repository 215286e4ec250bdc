"""Database-backed stores for brigades, role and equipment assignments, snapshots."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterable, Iterator
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from . import models, schemas
from .errors import NotFoundError, StoreError, ValidationError

# purpose: collaborator contracts used by the conformance evaluator and routes
# status: active
# depends_on: brigadas.models, brigadas.database.SessionLocal

logger = logging.getLogger(__name__)


def parse_role(value: str | models.BrigadeRole) -> models.BrigadeRole:
    """Return the closed role member for ``value`` or raise ``ValidationError``."""

    if isinstance(value, models.BrigadeRole):
        return value
    try:
        return models.BrigadeRole(value)
    except ValueError:
        allowed = ", ".join(role.value for role in models.BrigadeRole)
        raise ValidationError(
            f"Rol inválido '{value}'. Valores permitidos: {allowed}"
        ) from None


def _insert_for(db: Session, table):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(table)
    if dialect == "sqlite":
        return sqlite.insert(table)
    raise StoreError(f"Upsert not supported for dialect {dialect}")


class _SessionStore:
    """Open one session per call so stores can be used from worker threads."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("%s.%s failed", type(self).__name__, operation)
            raise StoreError(f"{operation} failed") from exc
        finally:
            db.close()


class BrigadeStore(_SessionStore):
    def get(self, brigade_id: UUID) -> models.Brigade:
        with self._session("get") as db:
            brigade = db.get(models.Brigade, brigade_id)
        if brigade is None:
            raise NotFoundError(f"Brigada {brigade_id} no encontrada")
        return brigade

    def list(self) -> list[models.Brigade]:
        with self._session("list") as db:
            return list(
                db.scalars(select(models.Brigade).order_by(models.Brigade.created_at))
            )

    def create(
        self, nombre: str, descripcion: str | None = None, created_by: UUID | None = None
    ) -> models.Brigade:
        with self._session("create") as db:
            brigade = models.Brigade(
                nombre=nombre, descripcion=descripcion, created_by=created_by
            )
            db.add(brigade)
            db.commit()
            db.refresh(brigade)
            return brigade

    def get_training_completed(self, brigade_id: UUID) -> bool:
        with self._session("get_training_completed") as db:
            value = db.scalar(
                select(models.Brigade.capacitacion_completada).where(
                    models.Brigade.id == brigade_id
                )
            )
        if value is None:
            raise NotFoundError(f"Brigada {brigade_id} no encontrada")
        return bool(value)

    def set_training_completed(self, brigade_id: UUID, completed: bool) -> models.Brigade:
        with self._session("set_training_completed") as db:
            brigade = db.get(models.Brigade, brigade_id)
            if brigade is None:
                raise NotFoundError(f"Brigada {brigade_id} no encontrada")
            brigade.capacitacion_completada = completed
            db.commit()
            db.refresh(brigade)
            return brigade


class RoleAssignmentStore(_SessionStore):
    def upsert_role(
        self, brigade_id: UUID, user_id: UUID, role: str | models.BrigadeRole
    ) -> models.RoleAssignment:
        """Assign ``role``; a second call for the same member overwrites it."""

        role = parse_role(role)
        table = models.RoleAssignment.__table__
        with self._session("upsert_role") as db:
            stmt = _insert_for(db, table).values(
                brigada_id=brigade_id,
                usuario_id=user_id,
                rol_en_brigada=role,
                assigned_at=datetime.now(timezone.utc),
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[table.c.brigada_id, table.c.usuario_id],
                set_={
                    "rol_en_brigada": stmt.excluded.rol_en_brigada,
                    "assigned_at": stmt.excluded.assigned_at,
                },
            )
            db.execute(stmt)
            db.commit()
            return db.scalars(
                select(models.RoleAssignment).where(
                    models.RoleAssignment.brigada_id == brigade_id,
                    models.RoleAssignment.usuario_id == user_id,
                )
            ).one()

    def count_by_role(self, brigade_id: UUID, role: str | models.BrigadeRole) -> int:
        role = parse_role(role)
        with self._session("count_by_role") as db:
            return db.scalar(
                select(func.count())
                .select_from(models.RoleAssignment)
                .where(
                    models.RoleAssignment.brigada_id == brigade_id,
                    models.RoleAssignment.rol_en_brigada == role,
                )
            )

    def counts_by_role(self, brigade_id: UUID) -> dict[models.BrigadeRole, int]:
        counts = {role: 0 for role in models.BrigadeRole}
        with self._session("counts_by_role") as db:
            rows = db.execute(
                select(models.RoleAssignment.rol_en_brigada, func.count())
                .where(models.RoleAssignment.brigada_id == brigade_id)
                .group_by(models.RoleAssignment.rol_en_brigada)
            ).all()
        for role, count in rows:
            counts[parse_role(role)] = count
        return counts

    def list_for_brigade(self, brigade_id: UUID) -> list[models.RoleAssignment]:
        with self._session("list_for_brigade") as db:
            return list(
                db.scalars(
                    select(models.RoleAssignment)
                    .where(models.RoleAssignment.brigada_id == brigade_id)
                    .order_by(models.RoleAssignment.assigned_at)
                )
            )


class EquipmentStore(_SessionStore):
    def list_catalog(self) -> set[str]:
        with self._session("list_catalog") as db:
            return set(db.scalars(select(models.EquipmentCatalogItem.nombre)))

    def add_catalog_items(self, names: Iterable[str]) -> int:
        """Insert missing catalog names, returning how many were new."""

        wanted = {name.strip() for name in names if name and name.strip()}
        with self._session("add_catalog_items") as db:
            existing = set(db.scalars(select(models.EquipmentCatalogItem.nombre)))
            new = sorted(wanted - existing)
            db.add_all(models.EquipmentCatalogItem(nombre=name) for name in new)
            db.commit()
        return len(new)

    def list_assigned_types(self, brigade_id: UUID) -> set[str]:
        with self._session("list_assigned_types") as db:
            return set(
                db.scalars(
                    select(models.EquipmentAssignment.tipo_equipo)
                    .where(models.EquipmentAssignment.brigada_id == brigade_id)
                    .distinct()
                )
            )

    def add_assignments(
        self, brigade_id: UUID, items: Iterable[schemas.EquipmentItem]
    ) -> list[models.EquipmentAssignment]:
        with self._session("add_assignments") as db:
            rows = [
                models.EquipmentAssignment(
                    brigada_id=brigade_id,
                    tipo_equipo=item.tipo_equipo,
                    cantidad=item.cantidad,
                )
                for item in items
            ]
            db.add_all(rows)
            db.commit()
            for row in rows:
                db.refresh(row)
            return rows


class ValidationRecordStore(_SessionStore):
    def upsert(self, snapshot: schemas.ValidationSnapshot) -> models.ValidationRecord:
        """Write the whole snapshot in one statement, last write wins."""

        table = models.ValidationRecord.__table__
        values = {
            "brigada_id": snapshot.brigada_id,
            "has_lead": snapshot.has_lead,
            "has_botanist": snapshot.has_botanist,
            "has_technician": snapshot.has_technician,
            "co_investigator_count": snapshot.co_investigator_count,
            "equipment_complete": snapshot.equipment_complete,
            "training_completed": snapshot.training_completed,
            "validated_at": snapshot.validated_at,
            "validated_by": snapshot.validated_by,
            "notes": snapshot.notes,
        }
        with self._session("upsert") as db:
            stmt = _insert_for(db, table).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=[table.c.brigada_id],
                set_={key: value for key, value in values.items() if key != "brigada_id"},
            )
            db.execute(stmt)
            db.commit()
            return db.get(models.ValidationRecord, snapshot.brigada_id)

    def get(self, brigade_id: UUID) -> models.ValidationRecord:
        with self._session("get") as db:
            record = db.get(models.ValidationRecord, brigade_id)
        if record is None:
            raise NotFoundError(f"La brigada {brigade_id} no tiene validaciones registradas")
        return record
