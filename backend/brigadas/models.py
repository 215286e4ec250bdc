import enum
import uuid
import sqlalchemy as sa
from sqlalchemy import (
    Column,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    JSON,
    Integer,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from .database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BrigadeRole(str, enum.Enum):
    """Closed set of roles a member can hold inside a brigade."""

    TEAM_LEAD = "team_lead"
    BOTANIST = "botanist"
    ASSISTANT_TECHNICIAN = "assistant_technician"
    CO_INVESTIGATOR = "co_investigator"


class User(Base):
    __tablename__ = "usuarios"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, nullable=False)
    full_name = Column(String)
    rol = Column(String, default="brigadista", nullable=False)
    created_at = Column(DateTime, default=_utcnow)

    brigade_roles = relationship("RoleAssignment", back_populates="user")


class Brigade(Base):
    __tablename__ = "brigadas"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    nombre = Column(String, nullable=False)
    descripcion = Column(Text)
    capacitacion_completada = Column(Boolean, default=False, nullable=False)
    created_by = Column(UUID(as_uuid=True))
    created_at = Column(DateTime, default=_utcnow)

    roles = relationship(
        "RoleAssignment", back_populates="brigade", cascade="all, delete-orphan"
    )
    equipment = relationship(
        "EquipmentAssignment", back_populates="brigade", cascade="all, delete-orphan"
    )


class RoleAssignment(Base):
    __tablename__ = "brigada_roles"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    brigada_id = Column(
        UUID(as_uuid=True), ForeignKey("brigadas.id", ondelete="CASCADE"), nullable=False
    )
    usuario_id = Column(UUID(as_uuid=True), ForeignKey("usuarios.id"), nullable=False)
    rol_en_brigada = Column(
        sa.Enum(
            BrigadeRole,
            name="rol_en_brigada",
            native_enum=False,
            values_callable=lambda roles: [r.value for r in roles],
        ),
        nullable=False,
    )
    assigned_at = Column(DateTime, default=_utcnow)

    __table_args__ = (sa.UniqueConstraint("brigada_id", "usuario_id"),)

    brigade = relationship("Brigade", back_populates="roles")
    user = relationship("User", back_populates="brigade_roles")


class EquipmentCatalogItem(Base):
    __tablename__ = "equipos_catalogo"
    nombre = Column(String, primary_key=True)


class EquipmentAssignment(Base):
    __tablename__ = "brigada_equipos"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    brigada_id = Column(
        UUID(as_uuid=True),
        ForeignKey("brigadas.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tipo_equipo = Column(String, nullable=False)
    cantidad = Column(Integer, default=1, nullable=False)
    assigned_at = Column(DateTime, default=_utcnow)

    brigade = relationship("Brigade", back_populates="equipment")


class ValidationRecord(Base):
    # purpose: last conformance snapshot per brigade, written only by the snapshot commit
    __tablename__ = "validaciones_brigada"
    brigada_id = Column(
        UUID(as_uuid=True), ForeignKey("brigadas.id", ondelete="CASCADE"), primary_key=True
    )
    has_lead = Column(Boolean, nullable=False)
    has_botanist = Column(Boolean, nullable=False)
    has_technician = Column(Boolean, nullable=False)
    co_investigator_count = Column(Integer, nullable=False)
    equipment_complete = Column(Boolean, nullable=False)
    training_completed = Column(Boolean, nullable=False)
    validated_at = Column(DateTime, nullable=False)
    validated_by = Column(String)
    notes = Column(JSON, default=dict)


class Conglomerado(Base):
    __tablename__ = "conglomerados"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    nombre = Column(String, nullable=False)
    descripcion = Column(Text)
    ubicacion = Column(JSON, default=dict)
    created_at = Column(DateTime, default=_utcnow)


class ConglomeradoAssignment(Base):
    __tablename__ = "asignaciones_conglomerados"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    brigada_id = Column(UUID(as_uuid=True), ForeignKey("brigadas.id"), nullable=False)
    conglomerado_id = Column(
        UUID(as_uuid=True), ForeignKey("conglomerados.id"), nullable=False
    )
    assigned_by = Column(UUID(as_uuid=True))
    assigned_at = Column(DateTime, default=_utcnow)


class AuditLog(Base):
    __tablename__ = "audit_logs"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True))
    action = Column(String, nullable=False)
    target_type = Column(String)
    target_id = Column(UUID(as_uuid=True))
    details = Column(JSON, default={})
    created_at = Column(DateTime, default=_utcnow)
