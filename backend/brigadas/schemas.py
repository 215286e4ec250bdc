from datetime import datetime
from typing import Optional, Any, Dict, List, Literal
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID

from .models import BrigadeRole


class RoleAssignmentCreate(BaseModel):
    usuario_id: UUID
    # validated against BrigadeRole by the store so unknown roles map to 400
    rol_en_brigada: str


class BrigadeCreate(BaseModel):
    nombre: str = Field(min_length=1)
    descripcion: Optional[str] = None
    miembros: List[RoleAssignmentCreate] = []


class BrigadeOut(BaseModel):
    id: UUID
    nombre: str
    descripcion: Optional[str] = None
    capacitacion_completada: bool
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class RoleAssignmentOut(BaseModel):
    id: UUID
    brigada_id: UUID
    usuario_id: UUID
    rol_en_brigada: BrigadeRole
    assigned_at: datetime
    model_config = ConfigDict(from_attributes=True)


class EquipmentItem(BaseModel):
    tipo_equipo: str = Field(min_length=1)
    cantidad: int = Field(default=1, ge=1)


class EquipmentAssignmentCreate(BaseModel):
    equipos: List[EquipmentItem] = Field(min_length=1)


class EquipmentAssignmentAck(BaseModel):
    mensaje: str
    brigada_id: UUID
    insertados: int


class EquipmentCatalogOut(BaseModel):
    equipos: List[str]


class TrainingUpdate(BaseModel):
    capacitacion_completada: bool


class ConglomeradoCreate(BaseModel):
    nombre: str = Field(min_length=1)
    descripcion: Optional[str] = None
    ubicacion: Dict[str, Any] = {}


class ConglomeradoOut(BaseModel):
    id: UUID
    nombre: str
    descripcion: Optional[str] = None
    ubicacion: Dict[str, Any] = {}
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class ConglomeradoAssignmentCreate(BaseModel):
    brigada_id: UUID
    conglomerado_id: UUID


class ConglomeradoAssignmentOut(BaseModel):
    id: UUID
    brigada_id: UUID
    conglomerado_id: UUID
    assigned_by: Optional[UUID] = None
    assigned_at: datetime
    model_config = ConfigDict(from_attributes=True)


class ValidationSnapshot(BaseModel):
    """Payload committed to ``validaciones_brigada`` after an evaluation."""

    brigada_id: UUID
    has_lead: bool
    has_botanist: bool
    has_technician: bool
    co_investigator_count: int
    equipment_complete: bool
    training_completed: bool
    validated_at: datetime
    validated_by: Optional[str] = None
    notes: Dict[str, Any] = {}


class ValidationRecordOut(ValidationSnapshot):
    model_config = ConfigDict(from_attributes=True)


class RequirementStatus(BaseModel):
    required: bool = True
    completed: bool
    quantity: int
    detail: Optional[List[str]] = None


class PendingAction(BaseModel):
    requisito: str
    accion: Literal["asignar_rol", "asignar_equipos", "actualizar_capacitacion"]
    metodo: Literal["POST", "PUT"]
    ruta: str
    descripcion: str
    payload_ejemplo: Dict[str, Any]


class Checklist(BaseModel):
    brigada_id: UUID
    nombre: str
    requisitos: Dict[str, RequirementStatus]
    errors: List[str]
    warnings: List[str]
    pending_actions: List[PendingAction]
    cumple_minimo: bool
    estado_conformacion: Literal["conforme", "en_progreso"]
    validado_en: datetime


class AuditLogOut(BaseModel):
    id: UUID
    user_id: Optional[UUID] = None
    action: str
    target_type: str | None = None
    target_id: UUID | None = None
    details: Dict[str, Any] = {}
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)
