import asyncio
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session, sessionmaker

from .. import audit, models, schemas
from ..auth import Identity, get_current_user
from ..database import get_db, get_session_factory
from ..errors import NotConformantError, NotFoundError
from ..rbac import get_admin_user
from ..services.checklist import format_checklist
from ..services.conformance import ConformanceEvaluator, ConformanceReport
from ..stores import (
    BrigadeStore,
    EquipmentStore,
    RoleAssignmentStore,
    ValidationRecordStore,
    parse_role,
)

router = APIRouter(prefix="/api/brigadas", tags=["brigadas"])


def get_brigade_store(factory: sessionmaker = Depends(get_session_factory)) -> BrigadeStore:
    return BrigadeStore(factory)


def get_role_store(factory: sessionmaker = Depends(get_session_factory)) -> RoleAssignmentStore:
    return RoleAssignmentStore(factory)


def get_equipment_store(factory: sessionmaker = Depends(get_session_factory)) -> EquipmentStore:
    return EquipmentStore(factory)


def get_record_store(factory: sessionmaker = Depends(get_session_factory)) -> ValidationRecordStore:
    return ValidationRecordStore(factory)


def get_evaluator(
    brigades: BrigadeStore = Depends(get_brigade_store),
    roles: RoleAssignmentStore = Depends(get_role_store),
    equipment: EquipmentStore = Depends(get_equipment_store),
) -> ConformanceEvaluator:
    return ConformanceEvaluator(brigades, roles, equipment)


def _schedule_snapshot(
    background_tasks: BackgroundTasks,
    evaluator: ConformanceEvaluator,
    report: ConformanceReport,
) -> None:
    # runs after the response is sent; a failed write never changes the checklist
    background_tasks.add_task(evaluator.commit_snapshot, report)


@router.get("/", response_model=list[schemas.BrigadeOut])
def list_brigades(
    brigades: BrigadeStore = Depends(get_brigade_store),
    identity: Identity = Depends(get_current_user),
):
    return brigades.list()


@router.post("/", response_model=schemas.BrigadeOut)
def create_brigade(
    payload: schemas.BrigadeCreate,
    db: Session = Depends(get_db),
    brigades: BrigadeStore = Depends(get_brigade_store),
    roles: RoleAssignmentStore = Depends(get_role_store),
    identity: Identity = Depends(get_current_user),
    admin: models.User = Depends(get_admin_user),
):
    # every member is checked before the brigade row exists
    members = [(m.usuario_id, parse_role(m.rol_en_brigada)) for m in payload.miembros]
    for usuario_id, _ in members:
        if db.get(models.User, usuario_id) is None:
            raise NotFoundError(f"Usuario {usuario_id} no encontrado")
    brigade = brigades.create(payload.nombre, payload.descripcion, created_by=admin.id)
    for usuario_id, role in members:
        roles.upsert_role(brigade.id, usuario_id, role)
    audit.log_action(
        db,
        identity.id,
        "create_brigade",
        "brigade",
        brigade.id,
        {"nombre": brigade.nombre, "miembros": len(members)},
    )
    return brigade


@router.get("/equipos/catalogo", response_model=schemas.EquipmentCatalogOut)
def equipment_catalog(
    equipment: EquipmentStore = Depends(get_equipment_store),
    identity: Identity = Depends(get_current_user),
):
    return schemas.EquipmentCatalogOut(equipos=sorted(equipment.list_catalog()))


@router.post("/conglomerados", response_model=schemas.ConglomeradoOut)
def create_conglomerado(
    payload: schemas.ConglomeradoCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_user),
    admin: models.User = Depends(get_admin_user),
):
    obj = models.Conglomerado(**payload.model_dump())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    audit.log_action(db, identity.id, "create_conglomerado", "conglomerado", obj.id)
    return obj


@router.post("/asignar-conglomerado", response_model=schemas.ConglomeradoAssignmentOut)
async def dispatch_to_conglomerado(
    payload: schemas.ConglomeradoAssignmentCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    evaluator: ConformanceEvaluator = Depends(get_evaluator),
    identity: Identity = Depends(get_current_user),
    admin: models.User = Depends(get_admin_user),
):
    if db.get(models.Conglomerado, payload.conglomerado_id) is None:
        raise NotFoundError(f"Conglomerado {payload.conglomerado_id} no encontrado")
    report = await evaluator.evaluate(payload.brigada_id, identity)
    if not report.conformant:
        # background tasks are dropped once the error handler replaces the response
        await asyncio.to_thread(evaluator.commit_snapshot, report)
        raise NotConformantError(
            "La brigada no cumple los requisitos mínimos para ser asignada",
            format_checklist(report).errors,
        )
    assignment = models.ConglomeradoAssignment(
        brigada_id=payload.brigada_id,
        conglomerado_id=payload.conglomerado_id,
        assigned_by=admin.id,
    )
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    _schedule_snapshot(background_tasks, evaluator, report)
    audit.log_action(
        db,
        identity.id,
        "dispatch_brigade",
        "brigade",
        payload.brigada_id,
        {"conglomerado_id": str(payload.conglomerado_id)},
    )
    return assignment


@router.get("/{brigade_id}", response_model=schemas.BrigadeOut)
def get_brigade(
    brigade_id: UUID,
    brigades: BrigadeStore = Depends(get_brigade_store),
    identity: Identity = Depends(get_current_user),
):
    return brigades.get(brigade_id)


@router.get("/{brigade_id}/roles", response_model=list[schemas.RoleAssignmentOut])
def list_roles(
    brigade_id: UUID,
    brigades: BrigadeStore = Depends(get_brigade_store),
    roles: RoleAssignmentStore = Depends(get_role_store),
    identity: Identity = Depends(get_current_user),
):
    brigades.get(brigade_id)
    return roles.list_for_brigade(brigade_id)


@router.get("/{brigade_id}/checklist-conformacion", response_model=schemas.Checklist)
async def conformance_checklist(
    brigade_id: UUID,
    background_tasks: BackgroundTasks,
    evaluator: ConformanceEvaluator = Depends(get_evaluator),
    identity: Identity = Depends(get_current_user),
):
    report = await evaluator.evaluate(brigade_id, identity)
    checklist = format_checklist(report)
    _schedule_snapshot(background_tasks, evaluator, report)
    return checklist


@router.get("/{brigade_id}/validacion", response_model=schemas.ValidationRecordOut)
def last_validation(
    brigade_id: UUID,
    records: ValidationRecordStore = Depends(get_record_store),
    identity: Identity = Depends(get_current_user),
):
    return records.get(brigade_id)


@router.post("/{brigade_id}/asignar-rol", response_model=schemas.RoleAssignmentOut)
def assign_role(
    brigade_id: UUID,
    payload: schemas.RoleAssignmentCreate,
    db: Session = Depends(get_db),
    brigades: BrigadeStore = Depends(get_brigade_store),
    roles: RoleAssignmentStore = Depends(get_role_store),
    identity: Identity = Depends(get_current_user),
    admin: models.User = Depends(get_admin_user),
):
    role = parse_role(payload.rol_en_brigada)
    brigades.get(brigade_id)
    if db.get(models.User, payload.usuario_id) is None:
        raise NotFoundError(f"Usuario {payload.usuario_id} no encontrado")
    assignment = roles.upsert_role(brigade_id, payload.usuario_id, role)
    audit.log_action(
        db,
        identity.id,
        "assign_role",
        "brigade",
        brigade_id,
        {"usuario_id": str(payload.usuario_id), "rol_en_brigada": role.value},
    )
    return assignment


@router.post("/{brigade_id}/equipos", response_model=schemas.EquipmentAssignmentAck)
def assign_equipment(
    brigade_id: UUID,
    payload: schemas.EquipmentAssignmentCreate,
    db: Session = Depends(get_db),
    brigades: BrigadeStore = Depends(get_brigade_store),
    equipment: EquipmentStore = Depends(get_equipment_store),
    identity: Identity = Depends(get_current_user),
    admin: models.User = Depends(get_admin_user),
):
    brigades.get(brigade_id)
    rows = equipment.add_assignments(brigade_id, payload.equipos)
    audit.log_action(
        db,
        identity.id,
        "assign_equipment",
        "brigade",
        brigade_id,
        {"equipos": [item.model_dump() for item in payload.equipos]},
    )
    return schemas.EquipmentAssignmentAck(
        mensaje="Equipos asignados", brigada_id=brigade_id, insertados=len(rows)
    )


@router.put("/{brigade_id}/capacitacion", response_model=schemas.BrigadeOut)
def update_training(
    brigade_id: UUID,
    payload: schemas.TrainingUpdate,
    db: Session = Depends(get_db),
    brigades: BrigadeStore = Depends(get_brigade_store),
    identity: Identity = Depends(get_current_user),
    admin: models.User = Depends(get_admin_user),
):
    brigade = brigades.set_training_completed(brigade_id, payload.capacitacion_completada)
    audit.log_action(
        db,
        identity.id,
        "update_training",
        "brigade",
        brigade_id,
        {"capacitacion_completada": payload.capacitacion_completada},
    )
    return brigade
