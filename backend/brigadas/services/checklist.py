"""Render a conformance report as the user-facing checklist."""

from __future__ import annotations

from typing import Any, NamedTuple

from .. import models, schemas
from .conformance import MIN_CO_INVESTIGATORS, ConformanceReport

ROUTE_PREFIX = "/api/brigadas"
_USER_PLACEHOLDER = "<usuario_id>"


class _RoleRequirement(NamedTuple):
    key: str
    role: models.BrigadeRole
    minimum: int
    label: str


# fixed order: errors and pending actions are emitted in this sequence
_ROLE_REQUIREMENTS = (
    _RoleRequirement("team_lead", models.BrigadeRole.TEAM_LEAD, 1, "un jefe de brigada"),
    _RoleRequirement("botanist", models.BrigadeRole.BOTANIST, 1, "un botánico"),
    _RoleRequirement(
        "assistant_technician",
        models.BrigadeRole.ASSISTANT_TECHNICIAN,
        1,
        "un auxiliar técnico",
    ),
    _RoleRequirement(
        "co_investigators",
        models.BrigadeRole.CO_INVESTIGATOR,
        MIN_CO_INVESTIGATORS,
        f"{MIN_CO_INVESTIGATORS} coinvestigadores",
    ),
)


def _role_ok(report: ConformanceReport, key: str) -> bool:
    return {
        "team_lead": report.lead_ok,
        "botanist": report.botanist_ok,
        "assistant_technician": report.technician_ok,
        "co_investigators": report.co_investigators_ok,
    }[key]


def _action(
    requirement: str,
    accion: str,
    metodo: str,
    ruta: str,
    descripcion: str,
    payload: dict[str, Any],
) -> schemas.PendingAction:
    return schemas.PendingAction(
        requisito=requirement,
        accion=accion,
        metodo=metodo,
        ruta=ruta,
        descripcion=descripcion,
        payload_ejemplo=payload,
    )


def format_checklist(report: ConformanceReport) -> schemas.Checklist:
    """Build the checklist for ``report`` without touching any store.

    ``cumple_minimo`` and ``estado_conformacion`` are copied from the report,
    never recomputed here.
    """

    base = f"{ROUTE_PREFIX}/{report.brigade_id}"
    requisitos: dict[str, schemas.RequirementStatus] = {}
    errors: list[str] = []
    warnings: list[str] = []
    blocking_actions: list[schemas.PendingAction] = []
    advisory_actions: list[schemas.PendingAction] = []

    for req in _ROLE_REQUIREMENTS:
        count = report.role_counts.get(req.role, 0)
        completed = _role_ok(report, req.key)
        requisitos[req.key] = schemas.RequirementStatus(completed=completed, quantity=count)
        if completed:
            continue
        missing = req.minimum - count
        errors.append(f"Falta asignar {req.label} (asignados: {count}, requeridos: {req.minimum})")
        blocking_actions.append(
            _action(
                req.key,
                "asignar_rol",
                "POST",
                f"{base}/asignar-rol",
                f"Asignar el rol {req.role.value} a {missing} miembro(s) más",
                {"usuario_id": _USER_PLACEHOLDER, "rol_en_brigada": req.role.value},
            )
        )

    covered = len(report.equipment_catalog & report.equipment_assigned)
    requisitos["equipment"] = schemas.RequirementStatus(
        completed=report.equipment_ok,
        quantity=covered,
        detail=list(report.equipment_missing),
    )
    if not report.equipment_ok:
        errors.append(
            "Equipo incompleto, faltan: " + ", ".join(report.equipment_missing)
        )
        blocking_actions.append(
            _action(
                "equipment",
                "asignar_equipos",
                "POST",
                f"{base}/equipos",
                f"Registrar {len(report.equipment_missing)} tipo(s) de equipo faltante(s)",
                {
                    "equipos": [
                        {"tipo_equipo": name, "cantidad": 1}
                        for name in report.equipment_missing
                    ]
                },
            )
        )

    requisitos["training"] = schemas.RequirementStatus(
        completed=report.training_completed,
        quantity=1 if report.training_completed else 0,
    )
    if not report.training_completed:
        warnings.append("La capacitación de la brigada no ha sido completada")
        advisory_actions.append(
            _action(
                "training",
                "actualizar_capacitacion",
                "PUT",
                f"{base}/capacitacion",
                "Marcar la capacitación como completada",
                {"capacitacion_completada": True},
            )
        )

    return schemas.Checklist(
        brigada_id=report.brigade_id,
        nombre=report.brigade_name,
        requisitos=requisitos,
        errors=errors,
        warnings=warnings,
        pending_actions=blocking_actions + advisory_actions,
        cumple_minimo=report.conformant,
        estado_conformacion=report.status,
        validado_en=report.evaluated_at,
    )
