import dataclasses
import uuid

from brigadas.auth import Identity
from brigadas.models import BrigadeRole
from brigadas.services.checklist import format_checklist
from brigadas.services.conformance import build_report

VALIDATOR = Identity(id=str(uuid.uuid4()), email="validador@example.com")

FULL_ROLES = {
    BrigadeRole.TEAM_LEAD: 1,
    BrigadeRole.BOTANIST: 1,
    BrigadeRole.ASSISTANT_TECHNICIAN: 1,
    BrigadeRole.CO_INVESTIGATOR: 2,
}


def _report(role_counts=None, catalog=("GPS", "Machete"), assigned=("GPS", "Machete"), training=True):
    return build_report(
        brigade_id=uuid.uuid4(),
        brigade_name="Brigada Sur",
        role_counts=FULL_ROLES if role_counts is None else role_counts,
        catalog=set(catalog),
        assigned=set(assigned),
        training_completed=training,
        validator=VALIDATOR,
    )


def test_conformant_brigade_has_clean_checklist():
    checklist = format_checklist(_report())
    assert checklist.estado_conformacion == "conforme"
    assert checklist.cumple_minimo is True
    assert checklist.errors == []
    assert checklist.warnings == []
    assert checklist.pending_actions == []
    assert list(checklist.requisitos) == [
        "team_lead",
        "botanist",
        "assistant_technician",
        "co_investigators",
        "equipment",
        "training",
    ]
    assert all(req.required for req in checklist.requisitos.values())
    assert all(req.completed for req in checklist.requisitos.values())


def test_empty_brigade_reports_five_errors_in_fixed_order():
    report = _report(role_counts={}, assigned=(), training=False)
    checklist = format_checklist(report)

    assert checklist.estado_conformacion == "en_progreso"
    assert checklist.cumple_minimo is False
    assert len(checklist.errors) == 5
    assert "jefe de brigada" in checklist.errors[0]
    assert "botánico" in checklist.errors[1]
    assert "auxiliar técnico" in checklist.errors[2]
    assert "coinvestigadores" in checklist.errors[3]
    assert checklist.errors[4].startswith("Equipo incompleto")
    assert len(checklist.warnings) == 1

    assert [a.requisito for a in checklist.pending_actions] == [
        "team_lead",
        "botanist",
        "assistant_technician",
        "co_investigators",
        "equipment",
        "training",
    ]
    assert [a.accion for a in checklist.pending_actions] == [
        "asignar_rol",
        "asignar_rol",
        "asignar_rol",
        "asignar_rol",
        "asignar_equipos",
        "actualizar_capacitacion",
    ]


def test_missing_lead_is_reported_first():
    checklist = format_checklist(
        _report(role_counts={**FULL_ROLES, BrigadeRole.TEAM_LEAD: 0}, assigned=("GPS",))
    )
    assert checklist.cumple_minimo is False
    assert len(checklist.errors) == 2
    assert "jefe de brigada" in checklist.errors[0]
    first = checklist.pending_actions[0]
    assert first.metodo == "POST"
    assert first.ruta.endswith("/asignar-rol")
    assert first.payload_ejemplo["rol_en_brigada"] == "team_lead"


def test_equipment_requirement_lists_missing_types_sorted():
    checklist = format_checklist(
        _report(catalog=("Machete", "GPS", "Brújula"), assigned=("GPS", "Linterna"))
    )
    equipment = checklist.requisitos["equipment"]
    assert equipment.completed is False
    assert equipment.quantity == 1
    assert equipment.detail == ["Brújula", "Machete"]
    action = checklist.pending_actions[0]
    assert action.accion == "asignar_equipos"
    assert action.payload_ejemplo == {
        "equipos": [
            {"tipo_equipo": "Brújula", "cantidad": 1},
            {"tipo_equipo": "Machete", "cantidad": 1},
        ]
    }


def test_incomplete_training_is_only_a_warning():
    checklist = format_checklist(_report(training=False))
    assert checklist.cumple_minimo is True
    assert checklist.errors == []
    assert len(checklist.warnings) == 1
    training = checklist.requisitos["training"]
    assert training.completed is False
    assert training.quantity == 0
    assert len(checklist.pending_actions) == 1
    action = checklist.pending_actions[0]
    assert action.metodo == "PUT"
    assert action.ruta.endswith("/capacitacion")
    assert action.payload_ejemplo == {"capacitacion_completada": True}


def test_role_requirements_report_counts():
    checklist = format_checklist(
        _report(role_counts={**FULL_ROLES, BrigadeRole.CO_INVESTIGATOR: 1})
    )
    co = checklist.requisitos["co_investigators"]
    assert co.completed is False
    assert co.quantity == 1
    assert co.detail is None
    assert "1 miembro(s)" in checklist.pending_actions[0].descripcion


def test_status_fields_are_copied_from_report():
    report = dataclasses.replace(_report(), conformant=False, status="en_progreso")
    checklist = format_checklist(report)
    assert checklist.cumple_minimo is False
    assert checklist.estado_conformacion == "en_progreso"
    assert checklist.errors == []


def test_formatting_is_deterministic():
    report = _report(role_counts={}, assigned=(), training=False)
    assert format_checklist(report) == format_checklist(report)
