"""Brigade conformance evaluation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID

from .. import models, schemas, tasks
from ..auth import Identity
from ..stores import BrigadeStore, EquipmentStore, RoleAssignmentStore

# purpose: single completeness judgment for a brigade from independently mutable stores
# inputs: brigade id, verified caller identity
# outputs: ConformanceReport; commit_snapshot hands it to brigadas.tasks.record_validation_snapshot
# status: active

MIN_CO_INVESTIGATORS = 2
STATUS_CONFORMANT = "conforme"
STATUS_IN_PROGRESS = "en_progreso"


@dataclass(frozen=True)
class ConformanceReport:
    brigade_id: UUID
    brigade_name: str
    role_counts: dict[models.BrigadeRole, int]
    lead_ok: bool
    botanist_ok: bool
    technician_ok: bool
    co_investigators_ok: bool
    equipment_catalog: frozenset[str]
    equipment_assigned: frozenset[str]
    equipment_missing: tuple[str, ...]
    equipment_ok: bool
    training_completed: bool
    conformant: bool
    status: str
    validator: Identity
    evaluated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def co_investigator_count(self) -> int:
        return self.role_counts.get(models.BrigadeRole.CO_INVESTIGATOR, 0)

    def to_snapshot(self) -> schemas.ValidationSnapshot:
        return schemas.ValidationSnapshot(
            brigada_id=self.brigade_id,
            has_lead=self.lead_ok,
            has_botanist=self.botanist_ok,
            has_technician=self.technician_ok,
            co_investigator_count=self.co_investigator_count,
            equipment_complete=self.equipment_ok,
            training_completed=self.training_completed,
            validated_at=self.evaluated_at,
            validated_by=self.validator.email,
            notes={
                "estado_conformacion": self.status,
                "validator_id": self.validator.id,
                "equipment_missing": list(self.equipment_missing),
            },
        )


class ConformanceEvaluator:
    def __init__(
        self,
        brigades: BrigadeStore,
        roles: RoleAssignmentStore,
        equipment: EquipmentStore,
    ) -> None:
        self.brigades = brigades
        self.roles = roles
        self.equipment = equipment

    async def evaluate(self, brigade_id: UUID, validator: Identity) -> ConformanceReport:
        """Evaluate ``brigade_id``; raises NotFoundError or StoreError, never a partial report."""

        brigade = await asyncio.to_thread(self.brigades.get, brigade_id)

        # gather propagates the first failure; no report is built from a partial read
        role_counts, catalog, assigned, training_completed = await asyncio.gather(
            asyncio.to_thread(self.roles.counts_by_role, brigade_id),
            asyncio.to_thread(self.equipment.list_catalog),
            asyncio.to_thread(self.equipment.list_assigned_types, brigade_id),
            asyncio.to_thread(self.brigades.get_training_completed, brigade_id),
        )
        return build_report(
            brigade_id=brigade_id,
            brigade_name=brigade.nombre,
            role_counts=role_counts,
            catalog=catalog,
            assigned=assigned,
            training_completed=training_completed,
            validator=validator,
        )

    def commit_snapshot(self, report: ConformanceReport) -> None:
        """Record ``report`` as the brigade's latest validation.

        Independent of ``evaluate`` and safe to repeat; a failed write is
        logged by the task layer and never raised here.
        """

        tasks.enqueue_validation_snapshot(report.to_snapshot().model_dump(mode="json"))


def build_report(
    *,
    brigade_id: UUID,
    brigade_name: str,
    role_counts: dict[models.BrigadeRole, int],
    catalog: set[str] | frozenset[str],
    assigned: set[str] | frozenset[str],
    training_completed: bool,
    validator: Identity,
) -> ConformanceReport:
    counts = {role: role_counts.get(role, 0) for role in models.BrigadeRole}
    lead_ok = counts[models.BrigadeRole.TEAM_LEAD] >= 1
    botanist_ok = counts[models.BrigadeRole.BOTANIST] >= 1
    technician_ok = counts[models.BrigadeRole.ASSISTANT_TECHNICIAN] >= 1
    co_investigators_ok = counts[models.BrigadeRole.CO_INVESTIGATOR] >= MIN_CO_INVESTIGATORS

    missing = tuple(sorted(set(catalog) - set(assigned)))
    equipment_ok = not missing

    # training is advisory and stays out of the conjunction
    conformant = lead_ok and botanist_ok and technician_ok and co_investigators_ok and equipment_ok
    return ConformanceReport(
        brigade_id=brigade_id,
        brigade_name=brigade_name,
        role_counts=counts,
        lead_ok=lead_ok,
        botanist_ok=botanist_ok,
        technician_ok=technician_ok,
        co_investigators_ok=co_investigators_ok,
        equipment_catalog=frozenset(catalog),
        equipment_assigned=frozenset(assigned),
        equipment_missing=missing,
        equipment_ok=equipment_ok,
        training_completed=bool(training_completed),
        conformant=conformant,
        status=STATUS_CONFORMANT if conformant else STATUS_IN_PROGRESS,
        validator=validator,
    )
