import os
from typing import Any

from celery import Celery
from celery.utils.log import get_task_logger

from . import schemas
from .database import SessionLocal
from .errors import StoreError
from .stores import ValidationRecordStore

# purpose: commit conformance snapshots outside the checklist request path
# inputs: ValidationSnapshot payloads serialised as JSON-compatible dicts
# outputs: upserted validaciones_brigada rows
# status: active

_logger = get_task_logger(__name__)

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "memory://")
SNAPSHOT_MAX_RETRIES = int(os.getenv("SNAPSHOT_MAX_RETRIES", "3"))

celery_app = Celery("brigadas", broker=CELERY_BROKER_URL)
celery_app.conf.task_always_eager = (
    CELERY_BROKER_URL == "memory://" or os.getenv("TESTING") == "1"
)


def get_record_store() -> ValidationRecordStore:
    return ValidationRecordStore(SessionLocal)


@celery_app.task(
    name="brigadas.tasks.record_validation_snapshot",
    autoretry_for=(StoreError,),
    retry_backoff=True,
    max_retries=SNAPSHOT_MAX_RETRIES,
)
def record_validation_snapshot(payload: dict[str, Any]) -> str:
    snapshot = schemas.ValidationSnapshot.model_validate(payload)
    get_record_store().upsert(snapshot)
    _logger.info(
        "Recorded conformance snapshot for brigade %s (estado=%s)",
        snapshot.brigada_id,
        snapshot.notes.get("estado_conformacion"),
    )
    return "recorded"


def enqueue_validation_snapshot(payload: dict[str, Any]) -> None:
    if celery_app.conf.task_always_eager:
        try:
            record_validation_snapshot(payload)
        except StoreError:
            _logger.exception(
                "Conformance snapshot for brigade %s was not recorded",
                payload.get("brigada_id"),
            )
    else:
        record_validation_snapshot.delay(payload)
