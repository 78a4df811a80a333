import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union
from pydantic import BaseModel, TypeAdapter
from medflow.schemas.patient import Patient, PatientBase
from medflow.services.storage import KeyValueStorage
from medflow.utils.logger import get_logger

logger = get_logger(__name__)

_patients_adapter = TypeAdapter(list[Patient])

# Never changed by update()
PROTECTED_FIELDS = {"id", "created_by", "createdBy", "created_at", "createdAt", "updated_at", "updatedAt"}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _after(previous: datetime) -> datetime:
    now = _now()
    if now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


class PatientStore:
    """Owns the full patient collection stored under ``<namespace>_patients``.

    Reads deserialize the whole array and writes rewrite it; lookups are
    linear scans in storage order.
    """

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage
        self.patients_key = storage.key("patients")

    def list_all(self) -> list[Patient]:
        raw = self.storage.get_item(self.patients_key)
        return _patients_adapter.validate_json(raw) if raw else []

    def list_for(self, account_id: str) -> list[Patient]:
        return [p for p in self.list_all() if p.created_by == account_id]

    def get(self, patient_id: str) -> Optional[Patient]:
        return next((p for p in self.list_all() if p.id == patient_id), None)

    def create(self, data: PatientBase, account_id: str) -> Patient:
        with self.storage.lock:
            patients = self.list_all()
            now = _now()
            patient = Patient(
                **PatientBase.model_validate(data.model_dump()).model_dump(),
                id=uuid.uuid4().hex,
                created_by=account_id,
                created_at=now,
                updated_at=now,
            )
            patients.append(patient)
            self._save(patients)
        logger.info(f"Created patient {patient.id} for account {account_id}")
        return patient

    def update(self, patient_id: str, changes: Union[BaseModel, dict[str, Any]]) -> Optional[Patient]:
        if isinstance(changes, BaseModel):
            changes = changes.model_dump(exclude_unset=True)
        with self.storage.lock:
            patients = self.list_all()
            index = next((i for i, p in enumerate(patients) if p.id == patient_id), None)
            if index is None:
                logger.debug(f"Update skipped, patient {patient_id} not found")
                return None

            current = patients[index]
            merged = current.model_dump()
            merged.update({k: v for k, v in changes.items() if k not in PROTECTED_FIELDS})
            merged["updated_at"] = _after(current.updated_at)
            patients[index] = Patient.model_validate(merged)
            self._save(patients)
        logger.info(f"Updated patient {patient_id}")
        return patients[index]

    def delete(self, patient_id: str) -> bool:
        with self.storage.lock:
            patients = self.list_all()
            remaining = [p for p in patients if p.id != patient_id]
            if len(remaining) == len(patients):
                logger.debug(f"Delete skipped, patient {patient_id} not found")
                return False
            self._save(remaining)
        logger.info(f"Deleted patient {patient_id}")
        return True

    def _save(self, patients: list[Patient]) -> None:
        self.storage.set_item(self.patients_key, _patients_adapter.dump_json(patients, by_alias=True).decode())
