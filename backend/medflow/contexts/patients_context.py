"""
Patients context: the active account's patient list and its search view.

State is an immutable ``PatientsState`` snapshot; every operation returns the
replacement snapshot. The list is re-derived from the store whenever the
session changes, and after updates and deletes. Additions are appended to
the in-memory list without a reload. Snapshot replacement is serialized by
a re-entrant lock so concurrent requests do not lose each other's changes.
"""

import threading
from dataclasses import dataclass, replace
from typing import Iterable, Optional
from medflow.contexts.session_context import SessionContext, SessionState
from medflow.exceptions import NotAuthenticated
from medflow.schemas.patient import GENDER_FILTER_ALL, Gender, Patient, PatientBase, PatientUpdate
from medflow.services.patient_store import PatientStore
from medflow.utils.logger import get_logger

logger = get_logger(__name__)

GENDER_FILTERS = (GENDER_FILTER_ALL,) + tuple(g.value for g in Gender)


def matches(patient: Patient, search_query: str, gender_filter: str) -> bool:
    needle = search_query.lower()
    matches_search = (
        search_query == ""
        or needle in patient.name.lower()
        or needle in patient.diagnosis.lower()
    )
    matches_gender = gender_filter == GENDER_FILTER_ALL or patient.gender.value == gender_filter
    return matches_search and matches_gender


def filter_patients(patients: Iterable[Patient], search_query: str = "", gender_filter: str = GENDER_FILTER_ALL) -> list[Patient]:
    return [p for p in patients if matches(p, search_query, gender_filter)]


@dataclass(frozen=True)
class PatientsState:
    owner_id: Optional[str] = None
    patients: tuple[Patient, ...] = ()
    search_query: str = ""
    gender_filter: str = GENDER_FILTER_ALL

    @property
    def filtered_patients(self) -> list[Patient]:
        return filter_patients(self.patients, self.search_query, self.gender_filter)

    @property
    def has_active_filters(self) -> bool:
        return self.search_query != "" or self.gender_filter != GENDER_FILTER_ALL


class PatientsContext:
    def __init__(self, patient_store: PatientStore, session_context: SessionContext):
        self.patient_store = patient_store
        self.session_context = session_context
        self.state = PatientsState()
        self._lock = threading.RLock()
        session_context.subscribe(self._load)
        self._load(session_context.state)

    # -- query state ---------------------------------------------------------

    def set_search_query(self, query: str) -> PatientsState:
        with self._lock:
            return self._set(replace(self.state, search_query=query))

    def set_gender_filter(self, gender_filter: str) -> PatientsState:
        if gender_filter not in GENDER_FILTERS:
            raise ValueError(f"Unknown gender filter: {gender_filter!r}")
        with self._lock:
            return self._set(replace(self.state, gender_filter=gender_filter))

    def clear_filters(self) -> PatientsState:
        with self._lock:
            return self._set(replace(self.state, search_query="", gender_filter=GENDER_FILTER_ALL))

    # -- records -------------------------------------------------------------

    def get_patient(self, patient_id: str) -> Optional[Patient]:
        return next((p for p in self.state.patients if p.id == patient_id), None)

    def refresh(self) -> PatientsState:
        return self._load(self.session_context.state)

    def add_patient(self, data: PatientBase) -> PatientsState:
        with self._lock:
            owner_id = self._require_owner()
            try:
                patient = self.patient_store.create(data, owner_id)
            except Exception as e:
                logger.error(f"Error adding patient: {e}")
                raise
            return self._set(replace(self.state, patients=self.state.patients + (patient,)))

    def import_patients(self, candidates: Iterable[PatientBase]) -> PatientsState:
        with self._lock:
            for candidate in candidates:
                self.add_patient(candidate)
            return self.state

    def update_patient(self, patient_id: str, changes: PatientUpdate) -> PatientsState:
        with self._lock:
            self._require_owner()
            try:
                self.patient_store.update(patient_id, changes)
            except Exception as e:
                logger.error(f"Error updating patient {patient_id}: {e}")
                raise
            return self.refresh()

    def delete_patient(self, patient_id: str) -> PatientsState:
        with self._lock:
            self._require_owner()
            try:
                self.patient_store.delete(patient_id)
            except Exception as e:
                logger.error(f"Error deleting patient {patient_id}: {e}")
                raise
            return self.refresh()

    # -- internals -----------------------------------------------------------

    def _require_owner(self) -> str:
        owner_id = self.session_context.state.user_id
        if owner_id is None:
            raise NotAuthenticated()
        return owner_id

    def _load(self, session: SessionState) -> PatientsState:
        with self._lock:
            if not session.is_authenticated:
                return self._set(replace(self.state, owner_id=None, patients=()))
            try:
                patients = self.patient_store.list_for(session.user_id)
            except Exception as e:
                logger.error(f"Error loading patients: {e}")
                raise
            return self._set(replace(self.state, owner_id=session.user_id, patients=tuple(patients)))

    def _set(self, state: PatientsState) -> PatientsState:
        with self._lock:
            self.state = state
        return state
