from fastapi import APIRouter, Depends, HTTPException
from medflow.auth import get_current_user, get_patients_context
from medflow.contexts.patients_context import PatientsContext, PatientsState
from medflow.schemas.account import Account
from medflow.schemas.patient import Patient, PatientCreate, PatientFilters, PatientListResponse, PatientUpdate

router = APIRouter()


def _list_response(state: PatientsState) -> PatientListResponse:
    filtered = state.filtered_patients
    return PatientListResponse(
        patients=filtered,
        total=len(filtered),
        search=state.search_query,
        gender=state.gender_filter,
        has_active_filters=state.has_active_filters,
    )


def _get_or_404(patients: PatientsContext, patient_id: str) -> Patient:
    # Only records in the active account's list are reachable
    patient = patients.get_patient(patient_id)
    if not patient:
        raise HTTPException(status_code=404, detail=f"Patient {patient_id} not found")
    return patient


@router.get("", response_model=PatientListResponse)
def list_patients(
    patients: PatientsContext = Depends(get_patients_context),
    current_user: Account = Depends(get_current_user),
):
    return _list_response(patients.state)


@router.put("/filters", response_model=PatientListResponse)
def set_filters(
    filters: PatientFilters,
    patients: PatientsContext = Depends(get_patients_context),
    current_user: Account = Depends(get_current_user),
):
    if filters.search is not None:
        patients.set_search_query(filters.search)
    if filters.gender is not None:
        patients.set_gender_filter(filters.gender)
    return _list_response(patients.state)


@router.delete("/filters", response_model=PatientListResponse)
def clear_filters(
    patients: PatientsContext = Depends(get_patients_context),
    current_user: Account = Depends(get_current_user),
):
    return _list_response(patients.clear_filters())


@router.get("/{patient_id}", response_model=Patient)
def get_patient(
    patient_id: str,
    patients: PatientsContext = Depends(get_patients_context),
    current_user: Account = Depends(get_current_user),
):
    return _get_or_404(patients, patient_id)


@router.post("", response_model=Patient, status_code=201)
def create_patient(
    data: PatientCreate,
    patients: PatientsContext = Depends(get_patients_context),
    current_user: Account = Depends(get_current_user),
):
    state = patients.add_patient(data)
    return state.patients[-1]


@router.put("/{patient_id}", response_model=Patient)
def update_patient(
    patient_id: str,
    data: PatientUpdate,
    patients: PatientsContext = Depends(get_patients_context),
    current_user: Account = Depends(get_current_user),
):
    _get_or_404(patients, patient_id)
    patients.update_patient(patient_id, data)
    return _get_or_404(patients, patient_id)


@router.delete("/{patient_id}")
def delete_patient(
    patient_id: str,
    patients: PatientsContext = Depends(get_patients_context),
    current_user: Account = Depends(get_current_user),
):
    _get_or_404(patients, patient_id)
    patients.delete_patient(patient_id)
    return {"deleted": True, "patient_id": patient_id}
