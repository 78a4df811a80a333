from fastapi import APIRouter, Depends
from medflow.auth import get_current_user, get_patients_context
from medflow.config import get_settings
from medflow.contexts.patients_context import PatientsContext
from medflow.schemas.account import Account
from medflow.schemas.dashboard import DashboardStats
from medflow.services.dashboard_service import summarize

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(
    patients: PatientsContext = Depends(get_patients_context),
    current_user: Account = Depends(get_current_user),
):
    return summarize(patients.state.patients, recent_limit=get_settings().recent_patients_limit)
