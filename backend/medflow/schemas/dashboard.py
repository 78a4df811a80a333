from pydantic import BaseModel
from medflow.schemas.patient import Patient


class GenderStat(BaseModel):
    label: str
    count: int
    percentage: float


class DashboardStats(BaseModel):
    total: int
    genders: list[GenderStat]
    added_this_month: int
    recent: list[Patient]
