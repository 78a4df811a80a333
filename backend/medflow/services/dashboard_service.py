from datetime import datetime, timezone
from typing import Optional, Sequence
from medflow.schemas.dashboard import DashboardStats, GenderStat
from medflow.schemas.patient import Gender, Patient


def summarize(patients: Sequence[Patient], now: Optional[datetime] = None, recent_limit: int = 5) -> DashboardStats:
    """Headline numbers for the active account's patient list."""
    now = now or datetime.now(timezone.utc)
    total = len(patients)

    genders = []
    for gender in Gender:
        count = sum(1 for p in patients if p.gender == gender)
        percentage = round(count / total * 100, 1) if total else 0.0
        genders.append(GenderStat(label=gender.value, count=count, percentage=percentage))

    added_this_month = sum(
        1 for p in patients
        if p.created_at.year == now.year and p.created_at.month == now.month
    )
    recent = sorted(patients, key=lambda p: p.updated_at, reverse=True)[:recent_limit]

    return DashboardStats(
        total=total,
        genders=genders,
        added_this_month=added_this_month,
        recent=recent,
    )
