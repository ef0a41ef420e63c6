"""Дашборд: KPI-карточки, выпуск по сменам и динамика по датам."""
from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import RequireDashboardAccess, UserInfo
from app.core.database import get_db
from app.schemas.dashboard import DashboardResponse, ShiftStatResponse, StatsBlock, TrendPointResponse
from app.services.derivation import compute_production_stats, production_trend, shift_breakdown
from app.services.record_service import list_records, list_shifts

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireDashboardAccess),
):
    records = await list_records(db)
    shifts = await list_shifts(db)
    return DashboardResponse(
        stats=StatsBlock(**asdict(compute_production_stats(records))),
        shifts=[ShiftStatResponse(**asdict(s)) for s in shift_breakdown(records, shifts)],
        trend=[TrendPointResponse(**asdict(p)) for p in production_trend(records)],
    )
