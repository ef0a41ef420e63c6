"""AI-аналитика: финансовые потери за период, текстовый отчёт и экспорт в Word."""
from datetime import date
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import RequireAnalyticsAccess, UserInfo
from app.config import settings as app_settings
from app.core.database import get_db
from app.core.exceptions import AnalysisUnavailable
from app.core.logging_config import get_logger
from app.schemas.analytics import (
    AiReportResponse,
    FinancialSummaryResponse,
    PeriodBody,
    ReportExportBody,
)
from app.services import ai_service
from app.services.derivation import (
    FinancialSummary,
    build_ai_payload,
    select_records,
    summarize_losses,
)
from app.services.docx_service import DOCX_MEDIA_TYPE, render_report, report_filename
from app.services.record_service import list_records
from app.services.settings_service import get_settings

router = APIRouter(prefix="/analytics", tags=["analytics"])
logger = get_logger(__name__)


def _period(start_date: Optional[date], end_date: Optional[date]) -> Tuple[Optional[str], Optional[str]]:
    """Период учитывается, только если заданы обе даты."""
    if start_date and end_date:
        return start_date.isoformat(), end_date.isoformat()
    return None, None


async def _selected(db: AsyncSession, start: Optional[str], end: Optional[str]) -> List:
    if start and end:
        records = await list_records(db, date.fromisoformat(start), date.fromisoformat(end))
    else:
        records = await list_records(db)
    return select_records(records, start, end, app_settings.ai_default_records)


def _summary_response(summary: FinancialSummary, count: int) -> FinancialSummaryResponse:
    return FinancialSummaryResponse(
        total_defect_cost=summary.total_defect_cost,
        total_downtime_cost=summary.total_downtime_cost,
        total_losses=summary.total_losses,
        cost_per_defect=summary.cost_per_defect,
        cost_per_minute_downtime=summary.cost_per_minute_downtime,
        records_count=count,
    )


@router.get("/financials", response_model=FinancialSummaryResponse)
async def analytics_financials(
    start_date: Optional[date] = Query(None, description="Начало периода (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="Конец периода (YYYY-MM-DD)"),
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAnalyticsAccess),
):
    start, end = _period(start_date, end_date)
    selected = await _selected(db, start, end)
    settings = await get_settings(db)
    return _summary_response(summarize_losses(selected, settings), len(selected))


@router.post("/ai-report", response_model=AiReportResponse)
async def analytics_ai_report(
    body: PeriodBody,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAnalyticsAccess),
):
    """Сформировать отчёт. Недоступность модели — не ошибка запроса, а available=false."""
    start, end = _period(body.start_date, body.end_date)
    selected = await _selected(db, start, end)
    settings = await get_settings(db)
    payload, summary = build_ai_payload(selected, settings, start, end, len(selected))
    try:
        analysis = await ai_service.summarize(payload)
        available = True
    except AnalysisUnavailable as e:
        logger.warning("AI-анализ недоступен: %s", e)
        analysis = ai_service.UNAVAILABLE_MESSAGE
        available = False
    return AiReportResponse(
        available=available,
        analysis=analysis,
        financials=_summary_response(summary, len(selected)),
        start_date=start,
        end_date=end,
    )


@router.post("/report.docx", response_class=Response)
async def analytics_report_docx(
    body: ReportExportBody,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAnalyticsAccess),
):
    start, end = _period(body.start_date, body.end_date)
    selected = await _selected(db, start, end)
    settings = await get_settings(db)
    data = render_report(body.analysis, summarize_losses(selected, settings), start, end)
    return Response(
        content=data,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{report_filename()}"'},
    )
